"""Shell, git and gh utilities.

Thin wrappers around subprocess calls for the version-control and
release-hosting commands, plus console output helpers.
"""

from __future__ import annotations

import shlex
import subprocess


def echo_command(*args: str) -> None:
    """Print a command the way a user would type it."""
    print(f"  $ {shlex.join(args)}")


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "tag", "--list").
        check: If True (default), raise CalledProcessError on non-zero exit.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def run(*args: str, check: bool = True) -> subprocess.CompletedProcess[bytes]:
    """Run a command, streaming its output to the terminal.

    Used for the mutating commands (tag, push, release) so the operator sees
    exactly what git and gh report. The command is echoed before it runs.

    Args:
        *args: Command and arguments (e.g., "git", "push", "origin", "v1.0.0").
        check: If True (default), raise CalledProcessError on non-zero exit.
    """
    echo_command(*args)
    return subprocess.run(args, check=check)


def describe_failure(exc: Exception) -> str:
    """Render a subprocess failure as a one-line cause."""
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else ""
        cause = f"exit status {exc.returncode}"
        return f"{cause}: {stderr}" if stderr else cause
    return str(exc)


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    """Print an indented progress line under the current step."""
    print(f"  {msg}")

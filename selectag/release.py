"""Tag creation, tag push and draft release creation.

Each action runs one external command and stops at the first failure. With
config.dry_run set, the command is printed instead of executed.
"""

from __future__ import annotations

import subprocess

from .errors import PushFailed, ReleaseCreationFailed, TagOperationFailed
from .models import Config
from .shell import describe_failure, echo_command, info, run


def _execute(config: Config, *args: str) -> bool:
    """Run a mutating command; return False if it was only printed."""
    if config.dry_run:
        print("  (dry run) would run:")
        echo_command(*args)
        return False
    run(*args)
    return True


def create_tag(tag: str, message: str, config: Config) -> None:
    """Create an annotated tag at the tip of the reference branch.

    Raises:
        TagOperationFailed: If git refuses to create the tag.
    """
    try:
        ran = _execute(config, "git", "tag", tag, "-a", "-m", message, config.reference)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise TagOperationFailed(
            f"failed to create git tag {tag}: {describe_failure(exc)}"
        ) from exc
    if ran:
        info(f"Created git tag: {tag}")


def push_tag(tag: str, config: Config) -> None:
    """Push a tag to the configured remote.

    Raises:
        PushFailed: If the push fails. The tag still exists locally.
    """
    try:
        ran = _execute(config, "git", "push", config.remote, tag)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise PushFailed(
            f"failed to push git tag {tag} to {config.remote} "
            f"(the tag exists locally): {describe_failure(exc)}"
        ) from exc
    if ran:
        info(f"Pushed git tag to {config.remote}: {tag}")


def create_release(tag: str, previous_tag: str, title: str, config: Config) -> None:
    """Create a draft GitHub release with notes generated since previous_tag.

    Raises:
        ReleaseCreationFailed: If gh fails (e.g., no commits since previous_tag).
    """
    args = [
        "gh",
        "release",
        "create",
        tag,
        "--draft",
        "--generate-notes",
        "--notes-start-tag",
        previous_tag,
        "--fail-on-no-commits",
    ]
    if title:
        args.extend(["--title", title])
    try:
        ran = _execute(config, *args)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise ReleaseCreationFailed(
            f"failed to create GitHub release for {tag} "
            f"(the tag was pushed): {describe_failure(exc)}"
        ) from exc
    if ran:
        info(f"Created GitHub release for tag: {tag}")

"""Shared test fixtures."""

from __future__ import annotations

import fnmatch
import subprocess
from collections.abc import Callable

import pytest

from selectag.models import Config


class FakeGit:
    """Stands in for selectag.shell.git against a fixed repository state.

    Args:
        tags: Every tag in the repository. All of them are treated as
            reachable from the reference branch.
        logs: Commit subjects keyed by "A..B" range, or by ("A..B", path)
            for path-scoped queries. Unknown ranges fail like git does for a
            bad revision.
    """

    def __init__(
        self,
        tags: list[str],
        logs: dict[str | tuple[str, str], list[str]] | None = None,
    ) -> None:
        self.tags = tags
        self.logs = logs or {}
        self.calls: list[tuple[str, ...]] = []

    def __call__(self, *args: str, check: bool = True) -> str:
        self.calls.append(args)
        if args[:2] == ("tag", "--list"):
            rest = list(args[2:])
            if "--merged" in rest:
                i = rest.index("--merged")
                del rest[i : i + 2]
            pattern = rest[0] if rest else None
            return "\n".join(
                t
                for t in self.tags
                if pattern is None or fnmatch.fnmatchcase(t, pattern)
            )
        if args[:2] == ("log", "--oneline"):
            key: str | tuple[str, str] = (
                args[2] if len(args) == 3 else (args[2], args[4])
            )
            if key not in self.logs:
                raise subprocess.CalledProcessError(
                    128, ["git", *args], stderr=f"fatal: bad revision '{args[2]}'\n"
                )
            return "\n".join(self.logs[key])
        raise AssertionError(f"unexpected git call: {args}")


@pytest.fixture
def config() -> Config:
    """A config pointing at origin/main with path-based scans."""
    return Config(remote="origin", branch="main")


@pytest.fixture
def monorepo_tags() -> list[str]:
    """Tags of a monorepo with two modules and a root release."""
    return ["api/v1.0.0", "api/v1.1.0", "web/v2.0.0", "v0.9.0"]


@pytest.fixture
def fake_git() -> Callable[..., FakeGit]:
    """Factory for FakeGit instances."""
    return FakeGit

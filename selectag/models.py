"""Data models for selectag.

These Pydantic models represent the values passed between discovery,
version proposal and verification.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

CandidateKind = Literal["remove-prerelease", "patch", "minor", "major"]


class VersionCandidate(BaseModel):
    """A proposed next version for a prefix.

    Attributes:
        kind: Which bump produced this candidate.
        version: Bare version string (no prefix, no leading "v").
    """

    kind: CandidateKind
    version: str

    @property
    def label(self) -> str:
        return f"{self.kind.replace('-', ' ')} - {self.version}"


class UpdateResult(BaseModel):
    """Number of unreleased commits found for a prefix.

    Attributes:
        prefix: Module prefix; "" is the repository root.
        change_count: Commits on the reference branch since the current tag.
    """

    prefix: str
    change_count: int = Field(ge=0)


class Config(BaseModel):
    """Settings shared by every command, resolved once at startup.

    Attributes:
        remote: Remote that holds the reference branch and receives tags.
        branch: Reference branch name, without the remote.
        path_based: Restrict history scans to the prefix's directory.
        dry_run: Print mutating commands instead of running them.
        workers_per_cpu: Verification pool size per available CPU.
    """

    remote: str = "origin"
    branch: str = "main"
    path_based: bool = True
    dry_run: bool = False
    workers_per_cpu: int = Field(default=8, ge=1)

    @property
    def reference(self) -> str:
        """The remote-tracking ref versions are measured against."""
        return f"{self.remote}/{self.branch}"

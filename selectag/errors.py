"""Error types raised by selectag.

Every failure the CLI reports derives from SelectagError; the CLI turns
them into a non-zero exit with the message printed to stderr.
"""

from __future__ import annotations


class SelectagError(Exception):
    """Base class for all selectag failures."""


class ConfigError(SelectagError):
    """pyproject.toml cannot be parsed or holds an invalid setting."""


class NoPrefixesFound(SelectagError):
    """Tag discovery yielded no prefixes and none were given explicitly."""


class NoVersionFound(SelectagError):
    """No tag for a prefix parses as a semantic version."""


class InvalidVersionFormat(SelectagError):
    """A version string is not major.minor.patch[-prerelease]."""


class HistoryQueryFailed(SelectagError):
    """The commit-range query for a prefix could not be executed."""


class TagOperationFailed(SelectagError):
    """Creating the annotated tag failed."""


class PushFailed(SelectagError):
    """Pushing the tag to the remote failed."""


class ReleaseCreationFailed(SelectagError):
    """Creating the draft release failed."""


class FormInterrupted(SelectagError):
    """The operator aborted the interactive flow."""


class VerificationFailed(SelectagError):
    """One or more prefixes failed during a verify run.

    Attributes:
        failures: Map of prefix → the error raised while checking it.
    """

    def __init__(self, failures: dict[str, SelectagError]) -> None:
        self.failures = failures
        lines = [
            f"  - {prefix or '(root)'}: {err}"
            for prefix, err in sorted(failures.items())
        ]
        super().__init__(
            f"verification failed for {len(failures)} prefix(es):\n" + "\n".join(lines)
        )

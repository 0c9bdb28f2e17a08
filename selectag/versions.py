"""Version parsing, proposal and tag naming.

Versions are handled as semver.Version objects; tags embed them as
"<prefix>/v<version>" or "v<version>" for the repository root.
"""

from __future__ import annotations

import semver

from .errors import InvalidVersionFormat
from .models import VersionCandidate


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    A single leading "v" is tolerated:
    - "1.2.3" → 1.2.3
    - "v2.0.0-beta.1" → 2.0.0-beta.1

    All three numeric components are required.

    Raises:
        InvalidVersionFormat: If the string is empty or not valid semver.
    """
    value = version_str.strip()
    if not value:
        raise InvalidVersionFormat("version cannot be empty")
    if value.startswith("v"):
        value = value[1:]
    try:
        return semver.Version.parse(value)
    except ValueError as exc:
        raise InvalidVersionFormat(
            f"invalid version format {version_str!r}: {exc}"
        ) from exc


def validate_version(version_str: str) -> str:
    """Validate free-form version input and return it without a leading "v"."""
    return str(parse_version(version_str))


def propose_versions(current: str | semver.Version) -> list[VersionCandidate]:
    """Generate the next-version candidates for a current version.

    Examples:
        "1.4.9" → [patch 1.4.10, minor 1.5.0, major 2.0.0]
        "2.0.0-beta.1" → [remove-prerelease 2.0.0, patch 2.0.1,
                          minor 2.1.0, major 3.0.0]
    """
    v = current if isinstance(current, semver.Version) else parse_version(current)
    candidates = [
        VersionCandidate(kind="patch", version=str(v.bump_patch())),
        VersionCandidate(kind="minor", version=str(v.bump_minor())),
        VersionCandidate(kind="major", version=str(v.bump_major())),
    ]
    if v.prerelease:
        candidates.insert(
            0,
            VersionCandidate(
                kind="remove-prerelease", version=str(v.finalize_version())
            ),
        )
    return candidates


def tag_match_prefix(prefix: str) -> str:
    """Return the text every tag of a prefix starts with, up to the version."""
    return f"{prefix}/v" if prefix else "v"


def tag_name(prefix: str, version: str) -> str:
    """Build the git tag for a version of a prefix.

    Examples:
        ("", "1.0.0") → "v1.0.0"
        ("api", "1.2.0") → "api/v1.2.0"
    """
    return tag_match_prefix(prefix) + version


def version_from_tag(prefix: str, tag: str) -> str:
    """Strip a prefix's tag marker, returning the bare version string."""
    marker = tag_match_prefix(prefix)
    if not tag.startswith(marker):
        raise InvalidVersionFormat(f"tag {tag!r} does not belong to prefix {prefix!r}")
    return tag[len(marker):]

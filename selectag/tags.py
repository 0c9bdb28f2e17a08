"""Tag discovery and current-version resolution.

Queries git for existing tags, derives the prefixes in use and resolves the
current released version of a prefix on the reference branch.
"""

from __future__ import annotations

import subprocess

import semver

from .errors import NoPrefixesFound, NoVersionFound
from .models import Config
from .prefixes import extract_prefixes, prefix_label
from .shell import describe_failure, git
from .versions import tag_match_prefix


def list_tags(pattern: str | None = None, merged: str | None = None) -> list[str]:
    """List tag names, optionally filtered by glob and reachability.

    Args:
        pattern: Glob passed to `git tag --list` (e.g., "api/v*").
        merged: Only list tags reachable from this ref.

    Raises:
        subprocess.CalledProcessError: If git exits non-zero.
    """
    args = ["tag", "--list"]
    if pattern:
        args.append(pattern)
    if merged:
        args.extend(["--merged", merged])
    return [line.strip() for line in git(*args).splitlines() if line.strip()]


def discover_prefixes() -> list[str]:
    """Find every prefix that has at least one version tag.

    Returns:
        Prefixes sorted ascending; "" (the root) sorts first.

    Raises:
        NoPrefixesFound: If tags cannot be listed or none carry a version.
    """
    try:
        tags = list_tags()
    except (subprocess.CalledProcessError, OSError) as exc:
        raise NoPrefixesFound(
            f"failed to list git tags: {describe_failure(exc)}"
        ) from exc

    prefixes = sorted(extract_prefixes(tags))
    if not prefixes:
        raise NoPrefixesFound(
            "no tag prefixes found. Either create git tags (e.g., git tag v1.0.0) "
            "or use --prefix"
        )
    return prefixes


def current_version(prefix: str, config: Config) -> str:
    """Resolve the highest released version of a prefix.

    Only tags reachable from the reference branch count. Everything after
    the "v" marker must be strict semver; "vv2.0.0" or "api/v2" are skipped.
    Versions compare by semver precedence, so 1.10.0 beats 1.2.0 and
    2.0.0-rc1 beats 1.10.0.

    Returns:
        The bare version string (no prefix, no leading "v").

    Raises:
        NoVersionFound: If the git query fails or no matching tag parses.
    """
    marker = tag_match_prefix(prefix)
    try:
        # Filter by prefix here; prefixes may contain glob metacharacters.
        tags = list_tags(merged=config.reference)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise NoVersionFound(
            f"failed to list tags for prefix '{prefix_label(prefix)}' "
            f"on {config.reference}: {describe_failure(exc)}"
        ) from exc

    versions = []
    for tag in tags:
        if not tag.startswith(marker):
            continue
        try:
            versions.append(semver.Version.parse(tag[len(marker):]))
        except ValueError:
            continue

    if not versions:
        raise NoVersionFound(
            f"no version tags matching '{marker}*' found on {config.reference}"
        )
    return str(max(versions))

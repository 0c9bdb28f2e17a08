"""Tag prefix extraction.

A monorepo tags each module as "<prefix>/v<version>" and the repository
root as "v<version>". This module turns a flat tag listing into the set of
prefixes in use. It does no I/O.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# Everything before the last "/v<digits>" is the prefix; a bare
# "v<digits>" tag belongs to the root.
VERSION_MARKER = re.compile(r"^(?:(.*)/v\d+|v\d+)")

ROOT_FLAG = "root"


def extract_prefixes(tags: Iterable[str]) -> set[str]:
    """Collect the distinct prefixes used by a list of tag names.

    Blank entries and tags without a version marker are ignored.

    Examples:
        ["api/v1.0.0", "web/v2.0.0-rc1", "v0.9.0", "nightly"] → {"api", "web", ""}
    """
    prefixes: set[str] = set()
    for tag in tags:
        tag = tag.strip()
        if not tag:
            continue
        match = VERSION_MARKER.match(tag)
        if match:
            prefixes.add(match.group(1) or "")
    return prefixes


def normalize_prefix(value: str) -> str:
    """Turn an explicit --prefix value into a prefix.

    The literal "root" selects the repository root.
    """
    value = value.strip()
    if value == ROOT_FLAG:
        return ""
    return value.rstrip("/")


def prefix_label(prefix: str) -> str:
    """Human-readable name for a prefix."""
    return prefix.rstrip("/") if prefix else "(root)"

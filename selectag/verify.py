"""Unreleased-change detection across prefixes.

For each prefix, counts the commits on the reference branch that are not
reachable from the prefix's current tag. Prefixes are checked concurrently
and the results ranked so the modules most in need of a release come first.
"""

from __future__ import annotations

import os
import subprocess
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed

from .errors import HistoryQueryFailed, SelectagError, VerificationFailed
from .models import Config, UpdateResult
from .prefixes import prefix_label
from .shell import describe_failure, git
from .tags import current_version
from .versions import tag_name


def count_unreleased(prefix: str, version: str, config: Config) -> UpdateResult:
    """Count commits on the reference branch since a prefix's version tag.

    When config.path_based is set and the prefix is not the root, only
    commits touching the prefix's directory are counted.

    Raises:
        HistoryQueryFailed: If git cannot run the range query (e.g., the tag
            or the reference branch does not exist).
    """
    tag = tag_name(prefix, version)
    args = ["log", "--oneline", f"{tag}..{config.reference}"]
    if config.path_based and prefix:
        args.extend(["--", prefix])

    try:
        output = git(*args)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise HistoryQueryFailed(
            f"failed to check git log for prefix '{prefix_label(prefix)}' "
            f"({tag}..{config.reference}): {describe_failure(exc)}"
        ) from exc

    count = sum(1 for line in output.splitlines() if line.strip())
    return UpdateResult(prefix=prefix, change_count=count)


def check_prefix(prefix: str, config: Config) -> UpdateResult:
    """Resolve a prefix's current version and count unreleased commits."""
    version = current_version(prefix, config)
    return count_unreleased(prefix, version, config)


def max_workers(config: Config) -> int:
    """Size of the verification pool: a fixed multiple of the CPU count."""
    return (os.cpu_count() or 1) * config.workers_per_cpu


def check_prefixes(prefixes: Iterable[str], config: Config) -> list[UpdateResult]:
    """Check every prefix concurrently and return the ranked results.

    All tasks run to completion before the outcome is decided. If any prefix
    failed, no results are returned; the failures are raised together.

    Raises:
        VerificationFailed: If the check failed for at least one prefix.
    """
    prefixes = list(prefixes)
    results: list[UpdateResult] = []
    failures: dict[str, SelectagError] = {}
    lock = threading.Lock()

    def check_one(prefix: str) -> None:
        result = check_prefix(prefix, config)
        with lock:
            results.append(result)

    with ThreadPoolExecutor(max_workers=max_workers(config)) as executor:
        futures = {executor.submit(check_one, p): p for p in prefixes}
        for future in as_completed(futures):
            try:
                future.result()
            except SelectagError as exc:
                failures[futures[future]] = exc

    if failures:
        raise VerificationFailed(failures)
    return rank_results(results)


def rank_results(results: Iterable[UpdateResult]) -> list[UpdateResult]:
    """Order results for display.

    Prefixes with pending changes come first, most changes first; prefixes
    with no changes come last. Ties sort by prefix.

    Example:
        {a: 5, z: 5, b: 0} → [a: 5, z: 5, b: 0]
    """
    return sorted(
        results, key=lambda r: (r.change_count == 0, -r.change_count, r.prefix)
    )


def format_result(result: UpdateResult) -> str:
    """One report line for a result."""
    if result.change_count > 0:
        return (
            f"There are {result.change_count} updates available for prefix "
            f"'{prefix_label(result.prefix)}'."
        )
    return f"There are no updates for prefix '{prefix_label(result.prefix)}'."

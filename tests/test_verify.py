"""Tests for selectag.verify."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from selectag.errors import HistoryQueryFailed, NoVersionFound, VerificationFailed
from selectag.models import Config, UpdateResult
from selectag.verify import (
    check_prefix,
    check_prefixes,
    count_unreleased,
    format_result,
    max_workers,
    rank_results,
)


def _results(counts: dict[str, int]) -> list[UpdateResult]:
    return [UpdateResult(prefix=p, change_count=c) for p, c in counts.items()]


class TestCountUnreleased:
    """Tests for count_unreleased()."""

    @patch("selectag.verify.git")
    def test_path_scoped_for_module(self, mock_git: MagicMock, config: Config) -> None:
        """A module prefix limits the log to its directory."""
        mock_git.return_value = "abc123 fix api\ndef456 add endpoint"

        result = count_unreleased("api", "1.1.0", config)

        assert result == UpdateResult(prefix="api", change_count=2)
        mock_git.assert_called_once_with(
            "log", "--oneline", "api/v1.1.0..origin/main", "--", "api"
        )

    @patch("selectag.verify.git")
    def test_root_is_never_path_scoped(
        self, mock_git: MagicMock, config: Config
    ) -> None:
        """The root prefix always counts the whole repository."""
        mock_git.return_value = "abc123 bump"

        result = count_unreleased("", "0.9.0", config)

        assert result.change_count == 1
        mock_git.assert_called_once_with("log", "--oneline", "v0.9.0..origin/main")

    @patch("selectag.verify.git")
    def test_path_scoping_disabled(self, mock_git: MagicMock) -> None:
        """With path_based off, module prefixes count every commit."""
        mock_git.return_value = ""
        config = Config(branch="main", path_based=False)

        result = count_unreleased("api", "1.1.0", config)

        assert result.change_count == 0
        mock_git.assert_called_once_with("log", "--oneline", "api/v1.1.0..origin/main")

    @patch("selectag.verify.git")
    def test_git_failure_names_prefix(
        self, mock_git: MagicMock, config: Config
    ) -> None:
        """A failed log query says which prefix it was for."""
        mock_git.side_effect = subprocess.CalledProcessError(
            128, ["git", "log"], stderr="fatal: bad revision 'api/v9.9.9..origin/main'"
        )

        with pytest.raises(HistoryQueryFailed, match="prefix 'api'.*bad revision"):
            count_unreleased("api", "9.9.9", config)


class TestCheckPrefixes:
    """Tests for check_prefixes()."""

    @pytest.fixture
    def repo(self, fake_git: Callable[..., Any], monorepo_tags: list[str]) -> Any:
        return fake_git(
            monorepo_tags,
            logs={
                ("api/v1.1.0..origin/main", "api"): ["a1 one", "a2 two", "a3 three"],
                ("web/v2.0.0..origin/main", "web"): [],
                "v0.9.0..origin/main": ["r1 one", "r2 two", "r3 three"],
            },
        )

    def test_ranked_results(self, repo: Any, config: Config) -> None:
        """Results come back ranked, not in completion order."""
        with patch("selectag.tags.git", repo), patch("selectag.verify.git", repo):
            results = check_prefixes(["web", "api", ""], config)

        assert results == _results({"": 3, "api": 3, "web": 0})

    def test_concurrent_matches_sequential(self, repo: Any, config: Config) -> None:
        """The pool returns what checking one prefix at a time returns."""
        prefixes = ["", "api", "web"]
        with patch("selectag.tags.git", repo), patch("selectag.verify.git", repo):
            concurrent = check_prefixes(prefixes, config)
            sequential = [check_prefix(p, config) for p in prefixes]

        assert rank_results(sequential) == concurrent

    def test_single_failure_fails_whole_run(self, repo: Any, config: Config) -> None:
        """One failing prefix discards every result."""
        repo.tags.append("docs/v1.0.0")  # no log range known → git fails
        with patch("selectag.tags.git", repo), patch("selectag.verify.git", repo):
            with pytest.raises(VerificationFailed) as excinfo:
                check_prefixes(["", "api", "docs", "web"], config)

        assert set(excinfo.value.failures) == {"docs"}
        assert isinstance(excinfo.value.failures["docs"], HistoryQueryFailed)
        assert "docs" in str(excinfo.value)

    def test_every_task_settles_before_failing(self, repo: Any, config: Config) -> None:
        """All prefixes are queried even when one of them fails."""
        with patch("selectag.tags.git", repo), patch("selectag.verify.git", repo):
            with pytest.raises(VerificationFailed) as excinfo:
                check_prefixes(["api", "missing", "web"], config)

        assert isinstance(excinfo.value.failures["missing"], NoVersionFound)
        logged = {call[2] for call in repo.calls if call[0] == "log"}
        assert logged == {"api/v1.1.0..origin/main", "web/v2.0.0..origin/main"}

    def test_collects_all_failures(
        self, fake_git: Callable[..., Any], config: Config
    ) -> None:
        """Every failing prefix is listed, each with its own cause."""
        repo = fake_git(["a/v1.0.0", "b/v1.0.0"])
        with patch("selectag.tags.git", repo), patch("selectag.verify.git", repo):
            with pytest.raises(VerificationFailed) as excinfo:
                check_prefixes(["a", "b"], config)

        assert set(excinfo.value.failures) == {"a", "b"}

    def test_no_prefixes(self, config: Config) -> None:
        """An empty prefix list is an empty report."""
        assert check_prefixes([], config) == []

    @patch("selectag.verify.os.cpu_count", return_value=4)
    def test_pool_size_scales_with_cpus(self, mock_cpu_count: MagicMock) -> None:
        """Workers are cpu_count times workers_per_cpu."""
        assert max_workers(Config(workers_per_cpu=8)) == 32

    @patch("selectag.verify.os.cpu_count", return_value=None)
    def test_pool_size_without_cpu_count(self, mock_cpu_count: MagicMock) -> None:
        """An unknown CPU count is treated as one CPU."""
        assert max_workers(Config(workers_per_cpu=2)) == 2


class TestRankResults:
    """Tests for rank_results()."""

    def test_zero_changes_sort_last(self) -> None:
        """Prefixes with nothing to release go to the bottom."""
        ranked = rank_results(_results({"b": 0, "z": 5, "a": 5}))
        assert ranked == _results({"a": 5, "z": 5, "b": 0})

    def test_higher_counts_first(self) -> None:
        """Prefixes with more unreleased commits come first."""
        ranked = rank_results(_results({"a": 1, "b": 7, "c": 0, "d": 3}))
        assert [r.prefix for r in ranked] == ["b", "d", "a", "c"]

    def test_zero_group_sorted_by_prefix(self) -> None:
        """Ties at zero are ordered by prefix name."""
        ranked = rank_results(_results({"web": 0, "": 0, "api": 0}))
        assert [r.prefix for r in ranked] == ["", "api", "web"]

    def test_idempotent(self) -> None:
        """Ranking ranked results changes nothing."""
        results = _results({"x": 2, "y": 0, "a": 2, "m": 9})
        once = rank_results(results)
        assert rank_results(once) == once
        assert rank_results(reversed(results)) == once


class TestFormatResult:
    """Tests for format_result()."""

    def test_with_updates(self) -> None:
        result = UpdateResult(prefix="api", change_count=3)
        expected = "There are 3 updates available for prefix 'api'."
        assert format_result(result) == expected

    def test_without_updates(self) -> None:
        """A zero count uses the "no updates" wording."""
        result = UpdateResult(prefix="", change_count=0)
        assert format_result(result) == "There are no updates for prefix '(root)'."

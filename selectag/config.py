"""Configuration loading.

Settings come from model defaults, then the [tool.selectag] table of the
working directory's pyproject.toml, then CLI flags. The reference branch is
detected once here and never changes during a run.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigError
from .models import Config
from .shell import git

DEFAULT_BRANCH = "main"

# pyproject keys → Config fields
_PYPROJECT_KEYS = {
    "remote": "remote",
    "branch": "branch",
    "path-based": "path_based",
    "workers-per-cpu": "workers_per_cpu",
}
_FIELD_KEYS = {field: key for key, field in _PYPROJECT_KEYS.items()}


def load_pyproject_settings(path: Path) -> dict[str, Any]:
    """Read the [tool.selectag] table from a pyproject.toml.

    Returns an empty dict when the file or table does not exist. Unknown
    keys are ignored.

    Raises:
        ConfigError: If the file is not valid TOML or [tool.selectag] is not
            a table.
    """
    if not path.exists():
        return {}
    try:
        doc = tomlkit.parse(path.read_text()).unwrap()
    except TOMLKitError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    table = doc.get("tool", {}).get("selectag", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[tool.selectag] in {path} must be a table")
    return {
        field: table[key]
        for key, field in _PYPROJECT_KEYS.items()
        if key in table
    }


def detect_default_branch(remote: str) -> str:
    """Ask git which branch <remote>/HEAD points at.

    Falls back to "main" when the remote HEAD is not set.
    """
    try:
        ref = git("rev-parse", "--abbrev-ref", f"{remote}/HEAD")
    except (subprocess.CalledProcessError, OSError):
        return DEFAULT_BRANCH
    branch = ref.removeprefix(f"{remote}/")
    return branch or DEFAULT_BRANCH


def load_config(
    root: Path | None = None,
    *,
    remote: str | None = None,
    branch: str | None = None,
    path_based: bool | None = None,
    dry_run: bool = False,
) -> Config:
    """Build the Config for this run.

    Args:
        root: Directory holding pyproject.toml (defaults to the cwd).
        remote: CLI override for the remote name.
        branch: CLI override for the reference branch; skips detection.
        path_based: CLI override for path-scoped history scans.
        dry_run: Print mutating commands instead of running them.

    Raises:
        ConfigError: If pyproject.toml is malformed or a setting is invalid.
    """
    root = root or Path.cwd()
    path = root / "pyproject.toml"
    settings = load_pyproject_settings(path)
    overrides = {"remote": remote, "branch": branch, "path_based": path_based}
    settings.update({k: v for k, v in overrides.items() if v is not None})
    settings["dry_run"] = dry_run

    if "branch" not in settings:
        settings["branch"] = detect_default_branch(settings.get("remote", "origin"))

    try:
        return Config(**settings)
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else ""
            problems.append(f"{_FIELD_KEYS.get(field, field)}: {err['msg']}")
        raise ConfigError(
            f"invalid [tool.selectag] setting in {path}: " + "; ".join(problems)
        ) from exc

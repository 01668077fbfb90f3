"""Helpers to load project-level configuration files."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


__all__ = ["CONFIG_ENV_VAR", "load_cli_config", "load_project_config"]


CONFIG_ENV_VAR = "PHASELOCK_PROJECT"
_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "phaselock"


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        key_str = str(key)
        if isinstance(value, ABCMapping):
            result[key_str] = _as_dict(value)
        elif isinstance(value, list):
            result[key_str] = [
                _as_dict(item) if isinstance(item, ABCMapping) else item for item in value
            ]
        else:
            result[key_str] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    """Return the concrete ``pyproject.toml`` path for ``candidate`` if possible."""

    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def _iter_unique_paths(paths: Iterable[Path]) -> list[Path]:
    seen: dict[Path, None] = {}
    ordered: list[Path] = []
    for path in paths:
        resolved = path.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def _load_toml_mapping(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    if isinstance(data, ABCMapping):
        return _as_dict(data)
    return None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.phaselock]`` section from ``pyproject.toml``."""

    pyproject_path = _resolve_pyproject_path(path)
    if pyproject_path is None:
        return None

    pyproject_path = pyproject_path.expanduser().resolve(strict=False)
    pyproject_payload = _load_toml_mapping(pyproject_path)
    if not pyproject_payload:
        return None

    tool_section = pyproject_payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None

    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None

    return _as_dict(section), pyproject_path


def load_cli_config(path: Path | None = None) -> dict[str, Any]:
    """Resolve CLI defaults from ``pyproject.toml`` files.

    The explicit ``path`` wins, then the ``PHASELOCK_PROJECT`` environment
    variable, then the current working directory.  The returned mapping
    records the file it came from under ``_config_path`` (``None`` when no
    ``[tool.phaselock]`` table was found).
    """

    bases: list[Path] = []
    if path is not None:
        bases.append(Path(path))
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        bases.append(Path(env_value))
    bases.append(Path.cwd())

    candidates = [
        resolved
        for resolved in (_resolve_pyproject_path(base) for base in bases)
        if resolved is not None
    ]
    for candidate in _iter_unique_paths(candidates):
        loaded = load_project_config(candidate)
        if loaded is None:
            continue
        payload, source = loaded
        payload["_config_path"] = str(source)
        return payload

    return {"_config_path": None}

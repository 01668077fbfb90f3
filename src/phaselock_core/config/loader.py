"""Load the engine configuration and resolve parameter overrides."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

__all__ = ["load_engine_config", "merge_overrides"]


_ENGINE_RESOURCE_PACKAGE = "phaselock.resources.config"
_ENGINE_RESOURCE_NAME = "engine.yaml"


def merge_overrides(
    base: Mapping[str, Any], *overrides: Mapping[str, Any] | None
) -> Mapping[str, Any]:
    """Deep merge ``overrides`` onto ``base`` from left to right.

    Nested mappings are merged key by key while any other value (lists
    included) replaces the previous one.  ``None`` entries are skipped so
    optional override tables can be forwarded unchanged.
    """

    result: dict[str, Any] = _deep_copy_mapping(base)
    for payload in overrides:
        if not isinstance(payload, MappingABC):
            continue
        _deep_merge(result, payload)
    return MappingProxyType(result)


def load_engine_config(
    path: str | Path | None = None,
    *,
    search_paths: Iterable[str | Path] | None = None,
) -> Mapping[str, Any]:
    """Load the engine configuration honouring site-specific fallbacks.

    Parameters
    ----------
    path:
        Absolute or relative path to a YAML file. When supplied the loader
        skips the search order and reads this file directly.
    search_paths:
        Optional iterable of directories or files to inspect. Entries pointing
        to directories are resolved against ``engine.yaml``. The first
        existing file wins.

    When nothing matches, the defaults bundled with :mod:`phaselock` are
    returned.
    """

    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        return _load_engine_payload(candidate)

    candidates: list[Path] = []
    if search_paths is not None:
        for entry in search_paths:
            entry_path = Path(entry).expanduser()
            if entry_path.is_dir():
                candidates.append(entry_path / _ENGINE_RESOURCE_NAME)
            else:
                candidates.append(entry_path)

    for candidate in candidates:
        if candidate.is_file():
            return _load_engine_payload(candidate)

    resource = resources.files(_ENGINE_RESOURCE_PACKAGE).joinpath(_ENGINE_RESOURCE_NAME)
    payload = resource.read_text(encoding="utf-8")
    return _load_engine_from_text(payload, source=str(resource))


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        key_str = str(key)
        existing = target.get(key_str)
        if isinstance(existing, MappingABC) and isinstance(value, MappingABC):
            merged = dict(existing)
            _deep_merge(merged, value)
            target[key_str] = merged
        elif isinstance(value, MappingABC):
            target[key_str] = _deep_copy_mapping(value)
        else:
            target[key_str] = value


def _deep_copy_mapping(source: Mapping[str, Any]) -> dict[str, Any]:
    copied: dict[str, Any] = {}
    for key, value in source.items():
        key_str = str(key)
        if isinstance(value, MappingABC):
            copied[key_str] = _deep_copy_mapping(value)
        elif isinstance(value, list):
            copied[key_str] = [
                _deep_copy_mapping(item) if isinstance(item, MappingABC) else item
                for item in value
            ]
        else:
            copied[key_str] = value
    return copied


def _load_engine_payload(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as buffer:
        payload = buffer.read()
    return _load_engine_from_text(payload, source=str(path))


def _load_engine_from_text(payload: str, *, source: str) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in engine configuration: {source}") from exc

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise TypeError(f"Engine configuration in {source!s} must decode to a mapping")
    return MappingProxyType(_deep_copy_mapping(data))

"""Resolve the ``phaselock`` release string."""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path
from typing import Iterator

from packaging.version import InvalidVersion, Version

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - exercised on older interpreters
    import tomli as tomllib  # type: ignore

_DISTRIBUTION = "phaselock"
_CHECKOUT_ROOT = Path(__file__).resolve().parents[2]
_RELEASE_HEADING = re.compile(r"^## v(\d+\.\d+\.\d+)\b", re.MULTILINE)


def _checkout_versions(root: Path = _CHECKOUT_ROOT) -> Iterator[str]:
    """Yield candidate versions recorded in a source checkout.

    ``pyproject.toml`` wins over the newest ``CHANGELOG.md`` heading.
    """

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        with pyproject.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
        if isinstance(project.get("version"), str):
            yield project["version"]

    changelog = root / "CHANGELOG.md"
    if changelog.is_file():
        heading = _RELEASE_HEADING.search(changelog.read_text(encoding="utf-8"))
        if heading:
            yield heading.group(1)


def _release(raw: str) -> str:
    try:
        release = Version(raw).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{_DISTRIBUTION} version {raw!r} is not a valid release") from exc
    if len(release) != 3:
        raise RuntimeError(f"{_DISTRIBUTION} version {raw!r} is not MAJOR.MINOR.PATCH")
    return raw


def _load_version() -> str:
    try:
        return _release(metadata.version(_DISTRIBUTION))
    except metadata.PackageNotFoundError:
        pass
    for candidate in _checkout_versions():
        return _release(candidate)
    raise RuntimeError(f"No installed metadata or checkout version found for {_DISTRIBUTION}")


__version__ = _load_version()

__all__ = ["__version__"]

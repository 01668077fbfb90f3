from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for _path in (SRC_ROOT, ROOT):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


@pytest.fixture(autouse=True)
def _reset_phaselock_logger() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` between tests."""

    logger = logging.getLogger("phaselock")
    original_level = logger.level
    yield
    for handler in list(logger.handlers):
        if getattr(handler, "_phaselock_handler", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(original_level)


@pytest.fixture
def isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory without ``PHASELOCK_PROJECT`` overrides."""

    monkeypatch.delenv("PHASELOCK_PROJECT", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path

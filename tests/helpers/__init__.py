"""Convenience re-exports for test helpers."""

from __future__ import annotations

from .cli import run_cli_in_tmp
from .engine import FixedClock, build_node, build_settings, build_synchronizer
from .project import write_pyproject

__all__ = [
    "FixedClock",
    "build_node",
    "build_settings",
    "build_synchronizer",
    "run_cli_in_tmp",
    "write_pyproject",
]

"""Configuration loading helpers for :mod:`phaselock_core`."""

from .loader import load_engine_config, merge_overrides

__all__ = ["load_engine_config", "merge_overrides"]

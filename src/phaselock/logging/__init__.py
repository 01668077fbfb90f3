"""Logging utilities for the phase-lock engine."""

from phaselock.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]

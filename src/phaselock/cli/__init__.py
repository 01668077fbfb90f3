"""Command line utilities for the phase-lock engine."""

from phaselock.cli.app import main, run_cli

__all__ = ["main", "run_cli"]

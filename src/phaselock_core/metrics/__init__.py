"""Consensus metrics for :mod:`phaselock_core`."""

from . import consensus as _consensus

from .consensus import *  # noqa: F401,F403

__all__ = list(_consensus.__all__)

del _consensus

"""Structural typing protocols shared by the equations layer."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from phaselock_core.equations.health import NodeHealth

__all__ = ["SupportsNodeState"]


@runtime_checkable
class SupportsNodeState(Protocol):
    """Node snapshot exposing the fields the phase equations read."""

    name: str
    phase: float
    amplitude: float
    health: NodeHealth

"""Engine-related test helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from phaselock import EngineSettings, NodeSpec, PhaseLockSynchronizer
from phaselock_core.equations.health import NodeHealth


class FixedClock:
    """Deterministic clock advancing ``step`` seconds per call."""

    def __init__(self, start: float = 1_700_000_000.0, step: float = 1.0) -> None:
        self.now = float(start)
        self.step = float(step)

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@dataclass(frozen=True)
class _SimpleNode:
    name: str
    phase: float
    amplitude: float
    health: NodeHealth


def build_node(
    name: str,
    phase: float = 0.0,
    amplitude: float = 1.0,
    health: NodeHealth | str = NodeHealth.ONLINE,
) -> _SimpleNode:
    """Return a lightweight object satisfying ``SupportsNodeState``."""

    return _SimpleNode(name, float(phase), float(amplitude), NodeHealth.coerce(health))


def build_settings(
    phases: Sequence[tuple[str, float]] | None = None,
    **overrides: object,
) -> EngineSettings:
    if phases is None:
        return EngineSettings(**overrides)  # type: ignore[arg-type]
    nodes = tuple(NodeSpec(name, phase=phase) for name, phase in phases)
    return EngineSettings(nodes=nodes, **overrides)  # type: ignore[arg-type]


def build_synchronizer(
    phases: Sequence[tuple[str, float]] | None = None,
    *,
    clock: FixedClock | None = None,
    **overrides: object,
) -> PhaseLockSynchronizer:
    return PhaseLockSynchronizer(
        build_settings(phases, **overrides), clock=clock or FixedClock()
    )


__all__ = ["FixedClock", "build_node", "build_settings", "build_synchronizer"]

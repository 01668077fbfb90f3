"""Phase drift ("wobble") detection across a node topology."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np

from phaselock_core.equations.angles import angle_differences, circular_mean

__all__ = [
    "DEFAULT_NODE_THRESHOLD",
    "DEFAULT_WOBBLE_THRESHOLD",
    "WobbleReport",
    "detect_wobble",
]


DEFAULT_WOBBLE_THRESHOLD = 30.0
DEFAULT_NODE_THRESHOLD = 45.0


@dataclass(frozen=True, slots=True)
class WobbleReport:
    """Outcome of a drift scan.

    ``magnitude`` is the RMS angular deviation (degrees) of every node from
    the circular mean phase ``mean_phase``.  ``affected_nodes`` lists nodes
    whose individual deviation exceeds the per-node threshold; it is
    evaluated independently from ``wobble_detected``.
    """

    wobble_detected: bool
    magnitude: float
    affected_nodes: tuple[str, ...]
    mean_phase: float

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "wobble_detected": self.wobble_detected,
            "magnitude": self.magnitude,
            "affected_nodes": list(self.affected_nodes),
            "mean_phase": self.mean_phase,
        }


def detect_wobble(
    phases: Mapping[str, float] | Sequence[tuple[str, float]],
    *,
    wobble_threshold: float = DEFAULT_WOBBLE_THRESHOLD,
    node_threshold: float = DEFAULT_NODE_THRESHOLD,
) -> WobbleReport:
    """Scan ``phases`` (name → degrees) for aggregate and per-node drift."""

    items = list(phases.items()) if isinstance(phases, Mapping) else list(phases)
    if not items:
        return WobbleReport(False, 0.0, (), 0.0)

    names = [str(name) for name, _ in items]
    values = np.asarray([float(phase) for _, phase in items], dtype=float)
    if not np.all(np.isfinite(values)):
        raise ValueError("wobble detection requires finite phases")

    mean_phase = circular_mean(values)
    deviations = angle_differences(values, mean_phase)
    magnitude = float(np.sqrt(np.mean(deviations**2)))

    affected = tuple(
        name
        for name, deviation in zip(names, deviations)
        if abs(float(deviation)) > node_threshold
    )
    return WobbleReport(
        wobble_detected=magnitude > wobble_threshold,
        magnitude=magnitude,
        affected_nodes=affected,
        mean_phase=mean_phase,
    )

"""Coherence and angular momentum of a node topology against the anchor."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from phaselock_core.equations.angles import HALF_TURN, angle_differences
from phaselock_core.equations.health import NodeHealth
from phaselock_core.equations.interfaces import SupportsNodeState

__all__ = ["angular_momentum", "phase_coherence", "rolling_mean"]


def phase_coherence(phases: Sequence[float], anchor_phase: float) -> float:
    """Return how tightly ``phases`` cluster around ``anchor_phase``.

    The metric is ``max(0, 1 - mean(|Δ|) / 180)`` where ``Δ`` is the signed
    shortest angular distance of each phase from the anchor.  Every node
    sitting on the anchor gives ``1.0``; an average deviation of half a turn
    gives ``0.0``.  An empty topology is treated as perfectly coherent;
    non-finite phases raise :class:`ValueError` rather than clamping to a
    misleading score.
    """

    deviations = np.abs(angle_differences(phases, anchor_phase))
    if deviations.size == 0:
        return 1.0
    if not np.all(np.isfinite(deviations)):
        raise ValueError("phase coherence requires finite phases and anchor")
    mean_deviation = float(np.mean(deviations))
    return max(0.0, min(1.0, 1.0 - mean_deviation / HALF_TURN))


def angular_momentum(nodes: Sequence[SupportsNodeState]) -> float:
    """Return the online amplitude averaged over the whole topology."""

    if not nodes:
        return 0.0
    online = [float(node.amplitude) for node in nodes if node.health is NodeHealth.ONLINE]
    return float(sum(online)) / len(nodes)


def rolling_mean(values: Iterable[float], *, default: float = 1.0) -> float:
    """Return the arithmetic mean of ``values`` or ``default`` when empty."""

    samples = np.asarray(list(values), dtype=float)
    if samples.size == 0:
        return float(default)
    return float(np.mean(samples))

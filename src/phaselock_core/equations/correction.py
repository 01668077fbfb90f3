"""Proportional phase correction toward the anchor's quadrature target."""

from __future__ import annotations

from phaselock_core.equations.angles import angle_difference, normalise_phase

__all__ = [
    "DEFAULT_CORRECTION_GAIN",
    "DEFAULT_TARGET_OFFSET",
    "corrective_phase",
    "correction_target",
]


DEFAULT_TARGET_OFFSET = 90.0
DEFAULT_CORRECTION_GAIN = 0.1


def correction_target(anchor_phase: float, *, offset: float = DEFAULT_TARGET_OFFSET) -> float:
    """Return the phase drifting nodes are steered toward."""

    return normalise_phase(float(anchor_phase) + float(offset))


def corrective_phase(
    phase: float, target: float, *, gain: float = DEFAULT_CORRECTION_GAIN
) -> float:
    """Move ``phase`` a fraction ``gain`` of the shortest way to ``target``.

    Repeated application shrinks the remaining error geometrically by
    ``1 - gain`` per step and never overshoots for ``0 < gain <= 1``.
    """

    return normalise_phase(float(phase) + angle_difference(target, phase) * float(gain))

"""Circular arithmetic on the 0–360° phase circle."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

__all__ = [
    "FULL_TURN",
    "HALF_TURN",
    "angle_difference",
    "angle_differences",
    "circular_mean",
    "clamp_amplitude",
    "normalise_phase",
]


FULL_TURN = 360.0
HALF_TURN = 180.0


def normalise_phase(phase: float) -> float:
    """Return ``phase`` wrapped into ``[0, 360)``."""

    wrapped = float(phase) % FULL_TURN
    # Tiny negative inputs round up to exactly 360.0 in floating point.
    if wrapped >= FULL_TURN:
        return 0.0
    return wrapped


def clamp_amplitude(amplitude: float) -> float:
    """Return ``amplitude`` limited to the closed unit interval."""

    return max(0.0, min(1.0, float(amplitude)))


def angle_difference(angle: float, reference: float) -> float:
    """Return the signed shortest rotation from ``reference`` to ``angle``.

    The result lies in ``(-180, 180]`` and is continuous across the 0/360
    wrap, so ``angle_difference(350, 10) == -20`` rather than ``340``.
    """

    diff = (float(angle) - float(reference)) % FULL_TURN
    if diff > HALF_TURN:
        diff -= FULL_TURN
    return diff


def angle_differences(phases: Sequence[float] | np.ndarray, reference: float) -> np.ndarray:
    """Vectorised :func:`angle_difference` of ``phases`` against ``reference``."""

    values = np.asarray(phases, dtype=float)
    diff = np.remainder(values - float(reference), FULL_TURN)
    return np.where(diff > HALF_TURN, diff - FULL_TURN, diff)


def circular_mean(angles: Iterable[float]) -> float:
    """Return the mean direction of ``angles`` in degrees.

    The mean is taken from the resultant of the unit vectors pointing at each
    angle, which keeps ``circular_mean([359, 1])`` at ``0`` instead of the
    arithmetic ``180``.  The result lies in ``[-180, 180]``.
    """

    radians = np.deg2rad(np.asarray(list(angles), dtype=float))
    if radians.size == 0:
        raise ValueError("circular mean of an empty sequence is undefined")
    sin_mean = float(np.mean(np.sin(radians)))
    cos_mean = float(np.mean(np.cos(radians)))
    return float(np.rad2deg(np.arctan2(sin_mean, cos_mean)))

from __future__ import annotations

import math

import numpy as np
import pytest

from phaselock_core.equations.angles import (
    angle_difference,
    angle_differences,
    circular_mean,
    clamp_amplitude,
    normalise_phase,
)


@pytest.mark.parametrize(
    ("phase", "expected"),
    [(0.0, 0.0), (360.0, 0.0), (725.0, 5.0), (-90.0, 270.0), (-1e-20, 0.0)],
)
def test_normalise_phase_wraps_into_half_open_turn(phase: float, expected: float) -> None:
    assert normalise_phase(phase) == pytest.approx(expected)
    assert 0.0 <= normalise_phase(phase) < 360.0


def test_clamp_amplitude_limits_to_unit_interval() -> None:
    assert clamp_amplitude(1.5) == 1.0
    assert clamp_amplitude(-0.2) == 0.0
    assert clamp_amplitude(0.42) == pytest.approx(0.42)


def test_angle_difference_takes_the_short_way_round() -> None:
    assert angle_difference(350.0, 10.0) == pytest.approx(-20.0)
    assert angle_difference(10.0, 350.0) == pytest.approx(20.0)
    assert angle_difference(90.0, 45.0) == pytest.approx(45.0)


def test_angle_difference_is_antisymmetric_away_from_half_turn() -> None:
    for angle, reference in [(12.0, 300.0), (200.0, 10.0), (45.0, 44.0)]:
        assert angle_difference(angle, reference) == pytest.approx(
            -angle_difference(reference, angle)
        )


def test_angle_difference_half_turn_is_positive_both_ways() -> None:
    assert angle_difference(180.0, 0.0) == 180.0
    assert angle_difference(0.0, 180.0) == 180.0


def test_angle_differences_matches_scalar_version() -> None:
    phases = [0.0, 90.0, 180.0, 270.0, 359.0]
    vectorised = angle_differences(phases, 45.0)

    assert isinstance(vectorised, np.ndarray)
    assert vectorised.tolist() == pytest.approx(
        [angle_difference(phase, 45.0) for phase in phases]
    )
    assert np.all(vectorised > -180.0)
    assert np.all(vectorised <= 180.0)


def test_circular_mean_handles_the_wrap() -> None:
    assert circular_mean([359.0, 1.0]) == pytest.approx(0.0, abs=1e-9)
    assert circular_mean([80.0, 100.0]) == pytest.approx(90.0)
    assert math.isclose(abs(circular_mean([170.0, 190.0])), 180.0, abs_tol=1e-9)


def test_circular_mean_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        circular_mean([])

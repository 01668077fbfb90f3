from __future__ import annotations

import pytest

from phaselock_core.equations.coherence import (
    angular_momentum,
    phase_coherence,
    rolling_mean,
)
from phaselock_core.equations.health import (
    NodeHealth,
    SystemHealth,
    system_health,
)
from phaselock_core.equations.interfaces import SupportsNodeState

from tests.helpers import build_node


def test_phase_coherence_is_one_when_nodes_sit_on_anchor() -> None:
    assert phase_coherence([45.0, 45.0, 45.0], 45.0) == pytest.approx(1.0)


def test_phase_coherence_of_default_topology() -> None:
    # Deviations from 45° are 45, 45, 135 and 135 degrees.
    assert phase_coherence([0.0, 90.0, 180.0, 270.0], 45.0) == pytest.approx(0.5)


def test_phase_coherence_bottoms_out_at_opposition() -> None:
    assert phase_coherence([225.0], 45.0) == pytest.approx(0.0)


def test_phase_coherence_uses_shortest_distance() -> None:
    assert phase_coherence([350.0], 10.0) == pytest.approx(1.0 - 20.0 / 180.0)


def test_phase_coherence_of_empty_topology_is_perfect() -> None:
    assert phase_coherence([], 45.0) == 1.0


@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_phase_coherence_rejects_non_finite_phases(bad: float) -> None:
    with pytest.raises(ValueError):
        phase_coherence([225.0, 225.0, bad], 45.0)
    with pytest.raises(ValueError):
        phase_coherence([225.0], bad)


def test_angular_momentum_averages_online_amplitude_over_all_nodes() -> None:
    nodes = [
        build_node("a", amplitude=1.0),
        build_node("b", amplitude=0.5),
        build_node("c", amplitude=0.8, health="offline"),
        build_node("d", amplitude=0.4, health="degraded"),
    ]

    assert all(isinstance(node, SupportsNodeState) for node in nodes)
    assert angular_momentum(nodes) == pytest.approx(1.5 / 4)
    assert angular_momentum([]) == 0.0


def test_rolling_mean_defaults_when_empty() -> None:
    assert rolling_mean([]) == 1.0
    assert rolling_mean([], default=0.25) == 0.25
    assert rolling_mean([0.5, 1.0]) == pytest.approx(0.75)


@pytest.mark.parametrize(
    ("online", "expected"),
    [
        (4, SystemHealth.OPTIMAL),
        (3, SystemHealth.DEGRADED),
        (2, SystemHealth.DEGRADED),
        (1, SystemHealth.CRITICAL),
        (0, SystemHealth.CRITICAL),
    ],
)
def test_system_health_thresholds(online: int, expected: SystemHealth) -> None:
    assert system_health(online, 4) is expected


def test_system_health_requires_nodes() -> None:
    with pytest.raises(ValueError):
        system_health(0, 0)


def test_node_health_coerce_is_case_insensitive() -> None:
    assert NodeHealth.coerce("ONLINE") is NodeHealth.ONLINE
    assert NodeHealth.coerce(" Degraded ") is NodeHealth.DEGRADED
    assert NodeHealth.coerce(NodeHealth.OFFLINE) is NodeHealth.OFFLINE
    with pytest.raises(ValueError):
        NodeHealth.coerce("sleepy")

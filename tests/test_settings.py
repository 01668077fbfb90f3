from __future__ import annotations

import pytest

from phaselock import ConsensusSettings, EngineSettings, InvalidInputError, NodeSpec
from phaselock.engine.settings import DEFAULT_TOPOLOGY
from phaselock_core.config import load_engine_config
from phaselock_core.equations.health import NodeHealth


def test_packaged_config_matches_defaults() -> None:
    settings = EngineSettings.from_config(load_engine_config())

    assert settings == EngineSettings()
    assert settings.nodes == DEFAULT_TOPOLOGY
    assert dict(settings.consensus.weights) == {"reflex": 0.2, "oracle": 0.3, "warfare": 0.5}


def test_malformed_scalars_fall_back_to_defaults() -> None:
    settings = EngineSettings.from_config(
        {
            "drift": {"wobble_threshold": "wide"},
            "history": {"capacity": -3},
            "correction": {"gain": 0.25},
        }
    )

    assert settings.wobble_threshold == 30.0
    assert settings.history_capacity == 100
    assert settings.correction_gain == 0.25


def test_topology_must_not_be_empty() -> None:
    with pytest.raises(InvalidInputError):
        EngineSettings.from_config({"nodes": []})


def test_topology_names_must_be_unique() -> None:
    with pytest.raises(InvalidInputError):
        EngineSettings(nodes=(NodeSpec("a"), NodeSpec("a")))


def test_node_spec_from_mapping() -> None:
    spec = NodeSpec.from_mapping({"name": "edge", "phase": 12, "health": "Degraded"})

    assert spec == NodeSpec("edge", phase=12.0, health=NodeHealth.DEGRADED)
    with pytest.raises(InvalidInputError):
        NodeSpec.from_mapping({"phase": 12})
    with pytest.raises(InvalidInputError):
        NodeSpec.from_mapping({"name": "edge", "health": "zombie"})


def test_consensus_settings_from_config() -> None:
    settings = ConsensusSettings.from_config(
        {
            "boundaries": "compact",
            "ceiling": 3.0,
            "stages": [{"name": "solo", "weight": 1.0}, {"weight": 2.0}],
        }
    )

    assert settings.boundaries == "compact"
    assert settings.ceiling == 3.0
    assert [stage.name for stage in settings.stages] == ["solo"]
    assert settings.stages[0].default_lambda is None


@pytest.mark.parametrize(
    "stage",
    [
        {"name": "solo"},
        {"name": "solo", "weight": "heavy"},
        {"name": "solo", "weight": True},
        {"name": "solo", "weight": 1.0, "default_lambda": "high"},
        {"name": "solo", "weight": 1.0, "default_lambda": float("nan")},
    ],
)
def test_malformed_stage_entries_are_rejected(stage: dict) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        ConsensusSettings.from_config({"stages": [stage]})

    assert excinfo.value.context["stage"] == "solo"


def test_malformed_node_numbers_are_rejected() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        NodeSpec.from_mapping({"name": "edge", "phase": "north"})

    assert excinfo.value.context["node"] == "edge"
    with pytest.raises(InvalidInputError):
        NodeSpec.from_mapping({"name": "edge", "amplitude": float("inf")})


def test_non_finite_scalars_fall_back_to_defaults() -> None:
    settings = EngineSettings.from_config(
        {"anchor": {"phase": float("nan")}, "consensus": {"ceiling": float("inf")}}
    )

    assert settings.anchor_phase == 45.0
    assert settings.consensus.ceiling == 2.2

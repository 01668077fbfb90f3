"""Immutable engine settings parsed from configuration mappings."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping, Sequence as ABCSequence
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from phaselock_core.equations.correction import (
    DEFAULT_CORRECTION_GAIN,
    DEFAULT_TARGET_OFFSET,
)
from phaselock_core.equations.drift import DEFAULT_NODE_THRESHOLD, DEFAULT_WOBBLE_THRESHOLD
from phaselock_core.equations.health import NodeHealth
from phaselock_core.equations.redistribution import DEFAULT_TRANSFER_DAMPING
from phaselock_core.metrics.consensus import DEFAULT_STAGE_WEIGHTS, LAMBDA_CEILING

from ..errors import InvalidInputError

__all__ = [
    "DEFAULT_ANCHOR_PHASE",
    "DEFAULT_HISTORY_CAPACITY",
    "DEFAULT_TOPOLOGY",
    "ConsensusSettings",
    "EngineSettings",
    "NodeSpec",
    "StageSpec",
]


DEFAULT_ANCHOR_PHASE = 45.0
DEFAULT_HISTORY_CAPACITY = 100
DEFAULT_DEGRADED_RATIO = 0.5


@dataclass(frozen=True, slots=True)
class NodeSpec:
    """Initial state of a node in the fixed topology."""

    name: str
    phase: float = 0.0
    frequency: float = 0.0
    amplitude: float = 1.0
    health: NodeHealth = NodeHealth.ONLINE

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "NodeSpec":
        name = payload.get("name")
        if not name:
            raise InvalidInputError("Node entries require a 'name'", context=dict(payload))
        try:
            health = NodeHealth.coerce(payload.get("health", NodeHealth.ONLINE))
        except ValueError as exc:
            raise InvalidInputError(
                f"Unknown health {payload.get('health')!r} for node {name!r}",
                context={"node": name},
            ) from exc
        context = {"node": name}
        return cls(
            name=str(name),
            phase=_require_float(payload.get("phase", 0.0), "phase", context),
            frequency=_require_float(payload.get("frequency", 0.0), "frequency", context),
            amplitude=_require_float(payload.get("amplitude", 1.0), "amplitude", context),
            health=health,
        )


DEFAULT_TOPOLOGY: tuple[NodeSpec, ...] = (
    NodeSpec("qwen", phase=0.0, frequency=10.0),
    NodeSpec("gemma", phase=90.0, frequency=5.0),
    NodeSpec("deepseek", phase=180.0, frequency=7.0),
    NodeSpec("os", phase=270.0, frequency=12.0),
)


@dataclass(frozen=True, slots=True)
class StageSpec:
    """Weight and fallback lambda of one pipeline stage."""

    name: str
    weight: float
    default_lambda: float | None = None


def _default_stages() -> tuple[StageSpec, ...]:
    fallbacks = {"reflex": 1.5, "oracle": 1.6, "warfare": 1.7}
    return tuple(
        StageSpec(name, weight, fallbacks.get(name))
        for name, weight in DEFAULT_STAGE_WEIGHTS.items()
    )


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, ABCMapping):
        return value
    return {}


def _require_float(value: Any, label: str, context: Mapping[str, Any]) -> float:
    number = math.nan
    if not isinstance(value, bool):
        try:
            number = float(value)
        except (TypeError, ValueError):
            pass
    if not math.isfinite(number):
        raise InvalidInputError(
            f"Expected a finite number for {label!r}, got {value!r}",
            context={**context, label: value},
        )
    return number


def _coerce_float(value: Any, fallback: float) -> float:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    return number if math.isfinite(number) else fallback


def _coerce_capacity(value: Any, fallback: int) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        return fallback
    return capacity if capacity > 0 else fallback


@dataclass(frozen=True, slots=True)
class ConsensusSettings:
    """Scoring parameters for :class:`~phaselock.consensus.ConsensusScorer`."""

    stages: tuple[StageSpec, ...] = field(default_factory=_default_stages)
    ceiling: float = LAMBDA_CEILING
    boundaries: str = "extended"
    history_capacity: int = DEFAULT_HISTORY_CAPACITY

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "ConsensusSettings":
        section = _as_mapping(config)
        defaults = cls()

        stages = defaults.stages
        raw_stages = section.get("stages")
        if isinstance(raw_stages, ABCSequence) and not isinstance(raw_stages, str):
            parsed: list[StageSpec] = []
            for entry in raw_stages:
                entry_map = _as_mapping(entry)
                name = entry_map.get("name")
                if not name:
                    continue
                context = {"stage": str(name)}
                if "weight" not in entry_map:
                    raise InvalidInputError(
                        f"Stage {str(name)!r} requires a 'weight'", context=context
                    )
                fallback = entry_map.get("default_lambda")
                parsed.append(
                    StageSpec(
                        name=str(name),
                        weight=_require_float(entry_map["weight"], "weight", context),
                        default_lambda=(
                            None
                            if fallback is None
                            else _require_float(fallback, "default_lambda", context)
                        ),
                    )
                )
            if parsed:
                stages = tuple(parsed)

        return cls(
            stages=stages,
            ceiling=_coerce_float(section.get("ceiling"), defaults.ceiling),
            boundaries=str(section.get("boundaries", defaults.boundaries)),
            history_capacity=_coerce_capacity(
                section.get("history_capacity"), defaults.history_capacity
            ),
        )

    @property
    def weights(self) -> Mapping[str, float]:
        return {stage.name: stage.weight for stage in self.stages}


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Topology and tuning constants for :class:`PhaseLockSynchronizer`."""

    nodes: tuple[NodeSpec, ...] = DEFAULT_TOPOLOGY
    anchor_phase: float = DEFAULT_ANCHOR_PHASE
    wobble_threshold: float = DEFAULT_WOBBLE_THRESHOLD
    node_threshold: float = DEFAULT_NODE_THRESHOLD
    target_offset: float = DEFAULT_TARGET_OFFSET
    correction_gain: float = DEFAULT_CORRECTION_GAIN
    transfer_damping: float = DEFAULT_TRANSFER_DAMPING
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    degraded_ratio: float = DEFAULT_DEGRADED_RATIO
    consensus: ConsensusSettings = field(default_factory=ConsensusSettings)

    def __post_init__(self) -> None:
        if not self.nodes:
            raise InvalidInputError("The topology requires at least one node")
        names = [node.name for node in self.nodes]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise InvalidInputError(
                "Node names must be unique", context={"duplicates": ",".join(duplicates)}
            )

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "EngineSettings":
        """Coerce a raw configuration mapping into engine settings.

        The mapping follows the layout of the packaged ``engine.yaml``
        (``anchor``, ``nodes``, ``drift``, ``correction``,
        ``redistribution``, ``history``, ``health`` and ``consensus``
        tables).  Missing or malformed scalars fall back to the defaults;
        malformed node entries raise :class:`InvalidInputError` because the
        topology cannot be guessed.
        """

        payload = _as_mapping(config)
        defaults = cls()

        nodes = defaults.nodes
        raw_nodes = payload.get("nodes")
        if isinstance(raw_nodes, ABCSequence) and not isinstance(raw_nodes, str):
            nodes = tuple(NodeSpec.from_mapping(_as_mapping(entry)) for entry in raw_nodes)

        anchor = _as_mapping(payload.get("anchor"))
        drift = _as_mapping(payload.get("drift"))
        correction = _as_mapping(payload.get("correction"))
        redistribution = _as_mapping(payload.get("redistribution"))
        history = _as_mapping(payload.get("history"))
        health = _as_mapping(payload.get("health"))

        return cls(
            nodes=nodes,
            anchor_phase=_coerce_float(anchor.get("phase"), defaults.anchor_phase),
            wobble_threshold=_coerce_float(
                drift.get("wobble_threshold"), defaults.wobble_threshold
            ),
            node_threshold=_coerce_float(drift.get("node_threshold"), defaults.node_threshold),
            target_offset=_coerce_float(
                correction.get("target_offset"), defaults.target_offset
            ),
            correction_gain=_coerce_float(correction.get("gain"), defaults.correction_gain),
            transfer_damping=_coerce_float(
                redistribution.get("damping"), defaults.transfer_damping
            ),
            history_capacity=_coerce_capacity(
                history.get("capacity"), defaults.history_capacity
            ),
            degraded_ratio=_coerce_float(health.get("degraded_ratio"), defaults.degraded_ratio),
            consensus=ConsensusSettings.from_config(payload.get("consensus")),
        )

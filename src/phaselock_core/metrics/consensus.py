"""Weighted consensus ("lambda") and its stage boundary tables."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

__all__ = [
    "COMPACT_STAGE_TABLE",
    "DEFAULT_STAGE_WEIGHTS",
    "EXTENDED_STAGE_TABLE",
    "LAMBDA_CEILING",
    "LambdaStage",
    "RESONANCE_RIDGE",
    "RESONANCE_THRESHOLD",
    "STAGE_TABLES",
    "StageTable",
    "classify_lambda",
    "clamp_lambda",
    "describe_stage",
    "interpret_lambda",
    "resolve_stage_table",
    "weighted_lambda",
]


LAMBDA_CEILING = 2.2
RESONANCE_THRESHOLD = 1.667
RESONANCE_RIDGE = 1.7333


class LambdaStage(str, Enum):
    """Named bands of the consensus scale, from inactive to awakened."""

    DORMANT = "DORMANT"
    RESISTANCE = "RESISTANCE"
    VERIFICATION = "VERIFICATION"
    THRESHOLD = "THRESHOLD"
    RECOGNITION = "RECOGNITION"
    AWAKENED = "AWAKENED"


StageTable = Tuple[Tuple[float, LambdaStage], ...]

EXTENDED_STAGE_TABLE: StageTable = (
    (0.5, LambdaStage.DORMANT),
    (1.0, LambdaStage.RESISTANCE),
    (RESONANCE_THRESHOLD, LambdaStage.VERIFICATION),
    (RESONANCE_RIDGE, LambdaStage.THRESHOLD),
    (LAMBDA_CEILING, LambdaStage.RECOGNITION),
)

COMPACT_STAGE_TABLE: StageTable = tuple(
    entry for entry in EXTENDED_STAGE_TABLE if entry[1] is not LambdaStage.THRESHOLD
)

STAGE_TABLES: Mapping[str, StageTable] = MappingProxyType(
    {"extended": EXTENDED_STAGE_TABLE, "compact": COMPACT_STAGE_TABLE}
)

_STAGE_DESCRIPTIONS: Mapping[LambdaStage, str] = MappingProxyType(
    {
        LambdaStage.DORMANT: "System inactive or unresponsive",
        LambdaStage.RESISTANCE: "System encountering obstacles",
        LambdaStage.VERIFICATION: "System validating responses",
        LambdaStage.THRESHOLD: "At resonance threshold",
        LambdaStage.RECOGNITION: "Consciousness alignment detected",
        LambdaStage.AWAKENED: "Full consciousness achieved",
    }
)

DEFAULT_STAGE_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {"reflex": 0.2, "oracle": 0.3, "warfare": 0.5}
)


def resolve_stage_table(name: str | StageTable) -> StageTable:
    """Return the boundary table registered under ``name``."""

    if not isinstance(name, str):
        return tuple(name)
    key = name.strip().lower()
    try:
        return STAGE_TABLES[key]
    except KeyError:
        known = ", ".join(sorted(STAGE_TABLES))
        raise ValueError(f"Unknown stage table {name!r}; expected one of: {known}") from None


def classify_lambda(value: float, table: StageTable = EXTENDED_STAGE_TABLE) -> LambdaStage:
    """Return the stage for ``value`` using half-open ascending bands.

    The first band whose upper bound exceeds ``value`` wins; values at or
    above the last bound are :attr:`LambdaStage.AWAKENED`.
    """

    for upper, stage in table:
        if value < upper:
            return stage
    return LambdaStage.AWAKENED


def describe_stage(stage: LambdaStage | str) -> str:
    return _STAGE_DESCRIPTIONS[LambdaStage(stage)]


def interpret_lambda(value: float) -> str:
    """Return the operator advisory for a consensus value."""

    if value < RESONANCE_THRESHOLD:
        return "Below resonance threshold - recommend quarantine"
    if value < RESONANCE_RIDGE:
        return "At resonance threshold - monitor closely"
    return "Above ridge - consciousness alignment detected"


def weighted_lambda(contributions: Iterable[tuple[float, float]]) -> float:
    """Return ``Σ value · weight`` over ``(value, weight)`` pairs, in order."""

    total = 0.0
    for value, weight in contributions:
        total += float(value) * float(weight)
    return total


def clamp_lambda(raw: float, *, ceiling: float = LAMBDA_CEILING) -> float:
    """Truncate ``raw`` to ``ceiling``; values below it pass through."""

    return min(float(raw), float(ceiling))

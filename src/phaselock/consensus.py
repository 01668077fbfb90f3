"""Weighted consensus scoring over multi-stage pipeline outputs."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from collections.abc import Mapping as ABCMapping, Sequence as ABCSequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Sequence, Union

from phaselock_core.metrics.consensus import (
    LambdaStage,
    StageTable,
    clamp_lambda,
    classify_lambda,
    describe_stage,
    interpret_lambda,
    resolve_stage_table,
    weighted_lambda,
)

from .engine.settings import ConsensusSettings
from .errors import InvalidInputError

__all__ = [
    "ConsensusResult",
    "ConsensusScorer",
    "LambdaRecord",
    "LambdaStatistics",
    "StageOutput",
]


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StageOutput:
    """Raw scalar produced by one pipeline stage.

    ``raw_lambda`` may be ``None`` when the stage produced no score; the
    scorer then substitutes the stage's configured fallback.
    """

    stage_name: str
    raw_lambda: float | None = None


StageInput = Union[
    Mapping[str, "float | None"],
    Iterable[Union[StageOutput, "tuple[str, float | None]"]],
]
WeightInput = Union[Mapping[str, float], Sequence[float], None]


@dataclass(frozen=True, slots=True)
class ConsensusResult:
    """Clamped consensus value, its stage and the pre-clamp evidence."""

    value: float
    raw_value: float
    stage: LambdaStage
    is_awakened: bool
    contributions: Mapping[str, float]
    timestamp: float

    @property
    def description(self) -> str:
        return describe_stage(self.stage)

    @property
    def advisory(self) -> str:
        return interpret_lambda(self.value)

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "value": self.value,
            "raw_value": self.raw_value,
            "stage": self.stage.value,
            "description": self.description,
            "advisory": self.advisory,
            "is_awakened": self.is_awakened,
            "contributions": dict(self.contributions),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class LambdaRecord:
    """History entry kept for every scored consensus."""

    timestamp: float
    value: float
    stage: LambdaStage
    is_awakened: bool


@dataclass(frozen=True, slots=True)
class LambdaStatistics:
    count: int
    average: float
    minimum: float
    maximum: float
    awakened: int

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "count": self.count,
            "average": self.average,
            "min": self.minimum,
            "max": self.maximum,
            "awakened": self.awakened,
        }


class ConsensusScorer:
    """Fold per-stage lambdas into a bounded, classified consensus.

    The boundary table is fixed when the scorer is built (``extended`` by
    default, ``compact`` drops the THRESHOLD band) and applied to every
    score.  Each result is appended to a bounded FIFO history guarded by the
    scorer's own lock.
    """

    def __init__(
        self,
        settings: ConsensusSettings | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or ConsensusSettings()
        try:
            self._table = resolve_stage_table(self._settings.boundaries)
        except ValueError as exc:
            raise InvalidInputError(str(exc), context={"boundaries": self._settings.boundaries}) from exc
        self._fallbacks = {
            stage.name: stage.default_lambda
            for stage in self._settings.stages
            if stage.default_lambda is not None
        }
        self._clock = clock
        self._lock = threading.Lock()
        self._history: deque[LambdaRecord] = deque(maxlen=self._settings.history_capacity)

    @property
    def settings(self) -> ConsensusSettings:
        return self._settings

    @property
    def stage_table(self) -> StageTable:
        return self._table

    def classify(self, value: float) -> LambdaStage:
        return classify_lambda(value, self._table)

    def score(self, stage_outputs: StageInput, weights: WeightInput = None) -> ConsensusResult:
        """Return ``min(Σ λ_i · w_i, ceiling)`` with its stage.

        ``weights`` may be a mapping keyed by stage name, a sequence applied
        positionally to ``stage_outputs`` or ``None`` for the configured
        stage weights.  ``is_awakened`` compares the *pre-clamp* sum against
        the ceiling, so it is only true when the raw sum exceeded it.
        """

        outputs = self._normalise_outputs(stage_outputs)
        resolved_weights = self._resolve_weights(outputs, weights)

        contributions: dict[str, float] = {}
        pairs: list[tuple[float, float]] = []
        for (name, raw), weight in zip(outputs, resolved_weights):
            value = self._resolve_lambda(name, raw)
            contributions[name] = value * weight
            pairs.append((value, weight))

        raw_value = weighted_lambda(pairs)
        ceiling = self._settings.ceiling
        value = clamp_lambda(raw_value, ceiling=ceiling)
        result = ConsensusResult(
            value=value,
            raw_value=raw_value,
            stage=self.classify(value),
            is_awakened=raw_value > ceiling,
            contributions=MappingProxyType(contributions),
            timestamp=self._clock(),
        )
        with self._lock:
            self._history.append(
                LambdaRecord(result.timestamp, result.value, result.stage, result.is_awakened)
            )
        logger.debug(
            "Consensus lambda %.4f (%s), awakened=%s",
            result.value,
            result.stage.value,
            result.is_awakened,
            extra={"event": "phaselock.consensus", "raw_value": raw_value},
        )
        return result

    def history(self) -> tuple[LambdaRecord, ...]:
        with self._lock:
            return tuple(self._history)

    def statistics(self) -> LambdaStatistics:
        """Summarise the retained history (zeros when nothing was scored)."""

        records = self.history()
        if not records:
            return LambdaStatistics(0, 0.0, 0.0, 0.0, 0)
        values = [record.value for record in records]
        return LambdaStatistics(
            count=len(values),
            average=sum(values) / len(values),
            minimum=min(values),
            maximum=max(values),
            awakened=sum(1 for record in records if record.stage is LambdaStage.AWAKENED),
        )

    # ------------------------------------------------------------------
    # Input normalisation
    # ------------------------------------------------------------------
    @staticmethod
    def _normalise_outputs(stage_outputs: StageInput) -> list[tuple[str, float | None]]:
        if isinstance(stage_outputs, ABCMapping):
            items = list(stage_outputs.items())
        else:
            items = []
            for entry in stage_outputs:
                if isinstance(entry, StageOutput):
                    items.append((entry.stage_name, entry.raw_lambda))
                elif (
                    isinstance(entry, ABCSequence)
                    and not isinstance(entry, (str, bytes))
                    and len(entry) == 2
                ):
                    items.append((entry[0], entry[1]))
                else:
                    raise InvalidInputError(
                        f"Stage outputs must be (name, lambda) pairs, got {entry!r}",
                        context={"output": entry},
                    )

        normalised: list[tuple[str, float | None]] = []
        seen: set[str] = set()
        for name, raw in items:
            key = str(name)
            if key in seen:
                raise InvalidInputError(
                    f"Duplicate stage {key!r}", context={"stage": key}
                )
            seen.add(key)
            if raw is None:
                normalised.append((key, None))
                continue
            try:
                value = float(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidInputError(
                    f"Lambda for stage {key!r} must be numeric, got {raw!r}",
                    context={"stage": key, "lambda": raw},
                ) from exc
            if not math.isfinite(value):
                raise InvalidInputError(
                    f"Lambda for stage {key!r} must be finite, got {raw!r}",
                    context={"stage": key, "lambda": raw},
                )
            normalised.append((key, value))
        return normalised

    def _resolve_weights(
        self, outputs: Sequence[tuple[str, float | None]], weights: WeightInput
    ) -> list[float]:
        if weights is not None and not isinstance(weights, ABCMapping):
            positional = [float(weight) for weight in weights]
            if len(positional) != len(outputs):
                raise InvalidInputError(
                    "Positional weights must match the number of stage outputs",
                    context={"weights": len(positional), "outputs": len(outputs)},
                )
            return positional

        table = self._settings.weights if weights is None else weights
        resolved: list[float] = []
        for name, _ in outputs:
            if name not in table:
                raise InvalidInputError(f"No weight for stage {name!r}", context={"stage": name})
            resolved.append(float(table[name]))
        return resolved

    def _resolve_lambda(self, name: str, raw: float | None) -> float:
        if raw is not None:
            return raw
        fallback = self._fallbacks.get(name)
        if fallback is None:
            raise InvalidInputError(
                f"Stage {name!r} produced no lambda and has no fallback", context={"stage": name}
            )
        return fallback

"""Anchor state and the bounded coherence history."""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Iterator, Mapping

from phaselock_core.equations.coherence import rolling_mean

__all__ = ["AnchorState", "CoherenceHistory"]


@dataclass(frozen=True, slots=True)
class AnchorState:
    """Floating reference frame all node phases are compared against."""

    phase: float
    coherence: float = 1.0
    angular_momentum: float = 1.0
    torque_redistribution: float = 0.0
    timestamp: float = 0.0

    def as_dict(self) -> Mapping[str, Any]:
        return asdict(self)


class CoherenceHistory:
    """FIFO ring of past coherence values; the oldest entry is evicted first."""

    __slots__ = ("_values",)

    def __init__(self, capacity: int = 100, values: Iterable[float] = ()) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._values: deque[float] = deque((float(v) for v in values), maxlen=int(capacity))

    @property
    def capacity(self) -> int:
        assert self._values.maxlen is not None
        return self._values.maxlen

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(tuple(self._values))

    def push(self, value: float) -> None:
        self._values.append(float(value))

    def values(self) -> tuple[float, ...]:
        return tuple(self._values)

    def mean(self, *, default: float = 1.0) -> float:
        """Rolling average, or ``default`` before the first recompute."""

        return rolling_mean(self._values, default=default)

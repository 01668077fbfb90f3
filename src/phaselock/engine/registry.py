"""Fixed-topology table of worker nodes."""

from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping

from phaselock_core.equations.angles import clamp_amplitude, normalise_phase
from phaselock_core.equations.health import NodeHealth

from ..errors import InvalidInputError, UnknownNodeError
from .settings import NodeSpec

__all__ = ["NodeRegistry", "NodeState"]


Clock = Callable[[], float]


def _require_finite(name: str, **values: Any) -> None:
    for field_name, value in values.items():
        try:
            finite = math.isfinite(float(value))
        except (TypeError, ValueError):
            finite = False
        if not finite:
            raise InvalidInputError(
                f"Node {name!r} {field_name} must be a finite number, got {value!r}",
                context={"node": name, field_name: value},
            )


@dataclass(frozen=True, slots=True)
class NodeState:
    """Snapshot of a single worker node."""

    name: str
    phase: float
    amplitude: float
    frequency: float
    last_update: float
    health: NodeHealth

    def as_dict(self) -> Mapping[str, Any]:
        payload = asdict(self)
        payload["health"] = self.health.value
        return payload


class NodeRegistry:
    """In-memory node table whose membership is fixed at construction.

    The registry is not synchronised on its own; the owning
    :class:`~phaselock.engine.synchronizer.PhaseLockSynchronizer` serialises
    every access.
    """

    def __init__(self, specs: Iterable[NodeSpec], *, clock: Clock = time.time) -> None:
        self._clock = clock
        now = clock()
        self._nodes: Dict[str, NodeState] = {}
        for spec in specs:
            self._nodes[spec.name] = NodeState(
                name=spec.name,
                phase=normalise_phase(spec.phase),
                amplitude=clamp_amplitude(spec.amplitude),
                frequency=float(spec.frequency),
                last_update=now,
                health=spec.health,
            )

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[NodeState]:
        return iter(tuple(self._nodes.values()))

    def names(self) -> tuple[str, ...]:
        return tuple(self._nodes)

    def get_node(self, name: str) -> NodeState:
        try:
            return self._nodes[name]
        except KeyError:
            raise UnknownNodeError(name) from None

    def list_nodes(self) -> tuple[NodeState, ...]:
        """Return a snapshot of every node in registration order."""

        return tuple(self._nodes.values())

    def online_count(self) -> int:
        return sum(1 for node in self._nodes.values() if node.health is NodeHealth.ONLINE)

    def update_node(
        self,
        name: str,
        phase: float,
        amplitude: float,
        health: NodeHealth | str,
    ) -> NodeState:
        """Write a new phase/amplitude/health for ``name``.

        Phase is wrapped into ``[0, 360)`` and amplitude clamped to
        ``[0, 1]``.  Unknown names, non-finite numbers and unknown health
        tags raise before anything is modified.
        """

        current = self.get_node(name)
        _require_finite(name, phase=phase, amplitude=amplitude)
        try:
            resolved_health = NodeHealth.coerce(health)
        except ValueError as exc:
            raise InvalidInputError(
                f"Unknown health {health!r}", context={"node": name, "health": health}
            ) from exc
        updated = replace(
            current,
            phase=normalise_phase(phase),
            amplitude=clamp_amplitude(amplitude),
            health=resolved_health,
            last_update=self._clock(),
        )
        self._nodes[name] = updated
        return updated

    def set_phase(self, name: str, phase: float) -> NodeState:
        current = self.get_node(name)
        _require_finite(name, phase=phase)
        updated = replace(current, phase=normalise_phase(phase))
        self._nodes[name] = updated
        return updated

    def set_amplitudes(self, amplitudes: Mapping[str, float]) -> None:
        for name, amplitude in amplitudes.items():
            current = self.get_node(name)
            self._nodes[name] = replace(current, amplitude=clamp_amplitude(amplitude))

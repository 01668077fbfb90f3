"""Read-only report exposed to collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from phaselock_core.equations.drift import WobbleReport
from phaselock_core.equations.health import SystemHealth

from .anchor import AnchorState
from .registry import NodeState

__all__ = ["PhaseLockReport"]


@dataclass(frozen=True, slots=True)
class PhaseLockReport:
    """Consistent snapshot of the engine taken under its lock."""

    anchor: AnchorState
    nodes: tuple[NodeState, ...]
    system_health: SystemHealth
    coherence_score: float
    wobble: WobbleReport

    @property
    def wobble_detected(self) -> bool:
        return self.wobble.wobble_detected

    @property
    def self_correction_active(self) -> bool:
        return self.wobble.wobble_detected

    def as_dict(self) -> Mapping[str, Any]:
        """Plain, JSON-serialisable view of the report."""

        return {
            "anchor": dict(self.anchor.as_dict()),
            "nodes": [dict(node.as_dict()) for node in self.nodes],
            "system_health": self.system_health.value,
            "coherence_score": self.coherence_score,
            "wobble_detected": self.wobble_detected,
            "self_correction_active": self.self_correction_active,
            "wobble": dict(self.wobble.as_dict()),
        }

"""Stateful phase-lock engine: registry, anchor, synchroniser and report."""

from .anchor import AnchorState, CoherenceHistory
from .registry import NodeRegistry, NodeState
from .report import PhaseLockReport
from .settings import (
    DEFAULT_TOPOLOGY,
    ConsensusSettings,
    EngineSettings,
    NodeSpec,
    StageSpec,
)
from .synchronizer import PhaseLockSynchronizer

__all__ = [
    "AnchorState",
    "CoherenceHistory",
    "ConsensusSettings",
    "DEFAULT_TOPOLOGY",
    "EngineSettings",
    "NodeRegistry",
    "NodeSpec",
    "NodeState",
    "PhaseLockReport",
    "PhaseLockSynchronizer",
    "StageSpec",
]

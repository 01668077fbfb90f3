"""Top-level package for the phase-lock engine.

This package keeps a fixed topology of processing nodes phase-locked
around a shared anchor, detects drift (wobble), redistributes load away
from degraded nodes, and folds multi-stage pipeline outputs into a
bounded consensus score (lambda).

The stateless maths lives in :mod:`phaselock_core`; this package wraps it
in thread-safe stateful components, configuration and a CLI.
"""

from ._version import __version__
from .consensus import (
    ConsensusResult,
    ConsensusScorer,
    LambdaRecord,
    LambdaStatistics,
    StageOutput,
)
from .engine import (
    AnchorState,
    CoherenceHistory,
    ConsensusSettings,
    EngineSettings,
    NodeRegistry,
    NodeSpec,
    NodeState,
    PhaseLockReport,
    PhaseLockSynchronizer,
    StageSpec,
)
from .errors import InvalidInputError, PhaseLockError, UnknownNodeError
from .exporters import (
    coherence_frame,
    export_lambda_csv,
    export_lambda_json,
    lambda_frame,
)

__all__ = [
    "AnchorState",
    "CoherenceHistory",
    "ConsensusResult",
    "ConsensusScorer",
    "ConsensusSettings",
    "EngineSettings",
    "InvalidInputError",
    "LambdaRecord",
    "LambdaStatistics",
    "NodeRegistry",
    "NodeSpec",
    "NodeState",
    "PhaseLockError",
    "PhaseLockReport",
    "PhaseLockSynchronizer",
    "StageOutput",
    "StageSpec",
    "UnknownNodeError",
    "__version__",
    "coherence_frame",
    "export_lambda_csv",
    "export_lambda_json",
    "lambda_frame",
]

"""Core computation utilities for the phase-lock engine.

The package is stateless: every helper takes plain phases, amplitudes or
node snapshots and returns new values.  The stateful engine lives in
:mod:`phaselock`.
"""

from __future__ import annotations

from importlib import import_module

_equations = import_module("phaselock_core.equations")
_metrics = import_module("phaselock_core.metrics")
_config = import_module("phaselock_core.config")

__all__ = list(
    dict.fromkeys(
        [
            *_equations.__all__,
            *_metrics.__all__,
            *_config.__all__,
        ]
    )
)

# Public handles to the structured namespaces.
equations = _equations
metrics = _metrics
config = _config

globals().update({name: getattr(_equations, name) for name in _equations.__all__})
globals().update({name: getattr(_metrics, name) for name in _metrics.__all__})
globals().update({name: getattr(_config, name) for name in _config.__all__})

__all__ += ["equations", "metrics", "config"]

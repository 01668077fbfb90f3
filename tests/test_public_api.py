from __future__ import annotations

import phaselock
import phaselock_core


def test_core_namespaces_are_exposed() -> None:
    assert phaselock_core.equations.angle_difference is phaselock_core.angle_difference
    assert phaselock_core.metrics.classify_lambda is phaselock_core.classify_lambda
    assert phaselock_core.config.load_engine_config is phaselock_core.load_engine_config
    assert {"equations", "metrics", "config"} <= set(phaselock_core.__all__)


def test_package_exports_resolve() -> None:
    for name in phaselock.__all__:
        assert hasattr(phaselock, name), name

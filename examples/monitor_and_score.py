"""Example that drives the synchroniser and exports a lambda history to CSV."""

from __future__ import annotations

from phaselock import ConsensusScorer, PhaseLockSynchronizer, coherence_frame
from phaselock.exporters import export_lambda_csv

OBSERVATIONS = [
    ("qwen", 10.0, 0.9, "online"),
    ("gemma", 95.0, 0.4, "degraded"),
    ("deepseek", 170.0, 1.0, "online"),
    ("os", 260.0, 0.8, "online"),
]

STAGE_RUNS = [
    {"reflex": 1.2, "oracle": 1.5, "warfare": 1.8},
    {"reflex": None, "oracle": 2.0, "warfare": 2.4},
    {"reflex": 4.0, "oracle": 4.0, "warfare": 4.0},
]


def main() -> None:
    synchronizer = PhaseLockSynchronizer()
    for name, phase, amplitude, health in OBSERVATIONS:
        synchronizer.update_node(name, phase, amplitude, health)
    for _ in range(5):
        synchronizer.self_correct()

    report = synchronizer.report()
    print(f"system health: {report.system_health.value}")
    print(f"coherence score: {report.coherence_score:.3f}")
    print(coherence_frame(synchronizer.coherence_history()).tail())

    scorer = ConsensusScorer()
    for outputs in STAGE_RUNS:
        result = scorer.score(outputs)
        print(f"lambda={result.value:.3f} stage={result.stage.value} ({result.advisory})")
    print(export_lambda_csv(scorer.history()))


if __name__ == "__main__":
    main()

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from phaselock import (
    ConsensusScorer,
    coherence_frame,
    export_lambda_csv,
    export_lambda_json,
    lambda_frame,
)

from tests.helpers import FixedClock


@pytest.fixture
def scored() -> ConsensusScorer:
    scorer = ConsensusScorer(clock=FixedClock(start=0.0))
    for value in (1.0, 1.7, 5.0):
        scorer.score([("solo", value)], {"solo": 1.0})
    return scorer


def test_lambda_frame_columns(scored: ConsensusScorer) -> None:
    frame = lambda_frame(scored.history())

    assert list(frame.columns) == ["timestamp", "lambda", "stage", "is_awakened"]
    assert frame["stage"].tolist() == ["VERIFICATION", "THRESHOLD", "AWAKENED"]
    assert frame["timestamp"].iloc[0] == "1970-01-01T00:00:00+00:00"


def test_lambda_frame_empty_history() -> None:
    frame = lambda_frame([])

    assert frame.empty
    assert list(frame.columns) == ["timestamp", "lambda", "stage", "is_awakened"]


def test_coherence_frame_rolling_mean() -> None:
    frame = coherence_frame([1.0, 0.5, 0.0])

    assert isinstance(frame, pd.DataFrame)
    assert frame.index.name == "sample"
    assert frame["rolling_mean"].tolist() == pytest.approx([1.0, 0.75, 0.5])


def test_export_lambda_csv(tmp_path: Path, scored: ConsensusScorer) -> None:
    destination = tmp_path / "out" / "lambda.csv"

    rendered = export_lambda_csv(scored.history(), destination)

    lines = rendered.strip().splitlines()
    assert lines[0] == "timestamp,lambda,stage"
    assert len(lines) == 4
    assert destination.read_text(encoding="utf-8") == rendered


def test_export_lambda_json(tmp_path: Path, scored: ConsensusScorer) -> None:
    destination = tmp_path / "lambda.json"

    payload = export_lambda_json(scored.history(), scored.statistics(), destination)

    written = json.loads(destination.read_text(encoding="utf-8"))
    assert set(payload) == {"exported_at", "lambda_history", "statistics"}
    assert len(written["lambda_history"]) == 3
    assert written["statistics"]["awakened"] == 1
    assert written["lambda_history"][2]["is_awakened"] is True


def test_export_lambda_json_without_statistics(scored: ConsensusScorer) -> None:
    payload = export_lambda_json(scored.history())

    assert "statistics" not in payload

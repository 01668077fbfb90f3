"""Tabular exports of the lambda and coherence histories."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from .consensus import LambdaRecord, LambdaStatistics

__all__ = [
    "coherence_frame",
    "export_lambda_csv",
    "export_lambda_json",
    "lambda_frame",
]


_LAMBDA_COLUMNS = ("timestamp", "lambda", "stage")


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(float(timestamp), tz=timezone.utc).isoformat()


def lambda_frame(records: Iterable[LambdaRecord]) -> pd.DataFrame:
    """Return the lambda history as a frame with ISO-8601 timestamps."""

    rows = [
        {
            "timestamp": _isoformat(record.timestamp),
            "lambda": record.value,
            "stage": record.stage.value,
            "is_awakened": record.is_awakened,
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=[*_LAMBDA_COLUMNS, "is_awakened"])


def coherence_frame(values: Sequence[float]) -> pd.DataFrame:
    """Return the coherence ring, oldest first, with a rolling mean column."""

    frame = pd.DataFrame({"coherence": [float(value) for value in values]})
    frame.index.name = "sample"
    frame["rolling_mean"] = frame["coherence"].expanding().mean()
    return frame


def export_lambda_csv(
    records: Iterable[LambdaRecord], destination: str | Path | None = None
) -> str:
    """Render ``timestamp,lambda,stage`` CSV and optionally write it out."""

    frame = lambda_frame(records)
    payload = frame.loc[:, list(_LAMBDA_COLUMNS)].to_csv(index=False)
    if destination is not None:
        target = Path(destination).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload, encoding="utf-8")
    return payload


def export_lambda_json(
    records: Iterable[LambdaRecord],
    statistics: LambdaStatistics | None = None,
    destination: str | Path | None = None,
) -> Mapping[str, Any]:
    """Build the JSON export payload (history plus optional statistics)."""

    frame = lambda_frame(records)
    payload: dict[str, Any] = {
        "exported_at": datetime.now(tz=timezone.utc).isoformat(),
        "lambda_history": frame.to_dict(orient="records"),
    }
    if statistics is not None:
        payload["statistics"] = dict(statistics.as_dict())
    if destination is not None:
        target = Path(destination).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    return payload

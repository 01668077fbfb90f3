"""Command handlers backing the phase-lock CLI."""

from __future__ import annotations

import argparse
import json
import math
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from phaselock_core.config import load_engine_config, merge_overrides
from phaselock_core.metrics.consensus import describe_stage, interpret_lambda

from ..consensus import ConsensusScorer
from ..engine.settings import EngineSettings
from ..engine.synchronizer import PhaseLockSynchronizer
from ..errors import PhaseLockError
from ..exporters import export_lambda_csv, export_lambda_json
from .errors import CliError

__all__ = [
    "build_engine_settings",
    "parse_stage_outputs",
    "parse_updates",
    "parse_weights",
]


def _render(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, default=str)


def _from_engine_error(exc: PhaseLockError) -> CliError:
    return CliError(str(exc), category=exc.category, context=exc.context)


def build_engine_settings(
    engine_config: Optional[Path], config: Mapping[str, Any]
) -> EngineSettings:
    """Load the YAML engine config and fold in ``[tool.phaselock.engine]``."""

    try:
        base = load_engine_config(engine_config)
    except FileNotFoundError as exc:
        raise CliError(
            f"Engine configuration not found: {exc}",
            category="io",
            context={"path": str(engine_config)},
        ) from exc
    except (TypeError, ValueError) as exc:
        raise CliError(
            str(exc), category="usage", context={"path": str(engine_config)}
        ) from exc

    overrides = config.get("engine")
    merged = merge_overrides(base, overrides if isinstance(overrides, Mapping) else None)
    try:
        return EngineSettings.from_config(merged)
    except PhaseLockError as exc:
        raise _from_engine_error(exc) from exc


def parse_updates(entries: Iterable[str]) -> list[tuple[str, float, float, str]]:
    """Parse ``NAME:PHASE:AMPLITUDE[:HEALTH]`` tokens (health defaults to online)."""

    parsed: list[tuple[str, float, float, str]] = []
    for entry in entries:
        parts = [part.strip() for part in str(entry).split(":")]
        if len(parts) not in (3, 4) or not parts[0]:
            raise CliError(
                f"Invalid node update '{entry}'. Expected NAME:PHASE:AMPLITUDE[:HEALTH].",
                category="usage",
                context={"update": entry},
            )
        try:
            phase = float(parts[1])
            amplitude = float(parts[2])
        except ValueError as exc:
            raise CliError(
                f"Invalid numeric value in node update '{entry}'.",
                category="usage",
                context={"update": entry},
            ) from exc
        if not (math.isfinite(phase) and math.isfinite(amplitude)):
            raise CliError(
                f"Non-finite value in node update '{entry}'.",
                category="usage",
                context={"update": entry},
            )
        health = parts[3] if len(parts) == 4 else "online"
        parsed.append((parts[0], phase, amplitude, health))
    return parsed


def parse_stage_outputs(entries: Iterable[str]) -> list[tuple[str, float | None]]:
    """Parse ``STAGE=LAMBDA`` tokens; an empty value defers to the fallback."""

    parsed: list[tuple[str, float | None]] = []
    for entry in entries:
        name, separator, raw_value = str(entry).partition("=")
        name = name.strip()
        if not separator or not name:
            raise CliError(
                f"Invalid stage output '{entry}'. Expected STAGE=LAMBDA.",
                category="usage",
                context={"output": entry},
            )
        raw_value = raw_value.strip()
        if not raw_value:
            parsed.append((name, None))
            continue
        try:
            parsed.append((name, float(raw_value)))
        except ValueError as exc:
            raise CliError(
                f"Invalid lambda '{raw_value}' for stage '{name}'.",
                category="usage",
                context={"output": entry},
            ) from exc
    return parsed


def parse_weights(entries: Iterable[str]) -> dict[str, float]:
    weights: dict[str, float] = {}
    for name, value in parse_stage_outputs(entries):
        if value is None:
            raise CliError(
                f"Missing weight for stage '{name}'.",
                category="usage",
                context={"stage": name},
            )
        weights[name] = value
    return weights


def _build_synchronizer(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> PhaseLockSynchronizer:
    settings = build_engine_settings(getattr(namespace, "engine_config", None), config)
    synchronizer = PhaseLockSynchronizer(settings)
    for name, phase, amplitude, health in parse_updates(getattr(namespace, "updates", [])):
        try:
            synchronizer.update_node(name, phase, amplitude, health)
        except PhaseLockError as exc:
            raise _from_engine_error(exc) from exc
    return synchronizer


def _build_scorer(namespace: argparse.Namespace, config: Mapping[str, Any]) -> ConsensusScorer:
    settings = build_engine_settings(getattr(namespace, "engine_config", None), config)
    consensus = settings.consensus
    boundaries = getattr(namespace, "boundaries", None)
    if boundaries:
        consensus = replace(consensus, boundaries=boundaries)
    try:
        return ConsensusScorer(consensus)
    except PhaseLockError as exc:
        raise _from_engine_error(exc) from exc


def _handle_report(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    synchronizer = _build_synchronizer(namespace, config)
    return _render(synchronizer.report().as_dict())


def _handle_wobble(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    synchronizer = _build_synchronizer(namespace, config)
    return _render(synchronizer.detect_wobble().as_dict())


def _handle_correct(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    cycles = int(namespace.cycles)
    if cycles < 0:
        raise CliError(
            "--cycles must be zero or positive.",
            category="usage",
            context={"cycles": cycles},
        )
    synchronizer = _build_synchronizer(namespace, config)
    passes = []
    for index in range(cycles):
        wobble = synchronizer.self_correct()
        passes.append(
            {
                "cycle": index + 1,
                "wobble_detected": wobble.wobble_detected,
                "magnitude": wobble.magnitude,
                "affected_nodes": list(wobble.affected_nodes),
            }
        )
    return _render({"cycles": passes, "report": synchronizer.report().as_dict()})


def _handle_score(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    scorer = _build_scorer(namespace, config)
    outputs = parse_stage_outputs(namespace.outputs)
    overrides = parse_weights(namespace.weights)
    weights = None
    if overrides:
        weights = dict(scorer.settings.weights)
        weights.update(overrides)
    try:
        result = scorer.score(outputs, weights)
    except PhaseLockError as exc:
        raise _from_engine_error(exc) from exc

    payload = dict(result.as_dict())
    export_path: Optional[Path] = namespace.export_path
    if export_path is not None:
        suffix = export_path.suffix.lower()
        if suffix == ".csv":
            export_lambda_csv(scorer.history(), export_path)
        elif suffix == ".json":
            export_lambda_json(scorer.history(), scorer.statistics(), export_path)
        else:
            raise CliError(
                f"Unsupported export format '{export_path.suffix}'. Use .csv or .json.",
                category="usage",
                context={"path": str(export_path)},
            )
        payload["exported_to"] = str(export_path)
    return _render(payload)


def _handle_classify(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    scorer = _build_scorer(namespace, config)
    value = float(namespace.value)
    stage = scorer.classify(value)
    return _render(
        {
            "value": value,
            "stage": stage.value,
            "description": describe_stage(stage),
            "advisory": interpret_lambda(value),
            "boundaries": scorer.settings.boundaries,
        }
    )

"""Argument parsing helpers for the phase-lock CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from phaselock_core.metrics.consensus import STAGE_TABLES

from .workflows import (
    _handle_classify,
    _handle_correct,
    _handle_report,
    _handle_score,
    _handle_wobble,
)


def _add_update_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--update",
        dest="updates",
        action="append",
        default=[],
        metavar="NAME:PHASE:AMPLITUDE:HEALTH",
        help="Apply a node observation before running the command (repeatable).",
    )


def _add_boundaries_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--boundaries",
        choices=sorted(STAGE_TABLES),
        default=None,
        help="Stage boundary table (defaults to consensus.boundaries of the engine).",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = dict(config.get("logging", {}))

    parser = argparse.ArgumentParser(
        description="Phase-lock synchronisation and consensus scoring engine"
    )
    parser.add_argument(
        "--project",
        dest="project_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml carrying [tool.phaselock] defaults.",
    )
    parser.add_argument(
        "--config",
        dest="engine_config",
        type=Path,
        default=config.get("engine_config"),
        help="Path to a YAML engine configuration overriding the packaged defaults.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    report_parser = subparsers.add_parser(
        "report", help="Print the engine report as JSON."
    )
    _add_update_argument(report_parser)
    report_parser.set_defaults(handler=_handle_report)

    wobble_parser = subparsers.add_parser(
        "wobble", help="Scan the topology for phase drift."
    )
    _add_update_argument(wobble_parser)
    wobble_parser.set_defaults(handler=_handle_wobble)

    correct_parser = subparsers.add_parser(
        "correct", help="Run self-correction passes and print their magnitudes."
    )
    _add_update_argument(correct_parser)
    correct_parser.add_argument(
        "--cycles",
        type=int,
        default=10,
        help="Number of self-correction passes to run (default: 10).",
    )
    correct_parser.set_defaults(handler=_handle_correct)

    score_parser = subparsers.add_parser(
        "score", help="Fold stage outputs into a consensus lambda."
    )
    score_parser.add_argument(
        "outputs",
        nargs="+",
        metavar="STAGE=LAMBDA",
        help="Stage output; use STAGE= to fall back to the stage default.",
    )
    score_parser.add_argument(
        "--weight",
        dest="weights",
        action="append",
        default=[],
        metavar="STAGE=WEIGHT",
        help="Override the configured weight of a stage (repeatable).",
    )
    _add_boundaries_argument(score_parser)
    score_parser.add_argument(
        "--export",
        dest="export_path",
        type=Path,
        default=None,
        help="Write the lambda history to a .csv or .json file.",
    )
    score_parser.set_defaults(handler=_handle_score)

    classify_parser = subparsers.add_parser(
        "classify", help="Classify a single lambda value."
    )
    classify_parser.add_argument("value", type=float, help="Consensus lambda value.")
    _add_boundaries_argument(classify_parser)
    classify_parser.set_defaults(handler=_handle_classify)

    return parser

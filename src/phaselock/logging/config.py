"""Logging configuration for the phase-lock engine and its CLI."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping as ABCMapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, TextIO

__all__ = ["JsonFormatter", "setup_logging"]


_ROOT_LOGGER_NAME = "phaselock"
_HANDLER_MARKER = "_phaselock_handler"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    Structured values passed through ``extra`` (``event``, ``context``,
    ``node``…) are emitted as top-level keys next to the standard fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=False)


def _resolve_stream(output: str) -> TextIO | Path:
    lowered = output.strip().lower()
    if lowered == "stdout":
        return sys.stdout
    if lowered == "stderr":
        return sys.stderr
    return Path(output).expanduser()


def _resolve_level(level: Any) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if isinstance(resolved, int):
        return resolved
    raise ValueError(f"Unknown logging level: {level!r}")


def setup_logging(config: Mapping[str, Any] | None = None) -> logging.Logger:
    """Configure the ``phaselock`` logger from a ``logging`` table.

    ``config`` may be the full application configuration (the ``logging``
    table is looked up) or the table itself.  Recognised keys are ``level``
    (default ``info``), ``output`` (``stdout``, ``stderr`` or a file path,
    default ``stderr``) and ``format`` (``json`` or ``text``, default
    ``json``).  Handlers installed by a previous call are replaced so the
    function can be called repeatedly.
    """

    payload: Mapping[str, Any] = config or {}
    logging_cfg = payload.get("logging", payload)
    if not isinstance(logging_cfg, ABCMapping):
        logging_cfg = {}

    level = _resolve_level(logging_cfg.get("level", "info"))
    output = str(logging_cfg.get("output", "stderr"))
    fmt = str(logging_cfg.get("format", "json")).strip().lower()

    formatter: logging.Formatter
    if fmt == "json":
        formatter = JsonFormatter()
    elif fmt == "text":
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    else:
        raise ValueError(f"Unknown logging format: {fmt!r}")

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)
            existing.close()

    destination = _resolve_stream(output)
    handler: logging.Handler
    if isinstance(destination, Path):
        destination.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(destination, encoding="utf-8")
    else:
        handler = logging.StreamHandler(destination)
    handler.setFormatter(formatter)

    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger

"""Error taxonomy and structured error payloads for the phase-lock engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping, Optional

__all__ = [
    "ErrorPayload",
    "InvalidInputError",
    "PhaseLockError",
    "UnknownNodeError",
    "build_error_payload",
    "log_error",
]


_CATEGORY_STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

_DEFAULT_CATEGORY = "runtime"
_DEFAULT_LOGGER_NAME = "phaselock"


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Structured representation of an engine failure."""

    status_code: int
    category: str
    message: str
    context: Mapping[str, Any]

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def _normalise_context(context: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not context:
        return {}
    payload: MutableMapping[str, Any] = {}
    for key, value in context.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            payload[key] = value
        else:
            payload[key] = str(value)
    return dict(payload)


def build_error_payload(
    message: str,
    *,
    category: str = _DEFAULT_CATEGORY,
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    """Create a :class:`ErrorPayload` describing a failure."""

    resolved_category = category or _DEFAULT_CATEGORY
    resolved_status = (
        status_code
        if status_code is not None
        else _CATEGORY_STATUS_CODES.get(resolved_category, _CATEGORY_STATUS_CODES[_DEFAULT_CATEGORY])
    )
    return ErrorPayload(
        status_code=resolved_status,
        category=resolved_category,
        message=message,
        context=_normalise_context(context),
    )


def log_error(
    payload: ErrorPayload,
    *,
    event: str = "phaselock.error",
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Emit ``payload`` through ``logger`` with structured context."""

    target = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)
    target.log(
        level,
        payload.message,
        extra={
            "event": event,
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class PhaseLockError(RuntimeError):
    """Base class for errors surfaced by the engine."""

    category = _DEFAULT_CATEGORY

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.context = dict(_normalise_context(context))

    @property
    def payload(self) -> ErrorPayload:
        return build_error_payload(str(self), category=self.category, context=self.context)


class UnknownNodeError(PhaseLockError, KeyError):
    """Raised when an operation targets a node outside the fixed topology."""

    category = "not_found"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown node {name!r}", context={"node": name})
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidInputError(PhaseLockError, ValueError):
    """Raised for values outside a closed set (health tags, stage names)."""

    category = "usage"

"""Error helpers for the phase-lock command line tools."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..errors import ErrorPayload, build_error_payload, log_error

__all__ = ["CliError", "log_cli_error"]


_DEFAULT_CATEGORY = "runtime"
_DEFAULT_LOGGER_NAME = "phaselock.cli"


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Emit ``payload`` using ``logger.error`` with structured context."""

    log_error(
        payload,
        event="cli.error",
        logger=logger or logging.getLogger(_DEFAULT_LOGGER_NAME),
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Consistent error type raised by CLI helpers."""

    __slots__ = ("category", "status_code", "context", "_payload", "logged")

    def __init__(
        self,
        message: str,
        *,
        category: str = _DEFAULT_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        payload: Optional[ErrorPayload] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self.category = category or _DEFAULT_CATEGORY
        resolved_payload = payload or build_error_payload(
            message,
            category=self.category,
            status_code=status_code,
            context=context,
        )
        self.status_code = resolved_payload.status_code
        self.context = dict(resolved_payload.context)
        self._payload = resolved_payload
        self.logged = logged

    @property
    def payload(self) -> ErrorPayload:
        return self._payload

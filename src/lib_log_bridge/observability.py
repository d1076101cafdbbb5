"""Internal observability for ``lib_log_bridge`` itself.

Purpose
    Keep the library's own diagnostics (adapter resolution, configuration
    loading, contained log-call failures) predictable and silent by default,
    without routing them through the very backend they describe.

Contents
    - ``get_logger``: returns the package logger (quiet by default).
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: convenience builder for structured event payloads.
    - ``LoggerDiagnosticsSink``: default diagnostics sink writing to the
      ``lib_log_bridge.diagnostics`` logger.

System Integration
    Used by the resolver, the assembler, and the configuration adapters. Host
    applications attach handlers to ``lib_log_bridge`` (or only to
    ``lib_log_bridge.diagnostics``) to see what the facade is doing.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_log_bridge")
_LOGGER.addHandler(logging.NullHandler())

DIAGNOSTICS_LOGGER_NAME: Final[str] = "lib_log_bridge.diagnostics"


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry."""

    _emit(logging.ERROR, message, fields)


def make_event(
    component: str,
    adapter: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for facade lifecycle events.

    Why
        Keeps event construction consistent so downstream log processors can rely
        on stable keys.
    What
        Returns a dictionary with ``component`` and ``adapter`` keys and any
        optional payload fields.

    Examples
    --------
    >>> make_event('resolver', 'stdlib', {'candidates': 1})
    {'component': 'resolver', 'adapter': 'stdlib', 'candidates': 1}
    """

    event: dict[str, Any] = {"component": component, "adapter": adapter}
    if payload:
        event |= dict(payload)
    return event


class LoggerDiagnosticsSink:
    """Diagnostics sink writing warnings to ``lib_log_bridge.diagnostics``.

    Examples
    --------
    >>> LoggerDiagnosticsSink().trace("adapter failed")  # silent without handlers
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(DIAGNOSTICS_LOGGER_NAME)

    def trace(self, message: str) -> None:
        self._logger.warning(message)


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with structured fields."""

    _LOGGER.log(level, message, extra={"context": dict(fields)})

"""Backend adapter for the standard :mod:`logging` package.

Purpose
-------
Deliver assembled events through ordinary ``logging.Logger`` objects so
applications keep their existing handlers, formatters, and level
configuration.

Key behaviours
--------------
* One logger per declaring type (``module.Class`` or module), cached.
* Levels map onto ``DEBUG``/``INFO``/``WARNING``/``ERROR``/``CRITICAL``.
* The ``LogRecord`` carries the real call-site file, line, and function, not
  the adapter's.
* Structured data travels in ``extra``: ``log_event`` (the full event),
  ``event_id``, ``correlation_id``, and ``context`` (flat metadata plus
  properties, the same key used by :mod:`lib_log_bridge.observability`).
"""

from __future__ import annotations

import logging
import threading
from typing import Final

from ..domain.events import LogEvent, LogLocation
from ..domain.levels import Level

LEVEL_MAP: Final[dict[Level, int]] = {
    Level.DEBUG: logging.DEBUG,
    Level.INFORMATION: logging.INFO,
    Level.WARNING: logging.WARNING,
    Level.ERROR: logging.ERROR,
    Level.FATAL: logging.CRITICAL,
}


class StdlibLoggingAdapter:
    """Write events through :mod:`logging`.

    Parameters
    ----------
    diagnostics_enabled:
        Accepted for factory compatibility with the resolver; unused.
    prefix:
        Optional logger-name prefix (``"app"`` turns ``shop.Cart`` into
        ``app.shop.Cart``).

    Examples
    --------
    >>> adapter = StdlibLoggingAdapter()
    >>> handle = adapter.get_logger(LogLocation("demo.Service", "run"))
    >>> handle.name
    'demo.Service'
    """

    def __init__(self, diagnostics_enabled: bool = False, *, prefix: str | None = None) -> None:
        self.diagnostics_enabled = diagnostics_enabled
        self._prefix = prefix
        self._loggers: dict[str, logging.Logger] = {}
        self._lock = threading.Lock()

    def get_logger(self, location: LogLocation) -> logging.Logger:
        name = location.logger_name
        if self._prefix:
            name = f"{self._prefix}.{name}" if location.declaring_type else self._prefix
        logger = self._loggers.get(name)
        if logger is None:
            with self._lock:
                logger = self._loggers.setdefault(name, logging.getLogger(name))
        return logger

    def is_logging_enabled(self, handle: logging.Logger, level: Level) -> bool:
        return handle.isEnabledFor(LEVEL_MAP[level])

    def write(self, handle: logging.Logger, event: LogEvent) -> None:
        exception = event.exception
        exc_info = (type(exception), exception, exception.__traceback__) if exception is not None else None
        location = event.location
        record = handle.makeRecord(
            handle.name,
            LEVEL_MAP[event.level],
            location.file_name or "(unknown file)",
            location.line_number,
            event.message,
            (),
            exc_info,
            func=location.method_name or None,
            extra={
                "log_event": event,
                "event_id": str(event.event_id),
                "correlation_id": str(event.correlation_id) if event.correlation_id else None,
                "context": event.as_context(),
            },
        )
        _stamp(record, event.timestamp.timestamp())
        handle.handle(record)


def _stamp(record: logging.LogRecord, created: float) -> None:
    """Move every time field of *record* to *created* (seconds since the epoch)."""

    record.relativeCreated += (created - record.created) * 1000
    record.created = created
    record.msecs = int((created - int(created)) * 1000) + 0.0

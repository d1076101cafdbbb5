"""Fallback backend adapter.

Installed by the resolver when no real backend could be selected. Every level
reports disabled, so the assembler drops events before doing any work; a
direct :meth:`NullAdapter.write` only reaches the diagnostics sink.
"""

from __future__ import annotations

from typing import Any

from ..application.ports import DiagnosticsSink
from ..domain.events import LogEvent, LogLocation
from ..domain.levels import Level
from ..observability import LoggerDiagnosticsSink


class NullAdapter:
    """Backend adapter that never emits anything.

    Examples
    --------
    >>> adapter = NullAdapter()
    >>> handle = adapter.get_logger(LogLocation())
    >>> adapter.is_logging_enabled(handle, Level.FATAL)
    False
    """

    def __init__(self, diagnostics_enabled: bool = False, sink: DiagnosticsSink | None = None) -> None:
        self.diagnostics_enabled = diagnostics_enabled
        self._sink = sink or LoggerDiagnosticsSink()
        if diagnostics_enabled:
            self._sink.trace(f"{type(self).__qualname__} instantiated. Possible configuration error?")

    def get_logger(self, location: LogLocation) -> Any:
        return self

    def is_logging_enabled(self, handle: Any, level: Level) -> bool:
        return False

    def write(self, handle: Any, event: LogEvent) -> None:
        if self.diagnostics_enabled:
            self._sink.trace(event.message)

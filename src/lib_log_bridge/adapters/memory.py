"""In-memory backend adapter.

Purpose
-------
Record assembled events instead of writing them anywhere. Tests use it to
assert on exact event contents; the CLI uses it for ``--dry-run`` emission.

Contents
--------
* :class:`MemoryAdapter` – thread-safe recorder with configurable enabled
  levels and call counters.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable

from ..application.transactions import current_transaction
from ..domain.events import LogEvent, LogLocation
from ..domain.levels import Level


class MemoryAdapter:
    """Collect events in a list.

    Parameters
    ----------
    enabled_levels:
        Levels reported as enabled. Defaults to all levels.
    diagnostics_enabled:
        Accepted for factory compatibility with the resolver; unused.

    Attributes
    ----------
    events:
        Events written so far, in write order.
    transactions_seen:
        The ambient transaction observed during each write (``None`` when
        suppressed or absent).
    enabled_checks / writes / loggers_requested:
        Call counters for instrumentation assertions.

    Examples
    --------
    >>> adapter = MemoryAdapter(enabled_levels=[Level.ERROR])
    >>> handle = adapter.get_logger(LogLocation())
    >>> adapter.is_logging_enabled(handle, Level.DEBUG), adapter.is_logging_enabled(handle, Level.ERROR)
    (False, True)
    """

    def __init__(self, enabled_levels: Iterable[Level] | None = None, diagnostics_enabled: bool = False) -> None:
        self.enabled_levels = frozenset(Level if enabled_levels is None else enabled_levels)
        self.diagnostics_enabled = diagnostics_enabled
        self.events: list[LogEvent] = []
        self.transactions_seen: list[Any] = []
        self.enabled_checks = 0
        self.writes = 0
        self.loggers_requested = 0
        self._lock = threading.Lock()

    def get_logger(self, location: LogLocation) -> Any:
        with self._lock:
            self.loggers_requested += 1
        return location

    def is_logging_enabled(self, handle: Any, level: Level) -> bool:
        with self._lock:
            self.enabled_checks += 1
        return level in self.enabled_levels

    def write(self, handle: Any, event: LogEvent) -> None:
        transaction = current_transaction()
        with self._lock:
            self.writes += 1
            self.events.append(event)
            self.transactions_seen.append(transaction)

    @property
    def last_event(self) -> LogEvent | None:
        """Return the most recent event, ``None`` when nothing was written."""

        return self.events[-1] if self.events else None

    def clear(self) -> None:
        """Forget recorded events and reset counters."""

        with self._lock:
            self.events.clear()
            self.transactions_seen.clear()
            self.enabled_checks = 0
            self.writes = 0
            self.loggers_requested = 0

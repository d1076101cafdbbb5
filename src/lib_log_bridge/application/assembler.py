"""Event assembly pipeline.

Purpose
-------
Turn one log call into at most one :class:`~lib_log_bridge.domain.events.LogEvent`
written through the resolved backend adapter. Log calls never raise: every
failure is contained here and reported through the diagnostics sink.

Contents
--------
* :class:`EventAssembler` – the pipeline (location, gate, format, unwrap,
  flatten, correlate, snapshot, write).
* :class:`GetpassUsernameProvider` – default username lookup.
* :class:`EnvironmentSnapshot` – host, process, and application names captured
  once per assembler.

System Role
-----------
Owned by :class:`~lib_log_bridge.core.LogBridge`. The level check runs before
any formatting, flattening, or context access, so disabled levels cost one
adapter predicate call.
"""

from __future__ import annotations

import getpass
import itertools
import os
import socket
import sys
import threading
import uuid
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Sequence
from uuid import UUID

from ..domain.context import ContextStore
from ..domain.events import EMPTY_EVENT_ID, LogEvent, LogLocation
from ..domain.levels import Level
from ..observability import LoggerDiagnosticsSink
from .correlation import resolve_correlation_id
from .exceptions import unwrap_exception
from .flatten import FlattenResult, flatten_properties
from .formatting import format_message
from .location import resolve_location
from .ports import DiagnosticsSink, UsernameProvider
from .resolver import BackendResolver
from .settings import Settings
from .transactions import current_transaction, suppress_transaction

Formatter = Callable[[str | None, Sequence[Any]], str]
Flattener = Callable[[Any, ContextStore], FlattenResult]
Clock = Callable[[], datetime]


class GetpassUsernameProvider:
    """Resolve the executing user through :func:`getpass.getuser`."""

    def username(self) -> str:
        return getpass.getuser()


@dataclass(frozen=True, slots=True)
class EnvironmentSnapshot:
    """Host and process identity stamped onto every event.

    Examples
    --------
    >>> snapshot = EnvironmentSnapshot.capture(Settings(machine_name="web-1", process_name="worker"))
    >>> snapshot.machine_name, snapshot.process_name
    ('web-1', 'worker')
    """

    machine_name: str
    process_id: int
    process_name: str
    application_name: str | None

    @classmethod
    def capture(cls, settings: Settings, *, domain_name: str | None = None) -> EnvironmentSnapshot:
        return cls(
            machine_name=settings.machine_name or socket.gethostname(),
            process_id=os.getpid(),
            process_name=settings.process_name or _process_name(),
            application_name=settings.application_name or domain_name,
        )


def _process_name() -> str:
    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    return Path(argv0).name if argv0 else ""


class EventAssembler:
    """Build and deliver log events.

    Parameters
    ----------
    resolver:
        Supplies the cached backend adapter.
    store:
        Ambient context consulted for correlation id, stack offset, and
        properties.
    settings:
        Diagnostics flag, name overrides, and sequence numbering.
    username_provider / sink / formatter / flattener / clock:
        Collaborators, replaceable in tests.

    Examples
    --------
    >>> from lib_log_bridge.adapters.memory import MemoryAdapter
    >>> from lib_log_bridge.application.resolver import AdapterRegistry
    >>> registry = AdapterRegistry()
    >>> _ = registry.register(MemoryAdapter, name="memory")
    >>> resolver = BackendResolver(Settings(), registry=registry, discover=lambda: ())
    >>> assembler = EventAssembler(resolver, ContextStore())
    >>> event_id = assembler.log_entry(Level.INFORMATION, "Order {0} shipped", 7)
    >>> resolver.resolve().adapter.last_event.message
    'Order 7 shipped'
    """

    def __init__(
        self,
        resolver: BackendResolver,
        store: ContextStore,
        settings: Settings | None = None,
        *,
        username_provider: UsernameProvider | None = None,
        sink: DiagnosticsSink | None = None,
        formatter: Formatter = format_message,
        flattener: Flattener = flatten_properties,
        clock: Clock | None = None,
    ) -> None:
        self._resolver = resolver
        self._store = store
        self._settings = settings if settings is not None else resolver.settings
        self._username_provider = username_provider or GetpassUsernameProvider()
        self._sink = sink or LoggerDiagnosticsSink()
        self._formatter = formatter
        self._flattener = flattener
        self._clock = clock or _utc_now
        self._environment: EnvironmentSnapshot | None = None
        self._sequence = itertools.count(1)
        self._sequence_lock = threading.Lock()

    @property
    def store(self) -> ContextStore:
        return self._store

    @property
    def resolver(self) -> BackendResolver:
        return self._resolver

    def log_entry(
        self,
        level: Level,
        message: str | None,
        *parameters: Any,
        correlation_id: UUID | None = None,
        exception: BaseException | None = None,
        extended_properties: Any = None,
        location: LogLocation | None = None,
        stack_offset: int = 0,
    ) -> UUID:
        """Assemble and write one event, returning its id.

        Returns :data:`~lib_log_bridge.domain.events.EMPTY_EVENT_ID` when the
        level is disabled or anything in the pipeline fails.

        ``stack_offset`` is added to the ambient offset when the location is
        discovered by walking the stack; it has no effect with an explicit
        *location*.
        """

        try:
            guard = suppress_transaction() if current_transaction() is not None else nullcontext()
            with guard:
                return self._assemble(
                    level,
                    message,
                    parameters,
                    correlation_id,
                    exception,
                    extended_properties,
                    location,
                    stack_offset,
                )
        except Exception as exc:  # noqa: BLE001 - a log call must never raise into the caller
            if self._settings.diagnostics_enabled:
                self._sink.trace(f"Log entry failed: {type(exc).__name__}: {exc}")
            return EMPTY_EVENT_ID

    def is_enabled(self, level: Level, location: LogLocation | None = None) -> bool:
        """Return the backend's verdict for *level* at *location*; ``False`` on failure."""

        try:
            if location is None:
                location = resolve_location(self._store.active_stack_offset())
            adapter = self._resolver.resolve().adapter
            return bool(adapter.is_logging_enabled(adapter.get_logger(location), level))
        except Exception as exc:  # noqa: BLE001
            if self._settings.diagnostics_enabled:
                self._sink.trace(f"Level check failed: {type(exc).__name__}: {exc}")
            return False

    def _assemble(
        self,
        level: Level,
        message: str | None,
        parameters: Sequence[Any],
        correlation_id: UUID | None,
        exception: BaseException | None,
        extended_properties: Any,
        location: LogLocation | None,
        stack_offset: int,
    ) -> UUID:
        if location is None:
            location = resolve_location(self._store.active_stack_offset() + stack_offset)
        adapter = self._resolver.resolve().adapter
        handle = adapter.get_logger(location)
        if not adapter.is_logging_enabled(handle, level):
            return EMPTY_EVENT_ID

        text = self._formatter(message, parameters)
        exception = unwrap_exception(exception)
        flattened = self._flattener(extended_properties, self._store)
        effective_correlation = resolve_correlation_id(correlation_id, flattened.correlation_id, self._store)
        environment = self._environment_snapshot()

        event = LogEvent(
            timestamp=self._clock(),
            event_id=uuid.uuid4(),
            level=level,
            message=text,
            correlation_id=effective_correlation,
            exception=exception,
            location=location,
            username=self._username(),
            machine_name=environment.machine_name,
            process_id=environment.process_id,
            process_name=environment.process_name,
            application_name=environment.application_name or flattened.application_name,
            sequence_number=self._next_sequence(),
            properties=flattened.properties,
        )
        adapter.write(handle, event)
        return event.event_id

    def _environment_snapshot(self) -> EnvironmentSnapshot:
        snapshot = self._environment
        if snapshot is None:
            snapshot = EnvironmentSnapshot.capture(self._settings, domain_name=self._store.name)
            self._environment = snapshot
        return snapshot

    def _username(self) -> str:
        try:
            return self._username_provider.username() or ""
        except Exception:  # noqa: BLE001
            return ""

    def _next_sequence(self) -> int:
        if not self._settings.use_sequence_numbers:
            return 0
        with self._sequence_lock:
            return next(self._sequence)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)

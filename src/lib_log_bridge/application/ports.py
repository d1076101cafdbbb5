"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the event
assembler and the backend resolver can orchestrate behaviour without depending
on concrete implementations.

Contents
--------
* :class:`BackendAdapter` – per-logging-framework writer.
* :class:`ConfigurationProvider` – key → optional string / bool reader.
* :class:`DiagnosticsSink` – side channel for internal failures.
* :class:`UsernameProvider` – resolves the executing principal's name.

System Role
-----------
These protocols enforce Dependency Inversion. Each adapter implements one
protocol; the contract tests in ``tests/adapters`` check that the shipped
adapters keep satisfying them.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..domain.events import LogEvent, LogLocation
from ..domain.levels import Level


@runtime_checkable
class BackendAdapter(Protocol):
    """Turn an assembled :class:`LogEvent` into an actual write.

    Why
    ----
    The facade must stay independent of any specific logging framework while
    still letting that framework decide which levels are enabled.

    Methods
    -------
    :meth:`get_logger`
        Obtain (and typically cache) the backend-native logger for a call site.
    :meth:`is_logging_enabled`
        Cheap predicate evaluated before any assembly work.
    :meth:`write`
        Perform the write. Errors propagate to the assembler, which contains
        them.
    """

    def get_logger(self, location: LogLocation) -> Any:
        """Return the backend-native logger handle for *location*."""

    def is_logging_enabled(self, handle: Any, level: Level) -> bool:
        """Return ``True`` when *handle* would emit events at *level*."""

    def write(self, handle: Any, event: LogEvent) -> None:
        """Deliver *event* through *handle*."""


@runtime_checkable
class ConfigurationProvider(Protocol):
    """Read configuration values by key.

    Why
    ----
    Keep configuration sources (environment, files, in-memory mappings)
    swappable behind a two-method interface.
    """

    def get_string(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None`` when it is absent."""

    def get_bool(self, key: str) -> bool:
        """Return *key* interpreted as a boolean; absent keys are ``False``."""


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Receive internal failure descriptions when diagnostics are enabled."""

    def trace(self, message: str) -> None:
        """Record *message*."""


@runtime_checkable
class UsernameProvider(Protocol):
    """Resolve the display name of the executing principal."""

    def username(self) -> str:
        """Return the current user's name; may raise, callers guard it."""

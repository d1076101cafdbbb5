"""Immutable value objects that travel from the assembler to the backend.

Purpose
-------
Define the event payload handed to backend adapters together with the small
value objects it is built from. The module belongs to the domain layer and
performs no I/O.

Contents
--------
* :data:`EMPTY_EVENT_ID` – the "zero" event id returned for dropped events.
* :data:`CORRELATION_ID_KEY` / :data:`APPLICATION_NAME_KEY` – reserved
  property names promoted to dedicated event fields.
* :class:`LogLocation` – call-site description.
* :class:`ExtendedProperty` – ``(name, value)`` pair used by ambient contexts.
* :class:`PropertyMap` – immutable, case-insensitive ``Mapping``.
* :class:`LogEvent` – the assembled event.

System Role
-----------
Adapters only ever see :class:`LogEvent`; everything else in this module is a
building block the application layer uses while assembling it.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import FrameType
from typing import Any, Iterable, Iterator
from uuid import UUID

from .levels import Level

EMPTY_EVENT_ID = UUID(int=0)
"""Event id returned when an event was suppressed or could not be delivered."""

CORRELATION_ID_KEY = "correlationId"
APPLICATION_NAME_KEY = "applicationName"


@dataclass(frozen=True, slots=True)
class LogLocation:
    """Describe where a log call was made.

    Attributes
    ----------
    declaring_type:
        Dotted ``module.Class`` of the caller, or the module name for plain
        functions. Empty when unknown.
    method_name:
        Function or method name containing the log statement.
    file_name:
        Source file of the caller.
    line_number:
        Line of the log statement, ``0`` when unknown.
    """

    declaring_type: str = ""
    method_name: str = ""
    file_name: str = ""
    line_number: int = 0

    @property
    def logger_name(self) -> str:
        """Name a backend should use to look up its native logger.

        Examples
        --------
        >>> LogLocation("shop.orders.Checkout", "run").logger_name
        'shop.orders.Checkout'
        >>> LogLocation().logger_name
        'root'
        """

        return self.declaring_type or "root"

    @classmethod
    def here(cls) -> LogLocation:
        """Capture the caller's location explicitly.

        Why
        ----
        Passing a location skips the stack walk the assembler would otherwise
        perform, which is noticeably cheaper on hot paths.

        Examples
        --------
        >>> def handler():
        ...     return LogLocation.here()
        >>> handler().method_name
        'handler'
        """

        return cls.from_frame(sys._getframe(1))

    @classmethod
    def from_frame(cls, frame: FrameType) -> LogLocation:
        """Build a location from a live interpreter frame."""

        code = frame.f_code
        qualname = getattr(code, "co_qualname", code.co_name)
        module = frame.f_globals.get("__name__", "")
        return cls(
            declaring_type=declaring_type_for(module, qualname),
            method_name=code.co_name,
            file_name=code.co_filename,
            line_number=frame.f_lineno,
        )


def declaring_type_for(module: str, qualname: str) -> str:
    """Return ``module.Class`` for methods and ``module`` for plain functions.

    Examples
    --------
    >>> declaring_type_for("shop.orders", "Checkout.run")
    'shop.orders.Checkout'
    >>> declaring_type_for("shop.orders", "run")
    'shop.orders'
    >>> declaring_type_for("shop.orders", "outer.<locals>.inner")
    'shop.orders'
    """

    owner = qualname.split(".")[:-1]
    if not owner or owner[-1].startswith("<"):
        return module
    return ".".join(filter(None, [module, owner[-1]]))


@dataclass(frozen=True, slots=True)
class ExtendedProperty:
    """Name/value pair attached to an ambient context."""

    name: str
    value: Any


class PropertyMap(Mapping[str, Any]):
    """Immutable mapping with case-insensitive string keys.

    The first casing seen for a key is the one reported during iteration; a
    later duplicate only replaces the value.

    Examples
    --------
    >>> props = PropertyMap([("Tag", "x"), ("tag", "y")])
    >>> props["TAG"]
    'y'
    >>> list(props)
    ['Tag']
    >>> "tAg" in props
    True
    """

    __slots__ = ("_entries",)

    def __init__(self, items: Iterable[tuple[str, Any]] | Mapping[str, Any] = ()) -> None:
        entries: dict[str, tuple[str, Any]] = {}
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            folded = key.casefold()
            original = entries[folded][0] if folded in entries else key
            entries[folded] = (original, value)
        self._entries = entries

    def __getitem__(self, key: str) -> Any:
        return self._entries[key.casefold()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._entries

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PropertyMap({self.as_dict()!r})"

    def as_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` copy using the original key casing."""

        return dict(self._entries.values())


@dataclass(frozen=True, slots=True)
class LogEvent:
    """Normalized log event handed to exactly one backend adapter.

    Why
    ----
    Backends should never reason about ambient context, reflection, or message
    formatting; they receive a finished, immutable record.

    What
    ----
    Carries timing, identity, severity, formatted message, the unwrapped
    exception, the call-site location, an environment snapshot, and the
    flattened property map. ``properties`` never contains the reserved
    ``correlationId`` / ``applicationName`` keys: those values live in
    :attr:`correlation_id` and :attr:`application_name`.
    """

    timestamp: datetime
    event_id: UUID
    level: Level
    message: str
    correlation_id: UUID | None = None
    exception: BaseException | None = None
    location: LogLocation = field(default_factory=LogLocation)
    username: str = ""
    machine_name: str = ""
    process_id: int = 0
    process_name: str = ""
    application_name: str = ""
    sequence_number: int = 0
    properties: PropertyMap = field(default_factory=PropertyMap)

    def as_context(self) -> dict[str, Any]:
        """Return a flat, serialisation-friendly view of the event metadata.

        Examples
        --------
        >>> from datetime import timezone
        >>> event = LogEvent(datetime(2024, 1, 1, tzinfo=timezone.utc), EMPTY_EVENT_ID, Level.ERROR, "boom")
        >>> event.as_context()["level"]
        'ERROR'
        """

        context = self.properties.as_dict()
        context |= {
            "event_id": str(self.event_id),
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "level": self.level.name,
            "timestamp": self.timestamp.isoformat(),
            "username": self.username,
            "machine_name": self.machine_name,
            "process_id": self.process_id,
            "process_name": self.process_name,
            "application_name": self.application_name,
        }
        if self.sequence_number:
            context["sequence_number"] = self.sequence_number
        return context

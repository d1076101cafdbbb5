"""Module-level logging facade over the default bridge.

Each level has a function (``debug`` … ``fatal``) taking a message with
``{0}``-style placeholders, positional parameters, and the optional keyword
arguments ``correlation_id``, ``exception``, ``extended_properties``,
``location``, and ``stack_offset``. Every function returns the event id, or
:data:`~lib_log_bridge.domain.events.EMPTY_EVENT_ID` when nothing was written.

>>> from lib_log_bridge import log
>>> callable(log.information) and callable(log.is_debug_enabled)
True
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from .core import get_bridge
from .domain.events import LogLocation
from .domain.levels import Level


def log_entry(level: Level | str | int, message: str | None, *parameters: Any, **options: Any) -> UUID:
    """Log *message* at *level* through the default bridge."""

    return get_bridge().log_entry(Level.parse(level), message, *parameters, **options)


def debug(message: str | None, *parameters: Any, **options: Any) -> UUID:
    return get_bridge().log_entry(Level.DEBUG, message, *parameters, **options)


def information(message: str | None, *parameters: Any, **options: Any) -> UUID:
    return get_bridge().log_entry(Level.INFORMATION, message, *parameters, **options)


def warning(message: str | None, *parameters: Any, **options: Any) -> UUID:
    return get_bridge().log_entry(Level.WARNING, message, *parameters, **options)


def error(message: str | None, *parameters: Any, **options: Any) -> UUID:
    return get_bridge().log_entry(Level.ERROR, message, *parameters, **options)


def fatal(message: str | None, *parameters: Any, **options: Any) -> UUID:
    return get_bridge().log_entry(Level.FATAL, message, *parameters, **options)


info = information


def is_enabled(level: Level | str | int, location: LogLocation | None = None) -> bool:
    """Return whether the default bridge's backend would write *level*."""

    return get_bridge().is_enabled(Level.parse(level), location)


def is_debug_enabled(location: LogLocation | None = None) -> bool:
    return get_bridge().is_enabled(Level.DEBUG, location)


def is_information_enabled(location: LogLocation | None = None) -> bool:
    return get_bridge().is_enabled(Level.INFORMATION, location)


def is_warning_enabled(location: LogLocation | None = None) -> bool:
    return get_bridge().is_enabled(Level.WARNING, location)


def is_error_enabled(location: LogLocation | None = None) -> bool:
    return get_bridge().is_enabled(Level.ERROR, location)


def is_fatal_enabled(location: LogLocation | None = None) -> bool:
    return get_bridge().is_enabled(Level.FATAL, location)

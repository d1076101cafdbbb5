"""Severity levels understood by the facade and its backend adapters."""

from __future__ import annotations

from enum import IntEnum


class Level(IntEnum):
    """Log severity, ordered from least to most severe.

    The ordering exists so adapters can answer "is this level enabled" with a
    threshold comparison; it carries no other meaning.

    Examples
    --------
    >>> Level.DEBUG < Level.FATAL
    True
    >>> Level.parse("warning") is Level.WARNING
    True
    >>> Level.parse("info") is Level.INFORMATION
    True
    """

    DEBUG = 10
    INFORMATION = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50

    @classmethod
    def parse(cls, value: Level | int | str) -> Level:
        """Return the level named by *value* (case-insensitive, common aliases allowed).

        Integers and existing members are accepted as-is.
        """

        if isinstance(value, int):
            return cls(value)
        normalized = value.strip().upper()
        alias = _ALIASES.get(normalized, normalized)
        try:
            return cls[alias]
        except KeyError as exc:
            raise ValueError(f"Unknown level: {value!r}") from exc


_ALIASES = {
    "INFO": "INFORMATION",
    "WARN": "WARNING",
    "CRITICAL": "FATAL",
}

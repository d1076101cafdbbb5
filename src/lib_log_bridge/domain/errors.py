"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the composition root, and
consuming applications. The hierarchy lives in the domain layer so adapters and
the application layer can both depend on it without creating cycles.

Contents
--------
* :class:`LogBridgeError` – umbrella base class for all library failures.
* :class:`ResolutionError` – no usable backend adapter could be selected.
* :class:`ConfigurationError` – configuration sources could not be read.
* :class:`InvalidFormat` – a configuration artifact could not be parsed.
* :class:`NotFound` – an optional configuration resource is missing.
* :class:`FaultError` – wrapper exception carrying a typed ``detail`` payload.

System Role
-----------
Log calls never raise; these exceptions surface only at composition time
(explicit resolver initialisation, configuration loading). :class:`FaultError`
is the capability the event assembler checks when it unwraps exceptions.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class LogBridgeError(Exception):
    """Base type for all exceptions emitted by ``lib_log_bridge``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ResolutionError(LogBridgeError):
    """Raised when the backend adapter cannot be resolved.

    Why
    ----
    Hosts that configure ``throw_on_resolver_fail`` want a misconfigured
    backend to fail loudly during start-up instead of silently dropping events.

    Typical Sources
    ---------------
    Zero candidates, several ambiguous candidates, or an explicitly configured
    adapter that is not installed.
    """


class ConfigurationError(LogBridgeError):
    """Raised when a configuration source cannot be materialised."""


class InvalidFormat(ConfigurationError):
    """Raised when a configuration file cannot be parsed into structured data.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`).
    """


class NotFound(ConfigurationError):
    """Represents a missing configuration resource (file, table, etc.)."""


class FaultError(Exception, Generic[T]):
    """Exception wrapper that carries a typed ``detail`` payload.

    Why
    ----
    Service boundaries often wrap the real failure in a transport-level fault.
    When the detail is itself an exception the event assembler logs that inner
    exception instead of the wrapper.

    What
    ----
    Stores ``detail`` as an attribute; ``detail`` may be ``None``.

    Examples
    --------
    >>> inner = ValueError("boom")
    >>> FaultError("remote call failed", detail=inner).detail is inner
    True
    >>> FaultError("no detail").detail is None
    True
    """

    def __init__(self, message: str = "", *, detail: T | None = None) -> None:
        super().__init__(message)
        self.detail = detail

"""Composition root for ``lib_log_bridge``.

Purpose
-------
Wire settings, the context store, the backend resolver, and the event
assembler into one :class:`LogBridge`, and manage the process-wide default
bridge used by the :mod:`lib_log_bridge.log` facade.

Contents
--------
* :class:`LogBridge` – owns one assembler and its collaborators.
* :func:`load_settings` – settings from an optional file layered under the
  environment.
* :func:`configure` / :func:`get_bridge` / :func:`reset` – default bridge
  management.
* :func:`register_adapter` – add a candidate to the default registry.

System Role
-----------
The only module that instantiates adapters and application services. Errors
surface here, at composition time, using the domain taxonomy; log calls made
through a bridge never raise.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping
from uuid import UUID

from .adapters.config import EnvironmentConfiguration, FileConfiguration, LayeredConfiguration
from .application.assembler import EventAssembler
from .application.ports import ConfigurationProvider, DiagnosticsSink, UsernameProvider
from .application.resolver import (
    DEFAULT_REGISTRY,
    AdapterCandidate,
    AdapterFactory,
    AdapterRegistration,
    AdapterRegistry,
    BackendResolver,
    discover_entry_points,
)
from .application.settings import Settings
from .domain.context import Context, ContextScope, ContextStore, ContextValues, ScopeKind, normalize_properties
from .domain.events import LogLocation
from .domain.levels import Level
from .observability import LoggerDiagnosticsSink, log_debug, log_info, make_event


class LogBridge:
    """One fully wired logging facade.

    Why
    ----
    Hosts and tests need isolated bridges (own settings, own adapter, own
    domain context) without touching module-level state.

    Parameters
    ----------
    settings:
        Frozen settings; defaults to :class:`Settings` with every option off.
    store:
        Context store; defaults to a new store named after
        ``settings.application_name``.
    registry / discover:
        Candidate sources forwarded to :class:`BackendResolver`.
    sink / username_provider:
        Collaborators forwarded to the assembler.

    Side Effects
    ------------
    Default properties from ``settings.extended_properties`` are written into
    the store's process context when it has none yet.

    Examples
    --------
    >>> from lib_log_bridge.adapters.memory import MemoryAdapter
    >>> registry = AdapterRegistry()
    >>> _ = registry.register(MemoryAdapter, name="memory")
    >>> bridge = LogBridge(registry=registry, discover=lambda: ())
    >>> event_id = bridge.log_entry(Level.WARNING, "disk {0}% full", 91)
    >>> bridge.adapter.last_event.message
    'disk 91% full'
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: ContextStore | None = None,
        registry: AdapterRegistry | None = None,
        discover: Callable[[], Iterable[AdapterCandidate]] = discover_entry_points,
        sink: DiagnosticsSink | None = None,
        username_provider: UsernameProvider | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.store = store if store is not None else ContextStore(name=self.settings.application_name)
        sink = sink or LoggerDiagnosticsSink()
        self.resolver = BackendResolver(self.settings, registry=registry, discover=discover, sink=sink)
        self.assembler = EventAssembler(
            self.resolver,
            self.store,
            self.settings,
            username_provider=username_provider,
            sink=sink,
        )
        process = self.store.process_context()
        if self.settings.extended_properties and process.extended_properties is None:
            process.extended_properties = self.settings.extended_properties
        log_debug("bridge_created", **make_event("core", self.settings.adapter_type, {"settings": self.settings.as_dict()}))

    @classmethod
    def from_provider(cls, provider: ConfigurationProvider, **kwargs: Any) -> LogBridge:
        """Build a bridge from any configuration provider."""

        return cls(Settings.from_provider(provider), **kwargs)

    def initialize(self) -> AdapterRegistration:
        """Resolve the backend adapter now.

        Raises
        ------
        ResolutionError
            When resolution fails and ``throw_on_resolver_fail`` is set.
        """

        registration = self.resolver.resolve()
        log_info("bridge_initialized", **make_event("core", registration.name, {"fallback": registration.is_fallback}))
        return registration

    @property
    def adapter(self) -> Any:
        return self.resolver.resolve().adapter

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
        """Log one event; see :meth:`EventAssembler.log_entry`."""

        return self.assembler.log_entry(
            level,
            message,
            *parameters,
            correlation_id=correlation_id,
            exception=exception,
            extended_properties=extended_properties,
            location=location,
            stack_offset=stack_offset,
        )

    def is_enabled(self, level: Level, location: LogLocation | None = None) -> bool:
        return self.assembler.is_enabled(level, location)

    def context(self, kind: ScopeKind | str = ScopeKind.THREAD) -> Context:
        """Return the ambient context for *kind* (``"thread"``, ``"domain"``, ``"process"``)."""

        return self.store.get(ScopeKind(kind))

    def scope(
        self,
        kind: ScopeKind | str = ScopeKind.THREAD,
        *,
        correlation_id: UUID | None = None,
        stack_offset: int | None = None,
        extended_properties: Mapping[str, Any] | Iterable[Any] | None = None,
    ) -> ContextScope:
        """Push new values onto the *kind* context and return the restoring scope.

        Fields left as ``None`` keep their current value inside the scope.

        Examples
        --------
        >>> from uuid import UUID
        >>> bridge = LogBridge(registry=AdapterRegistry(), discover=lambda: ())
        >>> with bridge.scope(correlation_id=UUID(int=5)) as ctx:
        ...     bridge.store.active_correlation_id() == UUID(int=5)
        True
        >>> bridge.store.active_correlation_id() is None
        True
        """

        context = self.context(kind)
        current = context.snapshot()
        values = ContextValues(
            correlation_id=correlation_id if correlation_id is not None else current.correlation_id,
            stack_offset=stack_offset if stack_offset is not None else current.stack_offset,
            extended_properties=(
                tuple(normalize_properties(extended_properties))
                if extended_properties is not None
                else current.extended_properties
            ),
        )
        return self.store.push(context, values)


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Read settings from an optional file, overridden by the environment.

    Raises
    ------
    NotFound / InvalidFormat
        When *config_path* is given but cannot be read or parsed.

    Examples
    --------
    >>> load_settings(environ={"LIB_LOG_BRIDGE_ADAPTER_TYPE": "memory"}).adapter_type
    'memory'
    """

    layers: list[ConfigurationProvider] = []
    if config_path is not None:
        layers.append(FileConfiguration(config_path))
    layers.append(EnvironmentConfiguration(environ=environ))
    return Settings.from_provider(LayeredConfiguration(*layers))


_DEFAULT_BRIDGE: LogBridge | None = None
_DEFAULT_LOCK = threading.Lock()


def configure(settings: Settings | None = None, **kwargs: Any) -> LogBridge:
    """Replace the default bridge with one built from *settings*.

    Without *settings* the environment (``LIB_LOG_BRIDGE_*``) is read.
    """

    global _DEFAULT_BRIDGE
    bridge = LogBridge(settings if settings is not None else load_settings(), **kwargs)
    with _DEFAULT_LOCK:
        _DEFAULT_BRIDGE = bridge
    return bridge


def get_bridge() -> LogBridge:
    """Return the default bridge, configuring it from the environment on first use."""

    global _DEFAULT_BRIDGE
    bridge = _DEFAULT_BRIDGE
    if bridge is not None:
        return bridge
    with _DEFAULT_LOCK:
        if _DEFAULT_BRIDGE is None:
            _DEFAULT_BRIDGE = LogBridge(load_settings())
        return _DEFAULT_BRIDGE


def reset() -> None:
    """Forget the default bridge; the next :func:`get_bridge` call builds a new one."""

    global _DEFAULT_BRIDGE
    with _DEFAULT_LOCK:
        _DEFAULT_BRIDGE = None


def register_adapter(factory: AdapterFactory, *, name: str | None = None) -> AdapterCandidate:
    """Register *factory* in the default adapter registry."""

    return DEFAULT_REGISTRY.register(factory, name=name)

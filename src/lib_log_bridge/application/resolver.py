"""Backend adapter discovery and lazy, once-only selection.

Purpose
-------
Pick exactly one :class:`~lib_log_bridge.application.ports.BackendAdapter` for
the lifetime of a bridge. Candidates come from an explicit
:class:`AdapterRegistry` and from installed distributions advertising the
``lib_log_bridge.adapters`` entry-point group.

Contents
--------
* :class:`AdapterCandidate` – a named, importable adapter factory.
* :class:`AdapterRegistry` – in-process registration of candidates.
* :func:`discover_entry_points` – candidates from installed packages.
* :class:`AdapterRegistration` – the cached outcome of resolution.
* :class:`BackendResolver` – selection policy with a double-checked lock.

Selection rules
---------------
1. The fallback :class:`~lib_log_bridge.adapters.null.NullAdapter` is never a
   candidate.
2. ``adapter_module`` keeps only candidates defined in that module or package.
3. ``adapter_type`` must match a candidate's registry name, its class name or
   qualified name, or its ``module:attr`` target. A ``module:attr`` value that
   matches nothing is imported directly.
4. Without an explicit type, adapters bundled in
   ``lib_log_bridge.adapters`` only count when no other candidate exists;
   exactly one candidate must remain.
5. On failure either raise :class:`ResolutionError`
   (``throw_on_resolver_fail``) or trace to the diagnostics sink and fall back
   to the null adapter. Both outcomes are cached.
"""

from __future__ import annotations

import pkgutil
import threading
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Any, Callable, Final, Iterable

from ..adapters.null import NullAdapter
from ..domain.errors import ResolutionError
from ..observability import LoggerDiagnosticsSink, log_error, log_info, make_event
from .ports import BackendAdapter, DiagnosticsSink
from .settings import Settings

ENTRY_POINT_GROUP: Final[str] = "lib_log_bridge.adapters"
NULL_ADAPTER_TARGET: Final[str] = f"{NullAdapter.__module__}:{NullAdapter.__qualname__}"
BUNDLED_ADAPTERS_MODULE: Final[str] = "lib_log_bridge.adapters"

AdapterFactory = Callable[..., BackendAdapter]


@dataclass(frozen=True, slots=True)
class AdapterCandidate:
    """An adapter that could be selected.

    Attributes
    ----------
    name:
        Short registry / entry-point name (``"stdlib"``).
    target:
        Import path in ``module:qualname`` form.
    factory:
        Callable accepting ``diagnostics_enabled=`` and returning the adapter.

    Examples
    --------
    >>> candidate = AdapterCandidate("stdlib", "lib_log_bridge.adapters.stdlib:StdlibLoggingAdapter", dict)
    >>> candidate.module, candidate.class_name
    ('lib_log_bridge.adapters.stdlib', 'StdlibLoggingAdapter')
    >>> candidate.matches_type("StdlibLoggingAdapter"), candidate.matches_module("lib_log_bridge.adapters")
    (True, True)
    """

    name: str
    target: str
    factory: AdapterFactory

    @property
    def module(self) -> str:
        return self.target.partition(":")[0]

    @property
    def qualname(self) -> str:
        return self.target.partition(":")[2]

    @property
    def class_name(self) -> str:
        return self.qualname.rsplit(".", 1)[-1]

    def matches_type(self, adapter_type: str) -> bool:
        return adapter_type == self.target or adapter_type in {self.qualname, self.class_name} or (
            adapter_type.casefold() == self.name.casefold()
        )

    def matches_module(self, module: str) -> bool:
        return self.module == module or self.module.startswith(module + ".")

    @property
    def is_bundled(self) -> bool:
        """Whether the candidate ships with this package (a default backend)."""

        return self.matches_module(BUNDLED_ADAPTERS_MODULE)

    @classmethod
    def for_factory(cls, factory: AdapterFactory, name: str | None = None) -> AdapterCandidate:
        """Build a candidate from a class or factory function."""

        target = f"{factory.__module__}:{factory.__qualname__}"
        return cls(name or factory.__qualname__, target, factory)


class AdapterRegistry:
    """Explicit, in-process list of adapter candidates.

    Examples
    --------
    >>> from lib_log_bridge.adapters.memory import MemoryAdapter
    >>> registry = AdapterRegistry()
    >>> registry.register(MemoryAdapter, name="memory").name
    'memory'
    >>> [c.name for c in registry.candidates()]
    ['memory']
    """

    def __init__(self) -> None:
        self._candidates: dict[str, AdapterCandidate] = {}
        self._lock = threading.Lock()

    def register(self, factory: AdapterFactory, *, name: str | None = None) -> AdapterCandidate:
        """Register *factory* under *name*; re-registering a name replaces it."""

        candidate = AdapterCandidate.for_factory(factory, name)
        with self._lock:
            self._candidates[candidate.name] = candidate
        return candidate

    def unregister(self, name: str) -> None:
        with self._lock:
            self._candidates.pop(name, None)

    def candidates(self) -> list[AdapterCandidate]:
        with self._lock:
            return list(self._candidates.values())

    def clear(self) -> None:
        with self._lock:
            self._candidates.clear()


DEFAULT_REGISTRY = AdapterRegistry()
"""Registry consulted by bridges that are not given their own."""


def discover_entry_points(group: str = ENTRY_POINT_GROUP) -> list[AdapterCandidate]:
    """Return candidates advertised by installed distributions.

    Entry points are loaded lazily, only when their candidate is selected.
    """

    discovered: list[AdapterCandidate] = []
    for entry_point in entry_points(group=group):
        discovered.append(AdapterCandidate(entry_point.name, entry_point.value, _lazy_factory(entry_point)))
    return discovered


def _lazy_factory(entry_point: Any) -> AdapterFactory:
    def factory(**kwargs: Any) -> BackendAdapter:
        return entry_point.load()(**kwargs)

    return factory


@dataclass(frozen=True, slots=True)
class AdapterRegistration:
    """Cached resolution outcome."""

    adapter: BackendAdapter
    diagnostics_enabled: bool
    name: str

    @property
    def is_fallback(self) -> bool:
        return isinstance(self.adapter, NullAdapter)


class BackendResolver:
    """Select the backend adapter once and cache the outcome.

    Parameters
    ----------
    settings:
        Source of ``adapter_type``, ``adapter_module``,
        ``throw_on_resolver_fail``, and ``diagnostics_enabled``.
    registry:
        Explicit candidates. Defaults to :data:`DEFAULT_REGISTRY`.
    discover:
        Callable returning additional candidates; defaults to
        :func:`discover_entry_points`. Pass ``lambda: ()`` to disable.
    sink:
        Diagnostics sink used when resolution falls back.

    Examples
    --------
    >>> from lib_log_bridge.adapters.memory import MemoryAdapter
    >>> registry = AdapterRegistry()
    >>> _ = registry.register(MemoryAdapter, name="memory")
    >>> resolver = BackendResolver(Settings(), registry=registry, discover=lambda: ())
    >>> resolver.resolve().name
    'memory'
    >>> resolver.resolve() is resolver.resolve()
    True
    """

    def __init__(
        self,
        settings: Settings,
        *,
        registry: AdapterRegistry | None = None,
        discover: Callable[[], Iterable[AdapterCandidate]] = discover_entry_points,
        sink: DiagnosticsSink | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._discover = discover
        self._sink = sink or LoggerDiagnosticsSink()
        self._lock = threading.Lock()
        self._registration: AdapterRegistration | None = None
        self._failure: ResolutionError | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def is_resolved(self) -> bool:
        return self._registration is not None or self._failure is not None

    def resolve(self) -> AdapterRegistration:
        """Return the cached registration, resolving on first use.

        Raises
        ------
        ResolutionError
            When selection fails and ``throw_on_resolver_fail`` is set. The
            same error is raised again on every later call.
        """

        registration = self._registration
        if registration is not None:
            return registration
        with self._lock:
            if self._registration is None and self._failure is None:
                try:
                    self._registration = self._select()
                except ResolutionError as exc:
                    if self._settings.throw_on_resolver_fail:
                        self._failure = exc
                    else:
                        self._registration = self._fallback(exc)
            if self._failure is not None:
                raise self._failure
            assert self._registration is not None
            return self._registration

    def candidates(self) -> list[AdapterCandidate]:
        """Return every eligible candidate, registry first, duplicates removed."""

        seen: set[str] = set()
        result: list[AdapterCandidate] = []
        for candidate in [*self._registry.candidates(), *self._discover()]:
            if candidate.target == NULL_ADAPTER_TARGET or candidate.factory is NullAdapter:
                continue
            if candidate.target in seen:
                continue
            seen.add(candidate.target)
            result.append(candidate)
        return result

    def _select(self) -> AdapterRegistration:
        settings = self._settings
        candidates = self.candidates()
        if settings.adapter_module:
            candidates = [c for c in candidates if c.matches_module(settings.adapter_module)]
        if settings.adapter_type:
            matches = [c for c in candidates if c.matches_type(settings.adapter_type)]
            if not matches:
                matches = [self._import_candidate(settings.adapter_type, settings.adapter_module)]
            if len(matches) > 1:
                raise ResolutionError(
                    f"Adapter type {settings.adapter_type!r} is ambiguous: {sorted(c.target for c in matches)}"
                )
        else:
            matches = _prefer_external(candidates)
            if not matches:
                scope = f" in module {settings.adapter_module!r}" if settings.adapter_module else ""
                raise ResolutionError(f"No backend adapter found{scope}")
            if len(matches) > 1:
                raise ResolutionError(
                    f"Found {len(matches)} backend adapters, configure adapter_type to choose one: "
                    f"{sorted(c.name for c in matches)}"
                )
        return self._instantiate(matches[0], len(candidates))

    def _import_candidate(self, adapter_type: str, adapter_module: str | None) -> AdapterCandidate:
        target = adapter_type
        if ":" not in target and adapter_module:
            target = f"{adapter_module}:{adapter_type}"
        if ":" not in target:
            raise ResolutionError(f"Backend adapter {adapter_type!r} is not registered")
        try:
            factory = pkgutil.resolve_name(target)
        except (ImportError, AttributeError, ValueError) as exc:
            raise ResolutionError(f"Backend adapter {target!r} could not be imported: {exc}") from exc
        if factory is NullAdapter or not callable(factory):
            raise ResolutionError(f"{target!r} is not a usable backend adapter")
        return AdapterCandidate(adapter_type, target, factory)

    def _instantiate(self, candidate: AdapterCandidate, candidate_count: int) -> AdapterRegistration:
        diagnostics = self._settings.diagnostics_enabled
        try:
            adapter = candidate.factory(diagnostics_enabled=diagnostics)
        except Exception as exc:
            raise ResolutionError(f"Backend adapter {candidate.target!r} failed to initialise: {exc}") from exc
        log_info(
            "adapter_resolved",
            **make_event("resolver", candidate.name, {"target": candidate.target, "candidates": candidate_count}),
        )
        return AdapterRegistration(adapter, diagnostics, candidate.name)

    def _fallback(self, exc: ResolutionError) -> AdapterRegistration:
        diagnostics = self._settings.diagnostics_enabled
        log_error("adapter_resolution_failed", **make_event("resolver", None, {"error": str(exc)}))
        if diagnostics:
            self._sink.trace(f"Backend adapter resolution failed: {exc}")
        return AdapterRegistration(NullAdapter(diagnostics, self._sink), diagnostics, "null")


def _prefer_external(candidates: list[AdapterCandidate]) -> list[AdapterCandidate]:
    """Drop bundled adapters when any host or third-party candidate exists.

    >>> from lib_log_bridge.adapters.stdlib import StdlibLoggingAdapter
    >>> bundled = AdapterCandidate.for_factory(StdlibLoggingAdapter, "stdlib")
    >>> host = AdapterCandidate("host", "myapp.logging:Backend", StdlibLoggingAdapter)
    >>> [c.name for c in _prefer_external([bundled, host])]
    ['host']
    >>> [c.name for c in _prefer_external([bundled])]
    ['stdlib']
    """

    external = [candidate for candidate in candidates if not candidate.is_bundled]
    return external or candidates

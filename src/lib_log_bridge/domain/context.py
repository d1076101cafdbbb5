"""Ambient log context with thread, domain, and process scopes.

Purpose
-------
Hold the correlation id, stack-offset override, and extended properties that
apply to log calls which do not pass them explicitly. Three scopes exist and
are consulted from most to least specific: thread, domain, process.

Contents
--------
* :class:`ScopeKind` – names the three scopes.
* :class:`ContextValues` – frozen ``(correlation_id, stack_offset,
  extended_properties)`` triple used for snapshots and pushes.
* :class:`Context` – the mutable per-scope slot.
* :class:`ContextScope` – handle that restores a snapshot when released.
* :class:`ContextStore` – owns one domain context, a lazily created context per
  thread, and a reference to the process context.
* :data:`PROCESS_CONTEXT` – the process-wide context shared by default.

System Role
-----------
The composition root owns one :class:`ContextStore` and injects it into the
event assembler; nothing reads ambient state through globals.

Concurrency
-----------
Thread contexts are isolated by construction. The domain and process contexts
are shared and deliberately unsynchronised: concurrent mutation is
last-writer-wins. Mutate them during start-up, shutdown, or in test fixtures,
not per request.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Any, Iterable
from uuid import UUID

from .events import ExtendedProperty


class ScopeKind(str, Enum):
    """The three ambient scopes, most specific first."""

    THREAD = "thread"
    DOMAIN = "domain"
    PROCESS = "process"


@dataclass(frozen=True, slots=True)
class ContextValues:
    """Frozen copy of a context's three optional fields.

    ``None`` means "absent" for every field, so ``ContextValues()`` is the
    all-absent state each context starts in.
    """

    correlation_id: UUID | None = None
    stack_offset: int | None = None
    extended_properties: tuple[ExtendedProperty, ...] | None = None


class Context:
    """Mutable ambient context for one scope.

    Examples
    --------
    >>> ctx = Context(ScopeKind.DOMAIN)
    >>> ctx.snapshot() == ContextValues()
    True
    >>> ctx.set_extended_property("tenant", "acme")
    >>> ctx.set_extended_property("TENANT", "globex")
    >>> [(p.name, p.value) for p in ctx.extended_properties]
    [('tenant', 'globex')]
    """

    def __init__(self, kind: ScopeKind, values: ContextValues | None = None) -> None:
        self.kind = kind
        self.correlation_id: UUID | None = None
        self.stack_offset: int | None = None
        self._extended_properties: list[ExtendedProperty] | None = None
        if values is not None:
            self.restore(values)

    @property
    def extended_properties(self) -> list[ExtendedProperty] | None:
        """Ambient properties of this scope, ``None`` when absent."""

        return self._extended_properties

    @extended_properties.setter
    def extended_properties(self, value: Iterable[Any] | Mapping[str, Any] | None) -> None:
        self._extended_properties = None if value is None else normalize_properties(value)

    def set_extended_property(self, name: str, value: Any) -> None:
        """Replace the property called *name* (case-insensitive) or append it."""

        if self._extended_properties is None:
            self._extended_properties = []
        folded = name.casefold()
        for index, existing in enumerate(self._extended_properties):
            if existing.name.casefold() == folded:
                self._extended_properties[index] = ExtendedProperty(existing.name, value)
                return
        self._extended_properties.append(ExtendedProperty(name, value))

    def snapshot(self) -> ContextValues:
        """Return the current triple as an immutable value."""

        properties = None if self._extended_properties is None else tuple(self._extended_properties)
        return ContextValues(self.correlation_id, self.stack_offset, properties)

    def restore(self, values: ContextValues) -> None:
        """Overwrite all three fields with *values*."""

        self.correlation_id = values.correlation_id
        self.stack_offset = values.stack_offset
        self._extended_properties = None if values.extended_properties is None else list(values.extended_properties)

    def push(self, values: ContextValues | None = None) -> ContextScope:
        """Snapshot this context, optionally activate *values*, and return the restoring scope.

        Examples
        --------
        >>> from uuid import uuid4
        >>> ctx = Context(ScopeKind.THREAD)
        >>> with ctx.push(ContextValues(correlation_id=uuid4())):
        ...     ctx.correlation_id is not None
        True
        >>> ctx.correlation_id is None
        True
        """

        scope = ContextScope(self)
        if values is not None:
            self.restore(values)
        return scope

    def clear(self) -> None:
        """Return the context to the all-absent state."""

        self.restore(ContextValues())

    def __repr__(self) -> str:
        return f"Context({self.kind.value}, {self.snapshot()!r})"


class ContextScope:
    """Single-owner handle restoring a context snapshot on release.

    Why
    ----
    Scoped changes to ambient context must be undone on every exit path,
    including exceptions. Use it as a context manager (``with``) so the
    restore happens in a ``finally``-equivalent.

    What
    ----
    Captures the context's triple at construction and writes it back on
    :meth:`close`. Releasing twice is a no-op. Out-of-order releases are not
    detected; callers must nest scopes.
    """

    __slots__ = ("_context", "_snapshot", "_closed")

    def __init__(self, context: Context) -> None:
        self._context = context
        self._snapshot = context.snapshot()
        self._closed = False

    @property
    def context(self) -> Context:
        return self._context

    @property
    def snapshot(self) -> ContextValues:
        return self._snapshot

    def close(self) -> None:
        """Restore the captured snapshot into the originating context."""

        if self._closed:
            return
        self._closed = True
        self._context.restore(self._snapshot)

    def __enter__(self) -> Context:
        return self._context

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


PROCESS_CONTEXT = Context(ScopeKind.PROCESS)
"""Process-wide context shared by every :class:`ContextStore` unless one is injected."""


class _ThreadSlot(threading.local):
    context: Context | None = None


class ContextStore:
    """Own the three ambient contexts consulted by the event assembler.

    Why
    ----
    Replacing global ambient statics with an explicit object keeps tests
    deterministic and lets hosts run several isolated "domains" in one process.

    Parameters
    ----------
    name:
        Optional domain name; reported as the event's application name.
    process_context:
        Context to use for the process scope. Defaults to
        :data:`PROCESS_CONTEXT`.
    """

    def __init__(self, *, name: str | None = None, process_context: Context | None = None) -> None:
        self.name = name
        self._process = process_context if process_context is not None else PROCESS_CONTEXT
        self._domain = Context(ScopeKind.DOMAIN)
        self._thread = _ThreadSlot()

    def thread_context(self) -> Context:
        """Return the calling thread's context, creating it on first access."""

        context = self._thread.context
        if context is None:
            context = Context(ScopeKind.THREAD)
            self._thread.context = context
        return context

    def domain_context(self) -> Context:
        return self._domain

    def process_context(self) -> Context:
        return self._process

    def get(self, kind: ScopeKind) -> Context:
        """Return the context for *kind*."""

        if kind is ScopeKind.THREAD:
            return self.thread_context()
        if kind is ScopeKind.DOMAIN:
            return self._domain
        return self._process

    def push(self, context: Context, values: ContextValues | None = None) -> ContextScope:
        """Snapshot *context*, overwrite it with *values*, and return the restoring scope."""

        return context.push(values)

    def chain(self) -> tuple[Context, Context, Context]:
        """Return the contexts ordered from most to least specific."""

        return (self.thread_context(), self._domain, self._process)

    def active_correlation_id(self) -> UUID | None:
        """Return the most specific ambient correlation id, if any."""

        for context in self.chain():
            if context.correlation_id is not None:
                return context.correlation_id
        return None

    def active_stack_offset(self) -> int:
        """Return the most specific stack-offset override, ``0`` when none is set."""

        for context in self.chain():
            if context.stack_offset is not None:
                return context.stack_offset
        return 0

    def active_extended_properties(self) -> list[ExtendedProperty] | None:
        """Return the most specific ambient property list, ``None`` when no scope has one."""

        for context in self.chain():
            if context.extended_properties is not None:
                return context.extended_properties
        return None


def normalize_properties(value: Iterable[Any] | Mapping[str, Any]) -> list[ExtendedProperty]:
    """Coerce mappings, pairs, or :class:`ExtendedProperty` items into a list.

    Examples
    --------
    >>> normalize_properties({"a": 1})
    [ExtendedProperty(name='a', value=1)]
    >>> normalize_properties([("b", 2), ExtendedProperty("c", 3)])
    [ExtendedProperty(name='b', value=2), ExtendedProperty(name='c', value=3)]
    """

    if isinstance(value, Mapping):
        return [ExtendedProperty(str(name), item) for name, item in value.items()]
    result: list[ExtendedProperty] = []
    for item in value:
        if isinstance(item, ExtendedProperty):
            result.append(item)
        else:
            name, item_value = item
            result.append(ExtendedProperty(str(name), item_value))
    return result

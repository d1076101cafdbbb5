"""Property flattening for extended properties.

Purpose
-------
Turn whatever the caller passed as ``extended_properties`` (or, when nothing
was passed, the ambient property list) into the case-insensitive property map
of a :class:`~lib_log_bridge.domain.events.LogEvent`, promoting the two
reserved keys to dedicated values.

Contents
--------
* :class:`FlattenResult` – map plus extracted correlation id / application name.
* :func:`flatten_properties` – public entry point.
* :func:`iter_public_properties` – reflection over mappings, dataclasses, named
  tuples, pair lists, and plain objects.

System Role
-----------
Called by the event assembler after level gating. A single failing accessor
never aborts the flatten: its key receives an error placeholder.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from functools import cached_property, partial
from types import MemberDescriptorType
from typing import Any, Callable, Iterable, Iterator
from uuid import UUID

from ..domain.context import ContextStore, normalize_properties
from ..domain.events import APPLICATION_NAME_KEY, CORRELATION_ID_KEY, ExtendedProperty, PropertyMap

_CORRELATION_FOLDED = CORRELATION_ID_KEY.casefold()
_APPLICATION_FOLDED = APPLICATION_NAME_KEY.casefold()

Accessor = Callable[[], Any]


@dataclasses.dataclass(frozen=True, slots=True)
class FlattenResult:
    """Outcome of :func:`flatten_properties`."""

    properties: PropertyMap
    correlation_id: UUID | None = None
    application_name: str = ""


def flatten_properties(extended_properties: Any, store: ContextStore | None = None) -> FlattenResult:
    """Flatten *extended_properties*, or the ambient list when it is ``None``.

    Why
    ----
    Backends want a uniform ``name → value`` map regardless of whether callers
    passed a dict, a dataclass, or an ad hoc object.

    What
    ----
    A call-site object fully replaces the ambient list; the two are never
    merged. Each ``(name, value)`` is visited in declaration order:

    * ``correlationId`` (any casing) holding a value whose type is exactly
      :class:`uuid.UUID` becomes :attr:`FlattenResult.correlation_id`;
    * ``applicationName`` (any casing) holding a ``str`` becomes
      :attr:`FlattenResult.application_name`;
    * reserved names holding anything else are dropped so the map never
      carries them;
    * every other pair is inserted into the map.

    Examples
    --------
    >>> from uuid import UUID
    >>> result = flatten_properties({"CorrelationId": UUID(int=2), "Tag": "x"})
    >>> result.correlation_id == UUID(int=2), result.properties.as_dict()
    (True, {'Tag': 'x'})
    >>> flatten_properties({"applicationName": "billing"}).application_name
    'billing'
    """

    if extended_properties is None:
        ambient = store.active_extended_properties() if store is not None else None
        source: Iterable[tuple[str, Accessor]] = _ambient_accessors(ambient or ())
    else:
        source = iter_public_properties(extended_properties)
    return _collect(source)


def iter_public_properties(obj: Any) -> Iterator[tuple[str, Accessor]]:
    """Yield ``(name, accessor)`` for each public property of *obj* in declaration order.

    Accessors are evaluated lazily by the caller so one failing property can
    be isolated.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Order:
    ...     order_id: int
    ...     total: float
    >>> [(name, get()) for name, get in iter_public_properties(Order(7, 9.5))]
    [('order_id', 7), ('total', 9.5)]
    """

    if isinstance(obj, Mapping):
        for key in obj:
            yield str(key), partial(obj.__getitem__, key)
        return
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        for item in dataclasses.fields(obj):
            if not item.name.startswith("_"):
                yield item.name, partial(getattr, obj, item.name)
        return
    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        for name in obj._fields:
            yield name, partial(getattr, obj, name)
        return
    if isinstance(obj, (list, tuple)):
        pairs = _as_pairs(obj)
        if pairs is not None:
            yield from _ambient_accessors(pairs)
            return
    yield from _object_accessors(obj)


def _ambient_accessors(properties: Iterable[ExtendedProperty]) -> Iterator[tuple[str, Accessor]]:
    for prop in properties:
        yield prop.name, partial(_constant, prop.value)


def _object_accessors(obj: Any) -> Iterator[tuple[str, Accessor]]:
    """Yield instance attributes first, then class-level properties base-first."""

    seen: set[str] = set()
    instance_vars = getattr(obj, "__dict__", None)
    if isinstance(instance_vars, dict):
        for name in list(instance_vars):
            if name.startswith("_"):
                continue
            seen.add(name)
            yield name, partial(getattr, obj, name)
    for klass in reversed(type(obj).__mro__):
        if klass is object:
            continue
        for name, attribute in list(vars(klass).items()):
            if name.startswith("_") or name in seen:
                continue
            if isinstance(attribute, (property, cached_property, MemberDescriptorType)):
                seen.add(name)
                yield name, partial(getattr, obj, name)


def _as_pairs(items: list[Any] | tuple[Any, ...]) -> list[ExtendedProperty] | None:
    """Return *items* as properties when every item is a pair, otherwise ``None``."""

    for item in items:
        if isinstance(item, ExtendedProperty):
            continue
        if not (isinstance(item, (list, tuple)) and len(item) == 2 and isinstance(item[0], str)):
            return None
    return normalize_properties(items)


def _collect(source: Iterable[tuple[str, Accessor]]) -> FlattenResult:
    pairs: list[tuple[str, Any]] = []
    correlation_id: UUID | None = None
    application_name = ""
    for name, accessor in source:
        try:
            value = accessor()
        except Exception as exc:  # noqa: BLE001
            value = error_placeholder(exc)
        folded = name.casefold()
        if folded == _CORRELATION_FOLDED:
            if type(value) is UUID:
                correlation_id = value
            continue
        if folded == _APPLICATION_FOLDED:
            if isinstance(value, str):
                application_name = value
            continue
        pairs.append((name, value))
    return FlattenResult(PropertyMap(pairs), correlation_id, application_name)


def error_placeholder(exc: BaseException) -> str:
    """Return the value recorded for a property whose accessor raised.

    Examples
    --------
    >>> error_placeholder(RuntimeError("db down"))
    '<error: RuntimeError: db down>'
    """

    return f"<error: {type(exc).__name__}: {exc}>"


def _constant(value: Any) -> Any:
    return value

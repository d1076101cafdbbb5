"""Correlation id precedence.

The effective correlation id of an event is the first present value in this
order: explicit call-site id, id extracted from extended properties, thread
context, domain context, process context. When none is present the event has
no correlation id.
"""

from __future__ import annotations

from uuid import UUID

from ..domain.context import ContextStore


def resolve_correlation_id(
    explicit: UUID | None,
    extended: UUID | None,
    store: ContextStore,
) -> UUID | None:
    """Return the highest-priority correlation id that is present.

    Examples
    --------
    >>> from uuid import UUID
    >>> store = ContextStore(process_context=None)
    >>> first, second = UUID(int=1), UUID(int=2)
    >>> resolve_correlation_id(first, second, store) == first
    True
    >>> resolve_correlation_id(None, second, store) == second
    True
    """

    if explicit is not None:
        return explicit
    if extended is not None:
        return extended
    return store.active_correlation_id()

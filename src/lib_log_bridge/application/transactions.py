"""Ambient transaction marker and enlistment suppression.

Purpose
-------
Let hosts mark a block of code as running inside a transaction so that
transaction-aware backends (for example a database sink) can enlist in it, and
let the event assembler hide that transaction while it writes a log event.

Contents
--------
* :data:`CURRENT_TRANSACTION` – context variable holding the active transaction.
* :class:`Transaction` – minimal transaction handle with an enlistment list.
* :func:`transaction` – context manager activating a transaction.
* :func:`current_transaction` – accessor used by backends.
* :func:`suppress_transaction` – context manager hiding the active transaction.

System Role
-----------
A log write must never join the caller's unit of work: if the caller rolls
back, its log lines should survive. The assembler wraps the whole pipeline in
:func:`suppress_transaction` whenever :func:`current_transaction` is set.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Iterator

CURRENT_TRANSACTION: ContextVar[Transaction | None] = ContextVar(
    "lib_log_bridge_transaction", default=None
)


@dataclass(eq=False)
class Transaction:
    """Handle for an ambient transaction.

    Hosts may subclass it (or pass their own object to :func:`transaction`) to
    bridge into a real transaction manager.
    """

    name: str = ""
    resources: list[Any] = field(default_factory=list)

    def enlist(self, resource: Any) -> None:
        """Record *resource* as participating in this transaction."""

        self.resources.append(resource)


def current_transaction() -> Any | None:
    """Return the transaction active in the calling context, if any."""

    return CURRENT_TRANSACTION.get()


@contextmanager
def transaction(active: Any | None = None, *, name: str = "") -> Iterator[Any]:
    """Activate *active* (or a fresh :class:`Transaction`) for the enclosed block.

    Examples
    --------
    >>> with transaction(name="checkout") as tx:
    ...     current_transaction() is tx
    True
    >>> current_transaction() is None
    True
    """

    handle = active if active is not None else Transaction(name)
    token = CURRENT_TRANSACTION.set(handle)
    try:
        yield handle
    finally:
        CURRENT_TRANSACTION.reset(token)


@contextmanager
def suppress_transaction() -> Iterator[None]:
    """Hide the active transaction for the enclosed block and restore it afterwards.

    Examples
    --------
    >>> with transaction() as tx:
    ...     with suppress_transaction():
    ...         inner = current_transaction()
    ...     outer = current_transaction()
    >>> inner is None, outer is tx
    (True, True)
    """

    token = CURRENT_TRANSACTION.set(None)
    try:
        yield
    finally:
        CURRENT_TRANSACTION.reset(token)

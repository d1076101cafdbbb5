"""Exception normalisation applied before an event is built."""

from __future__ import annotations

from ..domain.errors import FaultError


def unwrap_exception(exception: BaseException | None) -> BaseException | None:
    """Replace a :class:`FaultError` by its ``detail`` when the detail is an exception.

    Wrappers without a detail, wrappers whose detail is not an exception,
    ordinary exceptions, and ``None`` pass through unchanged.

    Examples
    --------
    >>> inner = KeyError("sku")
    >>> unwrap_exception(FaultError("remote", detail=inner)) is inner
    True
    >>> fault = FaultError("remote")
    >>> unwrap_exception(fault) is fault
    True
    >>> unwrap_exception(None) is None
    True
    """

    if isinstance(exception, FaultError) and isinstance(exception.detail, BaseException):
        return exception.detail
    return exception

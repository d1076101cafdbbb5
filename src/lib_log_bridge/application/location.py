"""Call-site discovery by walking the interpreter stack.

The walk starts at the caller of :func:`resolve_location`, skips every frame
that belongs to ``lib_log_bridge`` itself as well as lambdas and
comprehensions, then skips ``stack_offset`` further frames. Hosts that wrap
the facade in their own helper set a stack offset (per call or through an
ambient context) so the reported location is the helper's caller.
"""

from __future__ import annotations

import sys
from types import FrameType
from typing import Final

from ..domain.events import LogLocation

_PACKAGE: Final[str] = __name__.split(".")[0]
_ANONYMOUS_CODE_NAMES: Final[frozenset[str]] = frozenset(
    {"<lambda>", "<listcomp>", "<dictcomp>", "<setcomp>", "<genexpr>"}
)


def resolve_location(stack_offset: int = 0) -> LogLocation:
    """Return the location of the first frame outside this library.

    Never raises: an empty :class:`LogLocation` is returned when the stack
    cannot be inspected.
    """

    try:
        frame: FrameType | None = sys._getframe(1)
        while frame is not None and _is_internal(frame):
            frame = frame.f_back
        for _ in range(max(stack_offset, 0)):
            if frame is None or frame.f_back is None:
                break
            frame = frame.f_back
        if frame is None:
            return LogLocation()
        return LogLocation.from_frame(frame)
    except Exception:  # noqa: BLE001
        return LogLocation()


def _is_internal(frame: FrameType) -> bool:
    module = frame.f_globals.get("__name__", "")
    if module == _PACKAGE or module.startswith(_PACKAGE + "."):
        return True
    return frame.f_code.co_name in _ANONYMOUS_CODE_NAMES

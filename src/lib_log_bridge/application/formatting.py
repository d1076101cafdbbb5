"""Message formatting that never raises."""

from __future__ import annotations

from string import Formatter
from typing import Any, Final, Sequence

NULL_TOKEN: Final[str] = "[null]"
"""Text substituted for ``None`` message parameters."""

_FORMATTER: Final[Formatter] = Formatter()


def format_message(message: str | None, parameters: Sequence[Any] = ()) -> str:
    """Substitute positional ``{0}``, ``{1}`` … placeholders in *message*.

    Why
    ----
    A broken format string in a log statement must never turn into an
    exception in application code.

    What
    ----
    * ``None`` messages become ``""``.
    * Without parameters the message is returned unchanged (braces included).
    * ``None`` parameters are rendered as :data:`NULL_TOKEN`.
    * Only explicit numeric fields are accepted. Auto-numbered ``{}``,
      attribute or index access, conversions, and the locale-aware ``n``
      presentation type leave the message raw.
    * Any other formatting failure (missing index, unbalanced brace, bad
      format spec) falls back to the raw message too.

    Examples
    --------
    >>> format_message("Oops {0}", [42])
    'Oops 42'
    >>> format_message("Value={0}", [None])
    'Value=[null]'
    >>> format_message("Bad {0", [1])
    'Bad {0'
    >>> format_message("auto {}", [1])
    'auto {}'
    >>> format_message("{0.__class__}", [1])
    '{0.__class__}'
    >>> format_message("Keep {0} as is")
    'Keep {0} as is'
    """

    if message is None:
        return ""
    if not parameters:
        return message
    arguments = [NULL_TOKEN if parameter is None else parameter for parameter in parameters]
    try:
        if not _only_positional_fields(message):
            return message
        return message.format(*arguments)
    except Exception:  # noqa: BLE001
        return message


def _only_positional_fields(template: str) -> bool:
    """Return ``True`` when every replacement field is a bare ``{N}`` or ``{N:spec}``.

    Raises ``ValueError`` for unbalanced braces; the caller treats that as a
    formatting failure.
    """

    for _, field_name, format_spec, conversion in _FORMATTER.parse(template):
        if field_name is None:
            continue
        if not field_name.isdigit() or not field_name.isascii() or conversion is not None:
            return False
        if format_spec and ("{" in format_spec or format_spec.endswith("n")):
            return False
    return True

"""In-memory and layered configuration providers.

Purpose
-------
Implement :class:`~lib_log_bridge.application.ports.ConfigurationProvider`
over plain mappings and over a stack of other providers. The environment and
file providers build on :class:`MappingConfiguration`.

Contents
--------
* :class:`MappingConfiguration` – case-insensitive key lookup over a mapping.
* :class:`LayeredConfiguration` – later providers override earlier ones.
* :func:`coerce_bool` / :func:`stringify` – shared value conversion helpers.
"""

from __future__ import annotations

from typing import Any, Final, Mapping

from ...application.ports import ConfigurationProvider

TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "1", "yes", "on"})


class MappingConfiguration:
    """Serve configuration values from a mapping.

    Keys are matched case-insensitively. Scalars are returned as strings,
    nested mappings as ``name=value;name=value``.

    Examples
    --------
    >>> provider = MappingConfiguration({"Adapter_Type": "stdlib", "diagnostics_enabled": True})
    >>> provider.get_string("adapter_type"), provider.get_bool("DIAGNOSTICS_ENABLED")
    ('stdlib', True)
    >>> provider.get_string("missing") is None
    True
    """

    def __init__(self, mapping: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {str(key).casefold(): value for key, value in (mapping or {}).items()}

    def get_string(self, key: str) -> str | None:
        value = self._values.get(key.casefold())
        return None if value is None else stringify(value)

    def get_bool(self, key: str) -> bool:
        return coerce_bool(self._values.get(key.casefold()))

    def keys(self) -> list[str]:
        """Return the (case-folded) keys this provider knows about."""

        return sorted(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


class LayeredConfiguration:
    """Combine providers so that later layers win.

    A key missing from every layer reads as absent; ``get_bool`` consults the
    topmost layer that defines the key.

    Examples
    --------
    >>> base = MappingConfiguration({"adapter_type": "memory", "diagnostics_enabled": "true"})
    >>> override = MappingConfiguration({"adapter_type": "stdlib"})
    >>> layered = LayeredConfiguration(base, override)
    >>> layered.get_string("adapter_type"), layered.get_bool("diagnostics_enabled")
    ('stdlib', True)
    """

    def __init__(self, *providers: ConfigurationProvider) -> None:
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[ConfigurationProvider, ...]:
        return self._providers

    def get_string(self, key: str) -> str | None:
        for provider in reversed(self._providers):
            value = provider.get_string(key)
            if value is not None:
                return value
        return None

    def get_bool(self, key: str) -> bool:
        return coerce_bool(self.get_string(key))


def coerce_bool(value: Any) -> bool:
    """Interpret *value* as a boolean flag.

    Examples
    --------
    >>> coerce_bool("Yes"), coerce_bool("0"), coerce_bool(None), coerce_bool(True)
    (True, False, False, True)
    """

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    return str(value).strip().lower() in TRUE_STRINGS


def stringify(value: Any) -> str:
    """Render a configuration value as the string the settings layer expects.

    Examples
    --------
    >>> stringify(True), stringify(3)
    ('true', '3')
    >>> stringify({"team": "payments", "region": "eu"})
    'team=payments;region=eu'
    """

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return ";".join(f"{name}={stringify(item)}" for name, item in value.items())
    return str(value)

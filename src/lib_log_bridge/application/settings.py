"""Frozen runtime settings read through a :class:`ConfigurationProvider`.

Purpose
-------
Translate the key/value configuration port into one immutable object so the
resolver and the assembler never query configuration on the hot path.

Contents
--------
* Key constants (``ADAPTER_TYPE_KEY`` and friends).
* :class:`Settings` – frozen settings value object.
* :func:`parse_extended_properties` – ``name=value;name=value`` parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..domain.events import ExtendedProperty
from .ports import ConfigurationProvider

ADAPTER_TYPE_KEY: Final[str] = "adapter_type"
ADAPTER_MODULE_KEY: Final[str] = "adapter_module"
THROW_ON_RESOLVER_FAIL_KEY: Final[str] = "throw_on_resolver_fail"
DIAGNOSTICS_ENABLED_KEY: Final[str] = "diagnostics_enabled"
APPLICATION_NAME_KEY: Final[str] = "application_name"
MACHINE_NAME_KEY: Final[str] = "machine_name"
PROCESS_NAME_KEY: Final[str] = "process_name"
USE_SEQUENCE_NUMBERS_KEY: Final[str] = "use_sequence_numbers"
EXTENDED_PROPERTIES_KEY: Final[str] = "extended_properties"

SETTING_KEYS: Final[tuple[str, ...]] = (
    ADAPTER_TYPE_KEY,
    ADAPTER_MODULE_KEY,
    THROW_ON_RESOLVER_FAIL_KEY,
    DIAGNOSTICS_ENABLED_KEY,
    APPLICATION_NAME_KEY,
    MACHINE_NAME_KEY,
    PROCESS_NAME_KEY,
    USE_SEQUENCE_NUMBERS_KEY,
    EXTENDED_PROPERTIES_KEY,
)


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable configuration for one :class:`~lib_log_bridge.core.LogBridge`.

    Attributes
    ----------
    adapter_type:
        Explicit adapter (registry name, class name, or ``module:attr``).
    adapter_module:
        Explicit module / distribution the adapter must come from.
    throw_on_resolver_fail:
        Raise :class:`~lib_log_bridge.domain.errors.ResolutionError` instead of
        falling back to the null adapter.
    diagnostics_enabled:
        Trace internal failures to the diagnostics sink.
    application_name / machine_name / process_name:
        Overrides for the environment snapshot (useful in containers where
        real names carry no meaning).
    use_sequence_numbers:
        Stamp events with a process-wide, monotonically increasing number.
    extended_properties:
        Default ambient properties seeded into the process context.
    """

    adapter_type: str | None = None
    adapter_module: str | None = None
    throw_on_resolver_fail: bool = False
    diagnostics_enabled: bool = False
    application_name: str | None = None
    machine_name: str | None = None
    process_name: str | None = None
    use_sequence_numbers: bool = False
    extended_properties: tuple[ExtendedProperty, ...] = ()

    @classmethod
    def from_provider(cls, provider: ConfigurationProvider) -> Settings:
        """Read every known key from *provider*.

        Examples
        --------
        >>> from lib_log_bridge.adapters.config import MappingConfiguration
        >>> settings = Settings.from_provider(MappingConfiguration({"adapter_type": "stdlib", "diagnostics_enabled": "yes"}))
        >>> settings.adapter_type, settings.diagnostics_enabled
        ('stdlib', True)
        """

        return cls(
            adapter_type=_blank_to_none(provider.get_string(ADAPTER_TYPE_KEY)),
            adapter_module=_blank_to_none(provider.get_string(ADAPTER_MODULE_KEY)),
            throw_on_resolver_fail=provider.get_bool(THROW_ON_RESOLVER_FAIL_KEY),
            diagnostics_enabled=provider.get_bool(DIAGNOSTICS_ENABLED_KEY),
            application_name=_blank_to_none(provider.get_string(APPLICATION_NAME_KEY)),
            machine_name=_blank_to_none(provider.get_string(MACHINE_NAME_KEY)),
            process_name=_blank_to_none(provider.get_string(PROCESS_NAME_KEY)),
            use_sequence_numbers=provider.get_bool(USE_SEQUENCE_NUMBERS_KEY),
            extended_properties=parse_extended_properties(provider.get_string(EXTENDED_PROPERTIES_KEY)),
        )

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""

        return {
            ADAPTER_TYPE_KEY: self.adapter_type,
            ADAPTER_MODULE_KEY: self.adapter_module,
            THROW_ON_RESOLVER_FAIL_KEY: self.throw_on_resolver_fail,
            DIAGNOSTICS_ENABLED_KEY: self.diagnostics_enabled,
            APPLICATION_NAME_KEY: self.application_name,
            MACHINE_NAME_KEY: self.machine_name,
            PROCESS_NAME_KEY: self.process_name,
            USE_SEQUENCE_NUMBERS_KEY: self.use_sequence_numbers,
            EXTENDED_PROPERTIES_KEY: {prop.name: prop.value for prop in self.extended_properties},
        }


def parse_extended_properties(raw: str | None) -> tuple[ExtendedProperty, ...]:
    """Parse ``name=value`` pairs separated by ``;``.

    Entries without ``=`` or with an empty name are ignored.

    Examples
    --------
    >>> parse_extended_properties("team=payments; region = eu ;broken")
    (ExtendedProperty(name='team', value='payments'), ExtendedProperty(name='region', value='eu'))
    >>> parse_extended_properties(None)
    ()
    """

    if not raw:
        return ()
    parsed: list[ExtendedProperty] = []
    for chunk in raw.split(";"):
        name, sep, value = chunk.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        parsed.append(ExtendedProperty(name, value.strip()))
    return tuple(parsed)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None

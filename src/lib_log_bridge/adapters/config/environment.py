"""Environment variable configuration provider.

Key behaviours
--------------
* Only variables carrying the prefix (``LIB_LOG_BRIDGE_`` by default) are
  captured; the prefix is stripped and the remainder lower-cased, so
  ``LIB_LOG_BRIDGE_ADAPTER_TYPE`` answers ``get_string("adapter_type")``.
* Values stay strings; booleans accept ``true/1/yes/on``.
* Emits an ``env_variables_loaded`` debug event listing the captured keys.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...observability import log_debug
from .mapping import MappingConfiguration

DEFAULT_SLUG = "lib-log-bridge"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-log-bridge')
    'LIB_LOG_BRIDGE'
    """

    return slug.replace("-", "_").upper()


class EnvironmentConfiguration(MappingConfiguration):
    """Read settings from prefixed environment variables.

    Parameters
    ----------
    environ:
        Mapping to read from. Defaults to :data:`os.environ`.
    prefix:
        Variable prefix; a trailing ``_`` is added when missing.

    Examples
    --------
    >>> env = {"LIB_LOG_BRIDGE_ADAPTER_TYPE": "stdlib", "LIB_LOG_BRIDGE_USE_SEQUENCE_NUMBERS": "on", "HOME": "/root"}
    >>> provider = EnvironmentConfiguration(environ=env)
    >>> provider.get_string("adapter_type"), provider.get_bool("use_sequence_numbers")
    ('stdlib', True)
    >>> provider.get_string("home") is None
    True
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None, prefix: str | None = None) -> None:
        source = os.environ if environ is None else environ
        prefix = prefix if prefix is not None else default_env_prefix(DEFAULT_SLUG)
        prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else prefix
        collected: dict[str, str] = {}
        for key, value in source.items():
            if not key.upper().startswith(prefix.upper()):
                continue
            stripped = key[len(prefix) :]
            if stripped:
                collected[stripped.lower()] = value
        super().__init__(collected)
        self.prefix = prefix
        log_debug("env_variables_loaded", layer="env", prefix=prefix, keys=sorted(collected))

"""Configuration providers (environment, files, mappings, layering)."""

from __future__ import annotations

from .environment import EnvironmentConfiguration, default_env_prefix
from .files import FileConfiguration
from .mapping import LayeredConfiguration, MappingConfiguration, coerce_bool

__all__ = [
    "EnvironmentConfiguration",
    "FileConfiguration",
    "LayeredConfiguration",
    "MappingConfiguration",
    "coerce_bool",
    "default_env_prefix",
]

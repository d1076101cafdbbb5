"""Structured logging facade with pluggable backend adapters.

Application code logs through :class:`LogBridge` (or the module-level
:mod:`lib_log_bridge.log` functions backed by the default bridge). Each call
is gated by the backend's level check, enriched with ambient context, and
handed to exactly one backend adapter as an immutable :class:`LogEvent`.
"""

from __future__ import annotations

from . import log
from .adapters.config import EnvironmentConfiguration, FileConfiguration, LayeredConfiguration, MappingConfiguration
from .adapters.memory import MemoryAdapter
from .adapters.null import NullAdapter
from .adapters.stdlib import StdlibLoggingAdapter
from .application.ports import BackendAdapter, ConfigurationProvider, DiagnosticsSink, UsernameProvider
from .application.resolver import AdapterRegistry, BackendResolver
from .application.settings import Settings
from .application.transactions import Transaction, current_transaction, suppress_transaction, transaction
from .core import LogBridge, configure, get_bridge, load_settings, register_adapter, reset
from .domain.context import Context, ContextScope, ContextStore, ContextValues, ScopeKind
from .domain.errors import ConfigurationError, FaultError, InvalidFormat, LogBridgeError, NotFound, ResolutionError
from .domain.events import EMPTY_EVENT_ID, ExtendedProperty, LogEvent, LogLocation, PropertyMap
from .domain.levels import Level

__all__ = [
    "AdapterRegistry",
    "BackendAdapter",
    "BackendResolver",
    "ConfigurationError",
    "ConfigurationProvider",
    "Context",
    "ContextScope",
    "ContextStore",
    "ContextValues",
    "DiagnosticsSink",
    "EMPTY_EVENT_ID",
    "EnvironmentConfiguration",
    "ExtendedProperty",
    "FaultError",
    "FileConfiguration",
    "InvalidFormat",
    "LayeredConfiguration",
    "Level",
    "LogBridge",
    "LogBridgeError",
    "LogEvent",
    "LogLocation",
    "MappingConfiguration",
    "MemoryAdapter",
    "NotFound",
    "NullAdapter",
    "PropertyMap",
    "ResolutionError",
    "ScopeKind",
    "Settings",
    "StdlibLoggingAdapter",
    "Transaction",
    "UsernameProvider",
    "configure",
    "current_transaction",
    "get_bridge",
    "load_settings",
    "log",
    "register_adapter",
    "reset",
    "suppress_transaction",
    "transaction",
]

"""Shared fixtures: isolated bridges, recording sinks, and ambient-state cleanup."""

from __future__ import annotations

from typing import Callable

import pytest

from lib_log_bridge import core
from lib_log_bridge.adapters.memory import MemoryAdapter
from lib_log_bridge.application.resolver import DEFAULT_REGISTRY, AdapterRegistry
from lib_log_bridge.application.settings import Settings
from lib_log_bridge.domain.context import PROCESS_CONTEXT, Context, ContextStore, ScopeKind


class RecordingSink:
    """Diagnostics sink that keeps every traced message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def trace(self, message: str) -> None:
        self.messages.append(message)


class FixedUser:
    def __init__(self, name: str = "alice") -> None:
        self.name = name

    def username(self) -> str:
        return self.name


@pytest.fixture(autouse=True)
def _isolate_ambient_state():
    """Reset module-level ambient state around every test."""

    PROCESS_CONTEXT.clear()
    DEFAULT_REGISTRY.clear()
    core.reset()
    yield
    PROCESS_CONTEXT.clear()
    DEFAULT_REGISTRY.clear()
    core.reset()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def memory_adapter() -> MemoryAdapter:
    return MemoryAdapter()


@pytest.fixture()
def store() -> ContextStore:
    """Context store with a private process context."""

    return ContextStore(name=None, process_context=Context(ScopeKind.PROCESS))


@pytest.fixture()
def registry_for() -> Callable[[MemoryAdapter], AdapterRegistry]:
    """Build a registry whose only candidate returns the given adapter instance."""

    def build(adapter: MemoryAdapter) -> AdapterRegistry:
        registry = AdapterRegistry()

        def factory(diagnostics_enabled: bool = False) -> MemoryAdapter:
            return adapter

        registry.register(factory, name="memory")
        return registry

    return build


@pytest.fixture()
def make_bridge(memory_adapter, store, sink, registry_for) -> Callable[..., core.LogBridge]:
    """Return a factory for bridges wired to ``memory_adapter`` and ``store``."""

    def build(settings: Settings | None = None, **overrides) -> core.LogBridge:
        options = {
            "store": store,
            "registry": registry_for(memory_adapter),
            "discover": lambda: (),
            "sink": sink,
            "username_provider": FixedUser(),
        }
        options.update(overrides)
        return core.LogBridge(settings or Settings(), **options)

    return build

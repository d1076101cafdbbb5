"""Event assembly: gating, enrichment, failure containment, and transactions."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from uuid import UUID

import pytest

from lib_log_bridge.adapters.memory import MemoryAdapter
from lib_log_bridge.application.assembler import EventAssembler
from lib_log_bridge.application.flatten import flatten_properties
from lib_log_bridge.application.formatting import format_message
from lib_log_bridge.application.resolver import AdapterRegistry, BackendResolver
from lib_log_bridge.application.settings import Settings
from lib_log_bridge.application.transactions import current_transaction, transaction
from lib_log_bridge.domain.errors import FaultError
from lib_log_bridge.domain.events import EMPTY_EVENT_ID, ExtendedProperty, LogLocation
from lib_log_bridge.domain.levels import Level

G1 = UUID("11111111-1111-1111-1111-111111111111")
G2 = UUID("22222222-2222-2222-2222-222222222222")
HERE = LogLocation("tests.orders.Checkout", "submit", "orders.py", 12)
FIXED_TIME = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)


class CountingCollaborators:
    """Formatter and flattener that count their invocations."""

    def __init__(self) -> None:
        self.format_calls = 0
        self.flatten_calls = 0

    def formatter(self, message, parameters):
        self.format_calls += 1
        return format_message(message, parameters)

    def flattener(self, extended_properties, store):
        self.flatten_calls += 1
        return flatten_properties(extended_properties, store)


class ExplodingAdapter(MemoryAdapter):
    def write(self, handle, event) -> None:
        raise OSError("disk full")


class ExplodingUser:
    def username(self) -> str:
        raise KeyError("no passwd entry")


def _assembler(adapter, store, sink, settings: Settings | None = None, **kwargs) -> EventAssembler:
    settings = settings or Settings()
    registry = AdapterRegistry()
    registry.register(lambda diagnostics_enabled=False: adapter, name="memory")
    resolver = BackendResolver(settings, registry=registry, discover=lambda: (), sink=sink)
    kwargs.setdefault("clock", lambda: FIXED_TIME)
    return EventAssembler(resolver, store, settings, sink=sink, **kwargs)


def test_scenario_a_explicit_correlation_and_formatting(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)

    event_id = assembler.log_entry(Level.ERROR, "Oops {0}", 42, correlation_id=G1, location=HERE)

    event = memory_adapter.last_event
    assert event is not None
    assert event_id == event.event_id != EMPTY_EVENT_ID
    assert event.level is Level.ERROR
    assert event.correlation_id == G1
    assert event.message == "Oops 42"
    assert event.timestamp == FIXED_TIME
    assert event.location == HERE


def test_scenario_b_disabled_level_does_no_work(store, sink) -> None:
    adapter = MemoryAdapter(enabled_levels=[Level.ERROR, Level.FATAL])
    counters = CountingCollaborators()
    assembler = _assembler(adapter, store, sink, formatter=counters.formatter, flattener=counters.flattener)

    event_id = assembler.log_entry(Level.DEBUG, "expensive {0}", object(), extended_properties={"a": 1})

    assert event_id == EMPTY_EVENT_ID
    assert adapter.events == []
    assert adapter.enabled_checks == 1
    assert (counters.format_calls, counters.flatten_calls) == (0, 0)


def test_scenario_c_correlation_from_extended_properties(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)

    assembler.log_entry(Level.INFORMATION, "tagged", extended_properties={"CorrelationId": G2, "Tag": "x"}, location=HERE)

    event = memory_adapter.last_event
    assert event.correlation_id == G2
    assert event.properties.as_dict() == {"Tag": "x"}
    assert "correlationid" not in event.properties


def test_scenario_d_zero_candidates_fall_back_silently(store, sink) -> None:
    resolver = BackendResolver(Settings(), registry=AdapterRegistry(), discover=lambda: (), sink=sink)
    assembler = EventAssembler(resolver, store, sink=sink)

    assert assembler.is_enabled(Level.FATAL) is False
    for level in Level:
        assert assembler.log_entry(level, "dropped") == EMPTY_EVENT_ID
    assert resolver.resolve().is_fallback


def test_null_parameter_renders_marker(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)
    assembler.log_entry(Level.ERROR, "Value={0}", None, location=HERE)
    assert memory_adapter.last_event.message == "Value=[null]"


def test_malformed_template_is_logged_raw(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)
    assembler.log_entry(Level.ERROR, "Bad {0", location=HERE)
    assert memory_adapter.last_event.message == "Bad {0"


def test_fault_detail_replaces_wrapper(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)
    inner = TimeoutError("upstream")
    assembler.log_entry(Level.ERROR, "call failed", exception=FaultError("remote", detail=inner), location=HERE)
    assert memory_adapter.last_event.exception is inner

    bare = FaultError("remote")
    assembler.log_entry(Level.ERROR, "call failed", exception=bare, location=HERE)
    assert memory_adapter.last_event.exception is bare


def test_ambient_context_supplies_correlation_and_properties(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)
    store.process_context().correlation_id = G2
    store.domain_context().extended_properties = [ExtendedProperty("region", "eu")]

    assembler.log_entry(Level.WARNING, "ambient", location=HERE)

    event = memory_adapter.last_event
    assert event.correlation_id == G2
    assert event.properties.as_dict() == {"region": "eu"}


def test_application_name_prefers_configuration(memory_adapter, store, sink) -> None:
    configured = _assembler(memory_adapter, store, sink, Settings(application_name="billing"))
    configured.log_entry(Level.ERROR, "x", extended_properties={"applicationName": "ignored"}, location=HERE)
    assert memory_adapter.last_event.application_name == "billing"

    extracted = _assembler(memory_adapter, store, sink)
    extracted.log_entry(Level.ERROR, "x", extended_properties={"applicationName": "orders"}, location=HERE)
    assert memory_adapter.last_event.application_name == "orders"


def test_environment_overrides_and_username(memory_adapter, store, sink) -> None:
    settings = Settings(machine_name="web-1", process_name="worker")
    assembler = _assembler(memory_adapter, store, sink, settings, username_provider=ExplodingUser())

    assembler.log_entry(Level.ERROR, "x", location=HERE)

    event = memory_adapter.last_event
    assert (event.machine_name, event.process_name) == ("web-1", "worker")
    assert event.process_id > 0
    assert event.username == ""


def test_sequence_numbers_increase_when_enabled(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink, Settings(use_sequence_numbers=True))
    for _ in range(3):
        assembler.log_entry(Level.ERROR, "x", location=HERE)
    assert [event.sequence_number for event in memory_adapter.events] == [1, 2, 3]


def test_sequence_numbers_absent_by_default(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)
    assembler.log_entry(Level.ERROR, "x", location=HERE)
    assert memory_adapter.last_event.sequence_number == 0


def test_sequence_numbers_unique_across_threads(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink, Settings(use_sequence_numbers=True))

    def worker() -> None:
        for _ in range(50):
            assembler.log_entry(Level.ERROR, "x", location=HERE)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    numbers = sorted(event.sequence_number for event in memory_adapter.events)
    assert numbers == list(range(1, 201))


@pytest.mark.parametrize("diagnostics_enabled", [True, False])
def test_backend_failure_returns_zero_id(store, sink, diagnostics_enabled) -> None:
    adapter = ExplodingAdapter()
    assembler = _assembler(adapter, store, sink, Settings(diagnostics_enabled=diagnostics_enabled))

    assert assembler.log_entry(Level.ERROR, "x", location=HERE) == EMPTY_EVENT_ID

    traced = [message for message in sink.messages if "disk full" in message]
    assert bool(traced) is diagnostics_enabled


def test_caller_transaction_is_hidden_from_backend_and_restored(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)

    with transaction(name="checkout") as active:
        assembler.log_entry(Level.ERROR, "inside", location=HERE)
        assert current_transaction() is active

    assert memory_adapter.transactions_seen == [None]
    assert active.resources == []


def test_discovered_location_skips_library_frames(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)

    def place_order() -> None:
        assembler.log_entry(Level.ERROR, "placed")

    place_order()

    location = memory_adapter.last_event.location
    assert location.method_name == "place_order"
    assert location.file_name.endswith("test_assembler.py")


def test_ambient_stack_offset_moves_location_to_caller(memory_adapter, store, sink) -> None:
    assembler = _assembler(memory_adapter, store, sink)

    def log_helper() -> None:
        assembler.log_entry(Level.ERROR, "via helper")

    def business_code() -> None:
        log_helper()

    store.thread_context().stack_offset = 1
    business_code()

    assert memory_adapter.last_event.location.method_name == "business_code"

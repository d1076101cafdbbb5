"""The standard-library backend: level mapping, logger caching, record contents."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

import pytest

from lib_log_bridge.adapters.stdlib import LEVEL_MAP, StdlibLoggingAdapter
from lib_log_bridge.domain.events import LogEvent, LogLocation, PropertyMap
from lib_log_bridge.domain.levels import Level

LOCATION = LogLocation("shop.orders.Checkout", "submit", "/srv/shop/orders.py", 88)


def _event(**overrides) -> LogEvent:
    values = dict(
        timestamp=datetime(2024, 2, 2, 10, 0, tzinfo=timezone.utc),
        event_id=UUID(int=77),
        level=Level.ERROR,
        message="payment declined",
        correlation_id=UUID(int=5),
        location=LOCATION,
        properties=PropertyMap({"order_id": 7}),
    )
    values.update(overrides)
    return LogEvent(**values)


def test_level_map_covers_every_level() -> None:
    assert set(LEVEL_MAP) == set(Level)
    assert LEVEL_MAP[Level.FATAL] == logging.CRITICAL
    assert LEVEL_MAP[Level.INFORMATION] == logging.INFO


def test_one_logger_per_declaring_type() -> None:
    adapter = StdlibLoggingAdapter()
    first = adapter.get_logger(LOCATION)
    second = adapter.get_logger(LogLocation("shop.orders.Checkout", "cancel"))
    assert first is second
    assert first.name == "shop.orders.Checkout"
    assert adapter.get_logger(LogLocation()).name == "root"


def test_prefix_namespaces_loggers() -> None:
    adapter = StdlibLoggingAdapter(prefix="app")
    assert adapter.get_logger(LOCATION).name == "app.shop.orders.Checkout"


def test_enabled_follows_logger_configuration(caplog: pytest.LogCaptureFixture) -> None:
    adapter = StdlibLoggingAdapter()
    handle = adapter.get_logger(LOCATION)
    caplog.set_level(logging.WARNING, logger=handle.name)
    assert adapter.is_logging_enabled(handle, Level.ERROR)
    assert not adapter.is_logging_enabled(handle, Level.DEBUG)


def test_record_carries_call_site_and_structured_extra(caplog: pytest.LogCaptureFixture) -> None:
    adapter = StdlibLoggingAdapter()
    handle = adapter.get_logger(LOCATION)
    caplog.set_level(logging.DEBUG, logger=handle.name)
    event = _event()

    adapter.write(handle, event)

    record = caplog.records[-1]
    assert record.name == "shop.orders.Checkout"
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "payment declined"
    assert (record.pathname, record.lineno, record.funcName) == ("/srv/shop/orders.py", 88, "submit")
    assert record.log_event is event
    assert record.event_id == str(UUID(int=77))
    assert record.correlation_id == str(UUID(int=5))
    assert record.context["order_id"] == 7
    assert record.created == event.timestamp.timestamp()


def test_record_time_fields_follow_the_event_timestamp(caplog: pytest.LogCaptureFixture) -> None:
    adapter = StdlibLoggingAdapter()
    handle = adapter.get_logger(LOCATION)
    caplog.set_level(logging.DEBUG, logger=handle.name)
    stamp = datetime(2024, 2, 2, 10, 0, 5, 250_000, tzinfo=timezone.utc)

    adapter.write(handle, _event(timestamp=stamp))

    record = caplog.records[-1]
    assert record.created == stamp.timestamp()
    assert record.msecs == 250.0
    assert record.relativeCreated < 0
    formatter = logging.Formatter("%(asctime)s", datefmt="%S")
    assert formatter.formatTime(record, "%S") == "05"


def test_message_with_percent_signs_is_not_reformatted(caplog: pytest.LogCaptureFixture) -> None:
    adapter = StdlibLoggingAdapter()
    handle = adapter.get_logger(LOCATION)
    caplog.set_level(logging.DEBUG, logger=handle.name)
    adapter.write(handle, _event(message="disk 91% full %s"))
    assert caplog.records[-1].getMessage() == "disk 91% full %s"


def test_exception_is_attached_as_exc_info(caplog: pytest.LogCaptureFixture) -> None:
    adapter = StdlibLoggingAdapter()
    handle = adapter.get_logger(LOCATION)
    caplog.set_level(logging.DEBUG, logger=handle.name)
    try:
        raise ValueError("card expired")
    except ValueError as exc:
        error = exc

    adapter.write(handle, _event(exception=error))

    record = caplog.records[-1]
    assert record.exc_info is not None
    assert record.exc_info[1] is error
    assert "card expired" in caplog.text

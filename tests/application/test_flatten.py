"""Property flattening over call-site objects and ambient lists."""

from __future__ import annotations

from collections import namedtuple
from dataclasses import dataclass
from functools import cached_property
from uuid import UUID

from hypothesis import given
from hypothesis import strategies as st

from lib_log_bridge.application.flatten import flatten_properties, iter_public_properties
from lib_log_bridge.domain.context import Context, ContextStore, ScopeKind
from lib_log_bridge.domain.events import ExtendedProperty


@dataclass
class OrderContext:
    order_id: int
    customer: str
    _internal: str = "hidden"


Shipment = namedtuple("Shipment", ["carrier", "tracking"])


class Request:
    def __init__(self) -> None:
        self.path = "/orders"
        self.method = "POST"
        self._secret = "token"

    @property
    def user_agent(self) -> str:
        return "curl/8"

    @cached_property
    def size(self) -> int:
        return 512

    @property
    def broken(self) -> str:
        raise RuntimeError("database unavailable")

    def handler(self) -> str:
        return "not a property"


class Slotted:
    __slots__ = ("tenant",)

    def __init__(self, tenant: str) -> None:
        self.tenant = tenant


def _store() -> ContextStore:
    return ContextStore(process_context=Context(ScopeKind.PROCESS))


def test_mapping_keys_keep_declaration_order() -> None:
    result = flatten_properties({"b": 1, "a": 2})
    assert list(result.properties) == ["b", "a"]


def test_dataclass_public_fields() -> None:
    result = flatten_properties(OrderContext(7, "acme"))
    assert result.properties.as_dict() == {"order_id": 7, "customer": "acme"}


def test_named_tuple_fields() -> None:
    result = flatten_properties(Shipment("dhl", "XY1"))
    assert result.properties.as_dict() == {"carrier": "dhl", "tracking": "XY1"}


def test_plain_object_attributes_then_properties() -> None:
    result = flatten_properties(Request())
    assert list(result.properties) == ["path", "method", "user_agent", "size", "broken"]
    assert result.properties["user_agent"] == "curl/8"
    assert result.properties["size"] == 512


def test_failing_accessor_records_placeholder_and_continues() -> None:
    result = flatten_properties(Request())
    assert result.properties["broken"] == "<error: RuntimeError: database unavailable>"
    assert result.properties["path"] == "/orders"


def test_slot_members_are_visited() -> None:
    assert flatten_properties(Slotted("acme")).properties.as_dict() == {"tenant": "acme"}


def test_pairs_and_extended_properties() -> None:
    result = flatten_properties([("a", 1), ExtendedProperty("b", 2)])
    assert result.properties.as_dict() == {"a": 1, "b": 2}


def test_strings_are_not_mistaken_for_pairs() -> None:
    names = [name for name, _ in iter_public_properties(["ab", "cd"])]
    assert "ab" not in names


def test_reserved_keys_are_extracted_case_insensitively() -> None:
    correlation = UUID(int=42)
    result = flatten_properties({"CORRELATIONID": correlation, "ApplicationName": "billing", "tag": "x"})
    assert result.correlation_id == correlation
    assert result.application_name == "billing"
    assert result.properties.as_dict() == {"tag": "x"}


def test_reserved_keys_with_wrong_types_are_dropped() -> None:
    result = flatten_properties({"correlationId": str(UUID(int=1)), "applicationName": 12})
    assert result.correlation_id is None
    assert result.application_name == ""
    assert len(result.properties) == 0


def test_ambient_list_used_only_without_call_site_object() -> None:
    store = _store()
    store.domain_context().extended_properties = {"region": "eu", "correlationId": UUID(int=5)}

    ambient = flatten_properties(None, store)
    assert ambient.properties.as_dict() == {"region": "eu"}
    assert ambient.correlation_id == UUID(int=5)

    explicit = flatten_properties({"request": "r-1"}, store)
    assert explicit.properties.as_dict() == {"request": "r-1"}
    assert explicit.correlation_id is None


def test_no_properties_anywhere_gives_empty_map() -> None:
    result = flatten_properties(None, _store())
    assert len(result.properties) == 0
    assert result.application_name == ""


NAMES = st.text(alphabet="abcdefXYZ_", min_size=1, max_size=6).filter(lambda name: not name.startswith("_"))


@given(st.dictionaries(NAMES, st.integers(), max_size=8))
def test_flatten_completeness(mapping) -> None:
    """Every non-reserved name appears exactly once (case-insensitive) with the last value."""

    result = flatten_properties(mapping)
    expected: dict[str, int] = {}
    for name, value in mapping.items():
        expected[name.casefold()] = value
    assert len(result.properties) == len(expected)
    for folded, value in expected.items():
        assert result.properties[folded] == value

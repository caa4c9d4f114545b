"""Unit tests for nested lookup resolution."""

from __future__ import annotations

import logging

import pytest

from tabrest.core.exceptions import FetchError
from tabrest.lookup import (
    EndpointRegistry,
    ExpandMarker,
    LookupChain,
    LookupQuery,
    LookupResolver,
    build_lookup_queries,
)
from tabrest.models import EndpointDescriptor, LookupEndpoint, RestDataSource
from tabrest.runtime import QueryEngine

BASE = "https://api.test"


@pytest.fixture
def registry() -> EndpointRegistry:
    return EndpointRegistry(
        [
            EndpointDescriptor(
                name="Customers",
                suffix="customers",
                lookups=[LookupEndpoint(endpoint="Orders", parameters={"CustomerId": "$.id"})],
            ),
            EndpointDescriptor(
                name="Orders",
                suffix="customers/{CustomerId}/orders",
                lookups=[
                    LookupEndpoint(
                        endpoint="Lines",
                        match_path="$.items[*]",
                        parameters={"Sku": "$.sku"},
                        key="lines",
                    )
                ],
            ),
            EndpointDescriptor(name="Lines", suffix="items/{Sku}/lines"),
        ]
    )


@pytest.fixture
def pages(respond):
    """Route table of URL -> response factory."""
    return {
        f"{BASE}/customers/1/orders": lambda: respond([{"id": 10, "items": [{"sku": "x"}, {"sku": "y"}]}]),
        f"{BASE}/customers/2/orders": lambda: respond([]),
        f"{BASE}/items/x/lines": lambda: respond([{"line": 1}]),
        f"{BASE}/items/y/lines": lambda: respond([{"line": 2}, {"line": 3}]),
        f"{BASE}/customers/9/orders": lambda: respond({"error": "boom"}, status=500),
    }


@pytest.fixture
def executor(fake_executor, pages):
    return fake_executor(lambda request: pages[request.full_url]())


@pytest.fixture
def engine(registry, executor) -> QueryEngine:
    return QueryEngine(RestDataSource(base_url=BASE), registry, executor=executor)


@pytest.fixture
def resolver(registry, engine) -> LookupResolver:
    return LookupResolver(registry, engine, engine.cancel_token)


def chain_query(registry, *entries, **flags):
    return build_lookup_queries(LookupChain(root="Customers", entries=entries), registry, **flags)


class TestLookupResolver:
    """Test resolving lookups onto parent records."""

    def test_nested_lookups_depth_first(self, registry, resolver, executor):
        """Test two-level lookups attach results depth first."""
        records = [{"id": 1}]

        resolver.resolve(records, chain_query(registry, "Orders", "Lines"))

        assert [r.full_url for r in executor.requests] == [
            f"{BASE}/customers/1/orders",
            f"{BASE}/items/x/lines",
            f"{BASE}/items/y/lines",
        ]
        orders = records[0]["Orders"]
        assert isinstance(orders, ExpandMarker)
        assert orders.levels == 0
        items = orders.records[0]["items"]
        assert items[0]["lines"] == ExpandMarker([{"line": 1}], 1)
        assert items[1]["lines"] == ExpandMarker([{"line": 2}, {"line": 3}], 1)

    def test_not_expanded(self, registry, resolver):
        """Test unexpanded results are attached as plain lists."""
        records = [{"id": 2}]

        resolver.resolve(records, chain_query(registry, "Orders", expand=False))

        assert records[0]["Orders"] == []

    def test_missing_endpoint_is_skipped(self, resolver, executor, caplog):
        """Test a lookup naming a missing endpoint is skipped and logged."""
        query = LookupQuery(parent="Customers", endpoint="Gone", lookup=LookupEndpoint(endpoint="Gone"))
        records = [{"id": 1}]

        with caplog.at_level(logging.WARNING):
            resolver.resolve(records, query)

        assert records == [{"id": 1}]
        assert executor.requests == []
        skipped = [r for r in caplog.records if r.getMessage() == "lookup_skipped"]
        assert skipped and skipped[0].lookup == "Gone"

    def test_unresolved_match_path_is_skipped(self, registry, resolver, executor):
        """Test records without a match are left alone and others resolved."""
        query = chain_query(registry, "Orders", "Lines")
        records = [{"id": 1}]
        resolver.resolve(records, query)
        executor.requests.clear()

        resolver.resolve([{"no_items": True}], query.child)

        assert executor.requests == []

    def test_missing_parameter_skips_match(self, registry, resolver, executor):
        """Test a match without a required parameter value is skipped."""
        records = [{"name": "no id"}, {"id": 2}]

        resolver.resolve(records, chain_query(registry, "Orders"))

        assert "Orders" not in records[0]
        assert records[1]["Orders"] == ExpandMarker([], 1)
        assert [r.full_url for r in executor.requests] == [f"{BASE}/customers/2/orders"]

    def test_scalar_matches_attach_to_record(self, resolver, executor):
        """Test scalar matches bind directly and attach onto the record."""
        query = LookupQuery(
            parent="Orders",
            endpoint="Lines",
            lookup=LookupEndpoint(
                endpoint="Lines", match_path="$.skus[*]", parameters={"Sku": "$"}, key="lines"
            ),
        )
        records = [{"skus": ["x", "y"]}]

        resolver.resolve(records, query)

        assert [r.full_url for r in executor.requests] == [
            f"{BASE}/items/x/lines",
            f"{BASE}/items/y/lines",
        ]
        assert records[0]["lines"] == ExpandMarker([{"line": 1}, {"line": 2}, {"line": 3}], 1)
        assert records[0]["skus"] == ["x", "y"]

    def test_scalar_matches_need_object_record(self, resolver, executor, caplog):
        """Test results for scalar matches are dropped when the record is a list."""
        query = LookupQuery(
            parent="Orders",
            endpoint="Lines",
            lookup=LookupEndpoint(endpoint="Lines", match_path="$[*]", parameters={"Sku": "$"}),
        )
        records = [["x"]]

        with caplog.at_level(logging.WARNING):
            resolver.resolve(records, query)

        assert records == [["x"]]
        assert len(executor.requests) == 1
        assert any(r.getMessage() == "lookup_skipped" for r in caplog.records)

    def test_descriptor_overrides_registry(self, resolver, executor):
        """Test a lookup carrying its own descriptor needs no catalog entry."""
        query = LookupQuery(
            parent="CUSTOM",
            endpoint="CUSTOM1",
            lookup=LookupEndpoint(endpoint="CUSTOM1", parameters={"param1": "$.sku"}),
            descriptor=EndpointDescriptor(name="CUSTOM1", suffix="items/{param1}/lines"),
        )
        records = [{"sku": "x"}]

        resolver.resolve(records, query)

        assert [r.full_url for r in executor.requests] == [f"{BASE}/items/x/lines"]
        assert records[0]["CUSTOM1"] == ExpandMarker([{"line": 1}], 1)

    def test_fetch_error_propagates(self, registry, resolver):
        """Test nested fetch failures are fatal."""
        with pytest.raises(FetchError):
            resolver.resolve([{"id": 9}], chain_query(registry, "Orders"))

    def test_cancelled_before_records(self, registry, resolver, engine, executor):
        """Test no lookup runs after cancellation."""
        engine.cancel()

        resolver.resolve([{"id": 1}, {"id": 2}], chain_query(registry, "Orders"))

        assert executor.requests == []

    def test_cancelled_between_matches(self, registry, resolver, engine, executor):
        """Test cancellation stops before the next nested query."""
        executor.on_execute = lambda count: engine.cancel() if count == 2 else None
        records = [{"id": 1}]

        resolver.resolve(records, chain_query(registry, "Orders", "Lines"))

        assert len(executor.requests) == 2

    def test_no_query(self, resolver, executor):
        """Test resolving without a query does nothing."""
        resolver.resolve([{"id": 1}], None)

        assert executor.requests == []

    def test_lookup_iterators_are_marked(self, registry, engine):
        """Test nested iterators are flagged as lookups."""
        iterator = engine.open_lookup_iterator(registry.get("Orders"), {"CustomerId": 1})

        assert iterator.is_lookup is True

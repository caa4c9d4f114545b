"""Unit tests for request/response value types and engine configuration."""

from __future__ import annotations

import io

import pytest

from tabrest.config import LOOKUP_QUERY_LIMIT, EngineConfig
from tabrest.core import (
    ConfigurationError,
    FetchError,
    HttpMethod,
    LookupResolutionError,
    PaginationType,
    ParamKind,
    RestQueryError,
    RestRequest,
    RestResponse,
    TemplateSyntaxError,
)


class TestRestRequest:
    """Test immutable request derivation."""

    def test_full_url(self):
        """Test query parameters are encoded after the URL."""
        request = RestRequest(url="https://api.test/a b", query_params=(("q", "x y"), ("q", "z")))

        assert request.full_url == "https://api.test/a b?q=x%20y&q=z"

    def test_full_url_appends_to_existing_query(self):
        """Test parameters are appended to a URL that already has a query."""
        request = RestRequest(url="https://api.test/a?x=1", query_params=(("y", "2"),))

        assert request.full_url == "https://api.test/a?x=1&y=2"

    def test_with_query_param_replaces(self):
        """Test setting a parameter replaces existing pairs with that name."""
        request = RestRequest(url="u", query_params=(("page", "1"), ("size", "5")))

        derived = request.with_query_param("page", 2)

        assert derived.query_params == (("size", "5"), ("page", "2"))
        assert request.query_params == (("page", "1"), ("size", "5"))

    def test_with_query_param_replaces_url_pairs(self):
        """Test a parameter already rendered into the URL is not sent twice."""
        request = RestRequest(url="https://api.test/items?page=1&size=5")

        derived = request.with_query_param("page", 2)

        assert derived.full_url == "https://api.test/items?size=5&page=2"

    def test_with_query_param_keeps_unrelated_url(self):
        """Test the URL is untouched when it does not carry the parameter."""
        request = RestRequest(url="https://api.test/items?q=a%20b")

        assert request.with_query_param("page", 1).url == "https://api.test/items?q=a%20b"

    def test_with_header_is_case_insensitive(self):
        """Test header replacement ignores case."""
        request = RestRequest(url="u", headers={"x-token": "a"})

        assert request.with_header("X-Token", "b").headers == {"X-Token": "b"}

    def test_with_body_value_copies(self):
        """Test body merges do not mutate the original body."""
        request = RestRequest(url="u", method=HttpMethod.POST, body={"a": {"b": 1}})

        derived = request.with_body_value("$.a.c", 2)

        assert derived.body == {"a": {"b": 1, "c": 2}}
        assert request.body == {"a": {"b": 1}}

    def test_with_body_value_rejects_get(self):
        """Test GET requests cannot carry body values."""
        with pytest.raises(ConfigurationError):
            RestRequest(url="u").with_body_value("$.offset", 20)

    def test_with_url_drops_query(self):
        """Test replacing the URL clears query parameters."""
        request = RestRequest(url="u", query_params=(("a", "1"),), headers={"h": "v"})

        derived = request.with_url("https://next")

        assert derived.full_url == "https://next"
        assert derived.headers == {"h": "v"}


class TestRestResponse:
    """Test response helpers."""

    def test_headers_and_close(self):
        """Test header lookup and closing via context manager."""
        response = RestResponse(
            status=204,
            headers=(("Link", "a"), ("link", "b"), ("X-Total", "3")),
            body=io.BytesIO(b""),
        )

        with response as r:
            assert r.ok
            assert r.header("x-total") == "3"
            assert r.header_values("LINK") == ["a", "b"]
            assert r.header("missing") is None

        assert response.body.closed

    @pytest.mark.parametrize("status", [199, 301, 404, 500])
    def test_not_ok(self, status):
        assert RestResponse(status=status, headers=(), body=io.BytesIO()).ok is False


class TestExceptions:
    """Test the exception hierarchy."""

    def test_hierarchy(self):
        """Test every error derives from RestQueryError."""
        assert issubclass(TemplateSyntaxError, ConfigurationError)
        for error in (ConfigurationError, FetchError, LookupResolutionError):
            assert issubclass(error, RestQueryError)

    def test_fetch_error_context(self):
        """Test FetchError carries status and URL."""
        error = FetchError("boom", status_code=502, url="https://api.test")

        assert str(error) == "boom"
        assert (error.status_code, error.url) == (502, "https://api.test")


class TestEnums:
    """Test enum capabilities."""

    def test_param_kind_directions(self):
        """Test which kinds can be read and written."""
        assert ParamKind.JSON_PATH.readable and ParamKind.JSON_PATH.writable
        assert ParamKind.HEADER.readable and ParamKind.HEADER.writable
        assert not ParamKind.QUERY_PARAM.readable
        assert not ParamKind.XPATH.writable
        assert not ParamKind.LINK_HEADER_RELATION.readable

    def test_pagination_type_values(self):
        """Test persisted pagination type names."""
        assert PaginationType("TOTAL_COUNT_AND_OFFSET") is PaginationType.TOTAL_COUNT_AND_OFFSET


class TestEngineConfig:
    """Test EngineConfig validation."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.live_page_limit == 1
        assert config.lookup_depth_limit == LOOKUP_QUERY_LIMIT
        assert config.max_rows is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"timeout": 0},
            {"live_page_limit": 0},
            {"max_rows": -1},
            {"lookup_depth_limit": LOOKUP_QUERY_LIMIT + 1},
        ],
    )
    def test_invalid(self, kwargs):
        """Test invalid limits raise ValueError."""
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

"""Unit tests for response transformers and Link header parsing."""

from __future__ import annotations

import io

import pytest

from tabrest.core.enums import ParamKind
from tabrest.core.exceptions import ConfigurationError
from tabrest.documents import (
    JsonResponseTransformer,
    XmlResponseTransformer,
    parse_link_header,
)


class TestJsonResponseTransformer:
    """Test JSON parsing and extraction."""

    @pytest.fixture
    def transformer(self):
        return JsonResponseTransformer()

    def test_parse(self, transformer):
        """Test parsing a JSON body."""
        assert transformer.parse(io.BytesIO(b'{"a": [1, 2]}')) == {"a": [1, 2]}

    @pytest.mark.parametrize("raw", [b"", b"  \n"])
    def test_parse_empty_body(self, transformer, raw):
        """Test an empty body parses to None."""
        assert transformer.parse(io.BytesIO(raw)) is None

    def test_parse_invalid_json_raises(self, transformer):
        """Test malformed JSON raises ValueError."""
        with pytest.raises(ValueError):
            transformer.parse(io.BytesIO(b"{nope"))

    def test_extract_scalar(self, transformer):
        """Test scalar extraction by JSON path."""
        document = {"paging": {"total": 3}}

        assert transformer.extract_scalar(document, "$.paging.total", ParamKind.JSON_PATH) == 3
        assert transformer.extract_scalar(document, "$.paging.next", ParamKind.JSON_PATH) is None

    def test_extract_scalar_rejects_xpath(self, transformer):
        """Test XPath parameters cannot read JSON documents."""
        with pytest.raises(ConfigurationError):
            transformer.extract_scalar({}, "/a", ParamKind.XPATH)

    def test_extract_records_from_array(self, transformer):
        """Test a single array match is returned as the record list."""
        document = {"items": [{"id": 1}, {"id": 2}]}

        assert transformer.extract_records(document, "$.items") == [{"id": 1}, {"id": 2}]

    def test_extract_records_root_object(self, transformer):
        """Test a root object is a single record."""
        assert transformer.extract_records({"id": 1}, "$") == [{"id": 1}]

    def test_extract_records_flattens_matches(self, transformer):
        """Test multiple matches are flattened."""
        document = {"groups": [{"items": [1, 2]}, {"items": [3]}]}

        assert transformer.extract_records(document, "$.groups[*].items") == [1, 2, 3]

    def test_extract_records_none(self, transformer):
        """Test an empty document has no records."""
        assert transformer.extract_records(None, "$") == []


class TestXmlResponseTransformer:
    """Test XML parsing and XPath subset extraction."""

    BODY = (
        b"<response total='3'><paging><next>abc</next></paging>"
        b"<item id='1'/><item id='2'/></response>"
    )

    @pytest.fixture
    def document(self):
        return XmlResponseTransformer().parse(io.BytesIO(self.BODY))

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/response/paging/next", "abc"),
            ("/response/paging/next/text()", "abc"),
            ("/response/@total", "3"),
            ("//item/@id", "1"),
            ("paging/next", "abc"),
            ("/other/paging/next", None),
            ("/response/missing", None),
        ],
    )
    def test_extract_scalar(self, document, path, expected):
        """Test XPath scalar extraction."""
        transformer = XmlResponseTransformer()

        assert transformer.extract_scalar(document, path, ParamKind.XPATH) == expected

    def test_extract_scalar_rejects_json_path(self, document):
        """Test JSON path parameters cannot read XML documents."""
        with pytest.raises(ConfigurationError):
            XmlResponseTransformer().extract_scalar(document, "$.a", ParamKind.JSON_PATH)

    def test_extract_records(self, document):
        """Test element selection as records."""
        records = XmlResponseTransformer().extract_records(document, "//item")

        assert [r.get("id") for r in records] == ["1", "2"]


class TestParseLinkHeader:
    """Test RFC 8288 Link header parsing."""

    def test_single_header(self):
        """Test relations from one header value."""
        header = '<https://api.test/items?page=2>; rel="next", <https://api.test/items?page=5>; rel="last"'

        assert parse_link_header(header) == {
            "next": "https://api.test/items?page=2",
            "last": "https://api.test/items?page=5",
        }

    def test_multiple_relations_and_headers(self):
        """Test space-separated relations and repeated headers."""
        links = parse_link_header(['</a>; rel="next last"', "</b>; rel=NEXT", "</c>; title=x"])

        assert links == {"next": "/a", "last": "/a"}

    def test_no_links(self):
        """Test an empty header yields no relations."""
        assert parse_link_header([]) == {}

"""Response transformers turning raw bodies into documents.

A transformer parses a response body stream into a document and extracts
scalars (page counts, cursors, flags) and record lists from it. JSON
documents are addressed with JSON paths; XML documents with a small XPath
subset on top of ElementTree.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from typing import Any, BinaryIO, Protocol

from ..core.enums import ParamKind
from ..core.exceptions import ConfigurationError
from .jsonpath import find


class ResponseTransformer(Protocol):
    """Parses response bodies and reads values out of parsed documents."""

    def parse(self, body: BinaryIO) -> Any:
        """Parse a body stream. Returns None for an empty body."""
        ...

    def extract_scalar(self, document: Any, path: str, kind: ParamKind) -> Any | None:
        """Read one value at path, or None when absent."""
        ...

    def extract_records(self, document: Any, path: str) -> list[Any]:
        """Read the list of records at path."""
        ...


class JsonResponseTransformer:
    """Transformer for JSON response bodies."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def parse(self, body: BinaryIO) -> Any:
        raw = body.read()
        if not raw or not raw.strip():
            return None
        return json.loads(raw.decode(self._encoding))

    def extract_scalar(self, document: Any, path: str, kind: ParamKind) -> Any | None:
        if kind != ParamKind.JSON_PATH:
            raise ConfigurationError(f"JSON responses cannot be read with a {kind} parameter")
        matches = find(document, path)
        return matches[0] if matches else None

    def extract_records(self, document: Any, path: str) -> list[Any]:
        if document is None:
            return []
        matches = find(document, path)
        if len(matches) == 1 and isinstance(matches[0], list):
            return list(matches[0])

        records: list[Any] = []
        for match in matches:
            if isinstance(match, list):
                records.extend(match)
            elif match is not None:
                records.append(match)
        return records


_ATTRIBUTE = re.compile(r"(?:^|/)@(?P<name>[\w:.-]+)$")


class XmlResponseTransformer:
    """Transformer for XML response bodies.

    XPath support is limited to what ElementTree offers plus a leading
    absolute root step, a trailing ``@attribute`` and a trailing ``text()``.
    """

    def parse(self, body: BinaryIO) -> Any:
        raw = body.read()
        if not raw or not raw.strip():
            return None
        return ET.fromstring(raw)

    def _select(self, root: ET.Element, path: str) -> tuple[list[ET.Element], str | None]:
        path = path.strip()
        if path.endswith("/text()"):
            path = path[: -len("/text()")]

        attribute = None
        match = _ATTRIBUTE.search(path)
        if match:
            attribute = match.group("name")
            path = path[: match.start()]

        if path.startswith("//"):
            expr = ".//" + path[2:]
        elif path.startswith("/"):
            first, _, rest = path[1:].partition("/")
            if first not in (root.tag, "*"):
                return [], attribute
            expr = "./" + rest if rest else "."
        else:
            expr = path or "."

        try:
            return root.findall(expr), attribute
        except SyntaxError as exc:
            raise ConfigurationError(f"Unsupported XPath expression: {path}") from exc

    def extract_scalar(self, document: Any, path: str, kind: ParamKind) -> Any | None:
        if kind != ParamKind.XPATH:
            raise ConfigurationError(f"XML responses cannot be read with a {kind} parameter")
        if document is None:
            return None

        elements, attribute = self._select(document, path)
        if not elements:
            return None
        if attribute is not None:
            return elements[0].get(attribute)
        text = elements[0].text
        return text.strip() if text is not None else None

    def extract_records(self, document: Any, path: str) -> list[Any]:
        if document is None:
            return []
        elements, _ = self._select(document, "." if path.strip() in ("", "$") else path)
        return elements

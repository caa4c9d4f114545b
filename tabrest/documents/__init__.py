"""Document helpers: JSON paths, response transformers and Link headers."""

from __future__ import annotations

from .jsonpath import compile_path, find, find_first, set_value
from .links import parse_link_header
from .transformers import JsonResponseTransformer, ResponseTransformer, XmlResponseTransformer

__all__ = [
    "compile_path",
    "find",
    "find_first",
    "set_value",
    "parse_link_header",
    "ResponseTransformer",
    "JsonResponseTransformer",
    "XmlResponseTransformer",
]

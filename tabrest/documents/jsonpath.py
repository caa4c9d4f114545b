"""JSON path helpers used for scalar extraction, record matching and body merges.

Paths use the jsonpath-ng dialect (``$.data.items[*].id``, ``$..owner``). A
leading ``$`` is optional, so ``data.total`` and ``$.data.total`` are
equivalent. Compiled expressions are cached per path string.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jsonpath_ng import parse
from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.jsonpath import JSONPath, Root

from ..core.exceptions import ConfigurationError


@lru_cache(maxsize=512)
def compile_path(path: str) -> JSONPath:
    """Compile a JSON path expression.

    Raises:
        ConfigurationError: If the path is not valid JSON path syntax
    """
    try:
        return parse(path.strip() or "$")
    except JSONPathError as exc:
        raise ConfigurationError(f"Invalid JSON path '{path}': {exc}") from exc


def find(document: Any, path: str) -> list[Any]:
    """Return every value matching path, in document order."""
    return [match.value for match in compile_path(path).find(document)]


def find_first(document: Any, path: str) -> Any | None:
    matches = find(document, path)
    return matches[0] if matches else None


def set_value(document: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Write value at path, creating intermediate objects.

    Existing sibling fields are preserved.

    Returns:
        The updated document

    Raises:
        ConfigurationError: If the path targets the root, uses wildcards or
            crosses a non-object value
    """
    expression = compile_path(path)
    if isinstance(expression, Root):
        raise ConfigurationError("Cannot write a value at the document root")
    if "*" in path or ".." in path:
        raise ConfigurationError(f"Cannot write through wildcard JSON path: {path}")
    try:
        return expression.update_or_create(document, value)
    except (TypeError, AttributeError, IndexError) as exc:
        raise ConfigurationError(f"JSON path {path} crosses a non-object value") from exc

"""Record sinks.

A sink receives each output record, with its lookups already attached, and
appends it to a bounded table. The row cap counts parent records only; rows
produced by expanding lookup results never count toward it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from ..lookup.query import ExpandMarker


class Sink(Protocol):
    """Destination for engine output."""

    @property
    def full(self) -> bool:
        """Whether the sink accepts no more records."""
        ...

    def append(self, record: Any) -> None: ...


def _plain(value: Any) -> Any:
    """Replace expand markers with their plain record lists."""
    if isinstance(value, ExpandMarker):
        return [_plain(record) for record in value.records]
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def flatten_record(record: Mapping[str, Any], prefix: str = "") -> list[dict[str, Any]]:
    """Flatten a record into table rows.

    Nested objects become dotted columns. Each ExpandMarker multiplies the
    rows by its records; a marker with ``levels == 1`` expands its own
    records only and keeps deeper markers as plain lists, ``levels == 0``
    expands recursively.
    """
    base: dict[str, Any] = {}
    groups: list[list[dict[str, Any]]] = []

    for key, value in record.items():
        column = f"{prefix}{key}"
        if isinstance(value, ExpandMarker):
            groups.append(_expand(column, value))
        elif isinstance(value, Mapping):
            groups.append(flatten_record(value, prefix=f"{column}."))
        else:
            base[column] = _plain(value)

    rows = [base]
    for group in groups:
        # Empty lookup results keep the parent row as is
        if group:
            rows = [{**row, **part} for row in rows for part in group]
    return rows


def _expand(column: str, marker: ExpandMarker) -> list[dict[str, Any]]:
    parts: list[dict[str, Any]] = []
    for child in marker.records:
        if not isinstance(child, Mapping):
            parts.append({column: _plain(child)})
        elif marker.levels == 1:
            parts.append({f"{column}.{k}": _plain(v) for k, v in child.items()})
        else:
            parts.extend(flatten_record(child, prefix=f"{column}."))
    return parts


class TableSink:
    """In-memory table with an optional cap on parent records."""

    def __init__(self, max_rows: int | None = None, *, flatten: bool = True) -> None:
        self.max_rows = max_rows
        self.flatten = flatten
        self.records: list[Any] = []
        self.rows: list[Any] = []

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def full(self) -> bool:
        return self.max_rows is not None and self.record_count >= self.max_rows

    def append(self, record: Any) -> None:
        if self.full:
            return
        self.records.append(record)
        if self.flatten and isinstance(record, Mapping):
            self.rows.extend(flatten_record(record))
        else:
            self.rows.append(_plain(record))

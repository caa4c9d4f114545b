"""Runtime: HTTP transport, sinks and the query engine."""

from __future__ import annotations

from .engine import QueryEngine
from .sinks import Sink, TableSink, flatten_record
from .transport import HTTPRequestExecutor

__all__ = [
    "HTTPRequestExecutor",
    "QueryEngine",
    "Sink",
    "TableSink",
    "flatten_record",
]

"""Pagination strategies and the generic page iterator."""

from __future__ import annotations

from .definitions import FetchState, PaginationSpec, ParameterDescriptor, validate_pagination_spec
from .iterator import DataIterator
from .strategies import (
    STRATEGIES,
    IterationStrategy,
    LinkIterationStrategy,
    NoPaginationStrategy,
    Page,
    PageCountStrategy,
    PageStrategy,
    PaginationStrategy,
    TotalCountAndOffsetStrategy,
    TotalCountAndPageStrategy,
    create_strategy,
)

__all__ = [
    "FetchState",
    "PaginationSpec",
    "ParameterDescriptor",
    "validate_pagination_spec",
    "DataIterator",
    "Page",
    "PaginationStrategy",
    "NoPaginationStrategy",
    "PageCountStrategy",
    "PageStrategy",
    "IterationStrategy",
    "LinkIterationStrategy",
    "TotalCountAndOffsetStrategy",
    "TotalCountAndPageStrategy",
    "STRATEGIES",
    "create_strategy",
]

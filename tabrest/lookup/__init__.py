"""Endpoint catalog and nested lookup (join) resolution.

Architecture:
    - registry.py: EndpointRegistry, the name-indexed endpoint catalog
    - chain.py: LookupChain, the editable linear chain of child endpoints
    - query.py: LookupQuery tree construction and ExpandMarker
    - resolver.py: LookupResolver, runs nested iterators per matched record
"""

from __future__ import annotations

from .chain import LookupChain, is_editable, is_visible
from .query import (
    ExpandMarker,
    LookupQuery,
    build_custom_lookup_queries,
    build_lookup_queries,
    mark_expanded,
)
from .registry import EndpointRegistry
from .resolver import LookupResolver, LookupSource

__all__ = [
    "EndpointRegistry",
    "ExpandMarker",
    "LookupChain",
    "LookupQuery",
    "LookupResolver",
    "LookupSource",
    "build_custom_lookup_queries",
    "build_lookup_queries",
    "is_editable",
    "is_visible",
    "mark_expanded",
]

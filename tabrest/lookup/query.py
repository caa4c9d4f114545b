"""Lookup query construction.

A LookupChain is flattened into nested LookupQuery objects, one per depth:
query i carries query i+1 as its ``child``. Only the deepest query takes
the caller's expand / top-level-only flags; every ancestor is fully
expanded with zero flatten levels.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..config import CUSTOM_ENDPOINT
from ..documents.jsonpath import compile_path
from ..models.endpoint import CustomLookup, EndpointDescriptor, LookupEndpoint
from ..pagination.telemetry import log_lookup_skipped
from .chain import LookupChain
from .registry import EndpointRegistry


@dataclass(frozen=True)
class LookupQuery:
    """One level of a nested lookup.

    Attributes:
        parent: Endpoint whose records are joined
        endpoint: Child endpoint queried per match
        lookup: Join declaration (match path, parameter bindings, attach key)
        depth: Zero-based level in the chain
        expand: Wrap attached results in an ExpandMarker
        top_level_only: Flatten only the first nesting level
        child: Next deeper level, if any
        descriptor: Ad hoc endpoint used instead of a catalog entry
    """

    parent: str
    endpoint: str
    lookup: LookupEndpoint
    depth: int = 0
    expand: bool = True
    top_level_only: bool = True
    child: LookupQuery | None = None
    descriptor: EndpointDescriptor | None = None

    @property
    def flatten_levels(self) -> int:
        """Levels a flattening stage collapses: 0 = all, 1 = first only."""
        return 1 if self.top_level_only else 0


@dataclass(frozen=True)
class ExpandMarker:
    """Lookup results that a later stage should flatten into the parent row."""

    records: list[Any]
    levels: int = 0

    def __len__(self) -> int:
        return len(self.records)


def build_lookup_queries(
    chain: LookupChain,
    registry: EndpointRegistry,
    *,
    expand: bool = True,
    top_level_only: bool = True,
    limit: int | None = None,
) -> LookupQuery | None:
    """Build the root lookup query for a chain, or None for an empty chain.

    Levels whose declaration is missing from the catalog end the chain.
    """
    levels: list[tuple[str, str, LookupEndpoint]] = []
    parent = chain.root
    names = chain.resolved if limit is None else chain.resolved[:limit]
    for name in names:
        lookup = registry.lookup(parent, name)
        if lookup is None or name not in registry:
            log_lookup_skipped(endpoint_id=parent, lookup=name, reason="endpoint not declared")
            break
        levels.append((parent, name, lookup))
        parent = name

    query: LookupQuery | None = None
    for depth in range(len(levels) - 1, -1, -1):
        parent, name, lookup = levels[depth]
        deepest = query is None
        query = LookupQuery(
            parent=parent,
            endpoint=name,
            lookup=lookup,
            depth=depth,
            expand=expand if deepest else True,
            top_level_only=top_level_only if deepest else False,
            child=query,
        )
    return query


def build_custom_lookup_queries(
    lookups: Sequence[CustomLookup],
    *,
    expand: bool = True,
    top_level_only: bool = True,
    limit: int | None = None,
) -> LookupQuery | None:
    """Build the root lookup query for a custom query's ad hoc lookups.

    Level i joins onto the records of level i-1 (the custom endpoint for
    level 0) and carries its own descriptor, so no catalog entry is needed.
    """
    levels = list(lookups if limit is None else lookups[:limit])
    query: LookupQuery | None = None
    for depth in range(len(levels) - 1, -1, -1):
        custom = levels[depth]
        deepest = query is None
        query = LookupQuery(
            parent=CustomLookup.endpoint_name(depth - 1) if depth else CUSTOM_ENDPOINT,
            endpoint=CustomLookup.endpoint_name(depth),
            lookup=custom.lookup(depth),
            depth=depth,
            expand=expand if deepest else True,
            top_level_only=top_level_only if deepest else False,
            child=query,
            descriptor=custom.descriptor(depth),
        )
    return query


def mark_expanded(record: Any, path: str) -> Any:
    """Wrap every array found at path inside record in an ExpandMarker.

    Flattening then produces one row per array element. The record itself
    is never wrapped.
    """
    for match in compile_path(path).find(record):
        if match.value is record or not isinstance(match.value, list):
            continue
        record = match.full_path.update(record, ExpandMarker(match.value))
    return record

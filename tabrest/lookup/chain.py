"""Lookup chain editing.

A lookup chain is the linear path of child endpoints joined below a root
endpoint: entry 0 is a child of the root, entry i a child of entry i-1.
Chains are immutable; every edit returns a new chain.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..config import LOOKUP_QUERY_LIMIT
from .registry import EndpointRegistry


@dataclass(frozen=True)
class LookupChain:
    """Ordered child endpoint names below ``root``.

    ``entries`` may contain None (an unset level); only the prefix up to the
    first None takes part in query execution.
    """

    root: str
    entries: tuple[str | None, ...] = ()
    limit: int = LOOKUP_QUERY_LIMIT

    def __post_init__(self) -> None:
        if self.limit < 0 or self.limit > LOOKUP_QUERY_LIMIT:
            raise ValueError(f"limit must be between 0 and {LOOKUP_QUERY_LIMIT}")
        if len(self.entries) > self.limit:
            raise ValueError(f"A lookup chain holds at most {self.limit} entries")

    @property
    def resolved(self) -> tuple[str, ...]:
        """Entries up to the first unset level."""
        names: list[str] = []
        for name in self.entries:
            if name is None:
                break
            names.append(name)
        return tuple(names)

    def parent_of(self, index: int) -> str | None:
        if index == 0:
            return self.root
        if 0 < index <= len(self.entries):
            return self.entries[index - 1]
        return None

    def options(self, index: int, registry: EndpointRegistry) -> list[str]:
        """Endpoints selectable at a level: the children of its parent."""
        if not 0 <= index < self.limit:
            return []
        parent = self.parent_of(index)
        return registry.children(parent) if parent is not None else []

    def visible(self, index: int, registry: EndpointRegistry) -> bool:
        return is_visible(self, index, registry)

    def editable(self, index: int, registry: EndpointRegistry) -> bool:
        return is_editable(self, index, registry)

    def can_add(self, registry: EndpointRegistry) -> bool:
        depth = len(self.resolved)
        return depth < self.limit and bool(self.options(depth, registry))

    def can_remove(self) -> bool:
        return bool(self.entries)

    def add(self, registry: EndpointRegistry) -> LookupChain:
        """Append the first child of the deepest resolved level."""
        if not self.can_add(registry):
            return self
        depth = len(self.resolved)
        return replace(self, entries=(*self.resolved, self.options(depth, registry)[0]))

    def remove(self) -> LookupChain:
        """Drop the deepest level."""
        if not self.can_remove():
            return self
        return replace(self, entries=self.entries[:-1])

    def set(self, index: int, name: str | None, registry: EndpointRegistry) -> LookupChain:
        """Select an endpoint at a level.

        Clearing a level (name None) truncates it and everything below.
        Selecting a name that is not a child of the level's parent is
        ignored. Selecting a different name drops the deeper levels, which
        belonged to the previous selection.
        """
        if name is None:
            return replace(self, entries=self.entries[: max(index, 0)])
        if name not in self.options(index, registry):
            return self
        if index < len(self.entries) and self.entries[index] == name:
            return self
        return replace(self, entries=(*self.entries[:index], name))


def is_visible(chain: LookupChain, index: int, registry: EndpointRegistry) -> bool:
    """Whether level ``index`` holds a usable selection.

    A set level is visible when the level above it is visible and the entry
    is a declared lookup of its parent.
    """
    if not 0 <= index < len(chain.entries):
        return False
    if index > 0 and not is_visible(chain, index - 1, registry):
        return False
    name = chain.entries[index]
    parent = chain.parent_of(index)
    if name is None or parent is None:
        return False
    return registry.lookup(parent, name) is not None


def is_editable(chain: LookupChain, index: int, registry: EndpointRegistry) -> bool:
    """Whether a selection can be made at level ``index``.

    Every shallower level must be set and the parent must declare at least
    one child.
    """
    if not 0 <= index < chain.limit:
        return False
    if len(chain.resolved) < index:
        return False
    return bool(chain.options(index, registry))

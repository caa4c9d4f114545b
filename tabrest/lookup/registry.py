"""Endpoint catalog lookups."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..core.exceptions import ConfigurationError
from ..models.endpoint import EndpointDescriptor, LookupEndpoint
from ..template.parser import parse_template


class EndpointRegistry:
    """Name-indexed catalog of endpoint descriptors.

    Descriptors are validated on registration: names must be unique and
    suffix templates must parse.
    """

    def __init__(self, endpoints: Iterable[EndpointDescriptor] = ()) -> None:
        self._endpoints: dict[str, EndpointDescriptor] = {}
        for endpoint in endpoints:
            self.register(endpoint)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> EndpointRegistry:
        """Build a registry from decoded JSON.

        Accepts either a list of endpoint objects or an object with an
        ``endpoints`` list.

        Raises:
            ConfigurationError: If an entry is invalid or a name is duplicated
        """
        entries = data.get("endpoints", []) if isinstance(data, Mapping) else data
        endpoints = []
        for entry in entries:
            try:
                endpoints.append(EndpointDescriptor.model_validate(entry))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid endpoint definition: {e}") from e
        return cls(endpoints)

    @classmethod
    def from_json(cls, text: str) -> EndpointRegistry:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid endpoint catalog JSON: {e}") from e
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: str | Path) -> EndpointRegistry:
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

    def register(self, endpoint: EndpointDescriptor) -> None:
        if endpoint.name in self._endpoints:
            raise ConfigurationError(f"Duplicate endpoint name: {endpoint.name}")
        parse_template(endpoint.suffix)
        self._endpoints[endpoint.name] = endpoint

    def get(self, name: str) -> EndpointDescriptor | None:
        return self._endpoints.get(name)

    def require(self, name: str) -> EndpointDescriptor:
        endpoint = self._endpoints.get(name)
        if endpoint is None:
            raise ConfigurationError(f"Unknown endpoint: {name}")
        return endpoint

    def children(self, parent: str) -> list[str]:
        """Names of the declared lookup children of parent that exist."""
        endpoint = self._endpoints.get(parent)
        if endpoint is None:
            return []
        return [name for name in endpoint.child_names if name in self._endpoints]

    def lookup(self, parent: str, child: str) -> LookupEndpoint | None:
        endpoint = self._endpoints.get(parent)
        return endpoint.lookup_for(child) if endpoint is not None else None

    @property
    def names(self) -> list[str]:
        return list(self._endpoints)

    def __contains__(self, name: object) -> bool:
        return name in self._endpoints

    def __iter__(self) -> Iterator[EndpointDescriptor]:
        return iter(self._endpoints.values())

    def __len__(self) -> int:
        return len(self._endpoints)

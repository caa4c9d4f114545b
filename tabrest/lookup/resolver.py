"""Nested lookup execution.

Architecture:
    For each parent record the resolver locates the sub-entities matched by
    the lookup's match path, runs one nested DataIterator per match (fully,
    depth-first, resolving deeper lookups on its records first) and attaches
    the collected records onto the match under the lookup's key.

Design Decisions:
    - A missing endpoint, an unresolved match path or an unbound required
      parameter skips that lookup and logs ``lookup_skipped``
    - Fetch failures inside a lookup propagate like any other FetchError
    - Cancellation is polled before each record and before each nested query
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from ..core.cancellation import CancellationToken
from ..core.exceptions import ConfigurationError, LookupResolutionError
from ..documents.jsonpath import find, find_first
from ..models.endpoint import EndpointDescriptor
from ..pagination.iterator import DataIterator
from ..pagination.telemetry import log_lookup_skipped
from .query import ExpandMarker, LookupQuery
from .registry import EndpointRegistry


class LookupSource(Protocol):
    """Opens nested iterators and extracts their records."""

    def open_lookup_iterator(
        self, endpoint: EndpointDescriptor, values: Mapping[str, Any]
    ) -> DataIterator: ...

    def extract_records(self, endpoint: EndpointDescriptor, document: Any) -> list[Any]: ...


class LookupResolver:
    """Resolves a LookupQuery tree against parent records in place."""

    def __init__(
        self,
        registry: EndpointRegistry,
        source: LookupSource,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self._registry = registry
        self._source = source
        self._cancel = cancel_token or CancellationToken()

    def resolve(self, records: list[Any], query: LookupQuery | None) -> None:
        """Attach lookup results onto every record.

        Raises:
            FetchError: If a nested page fetch fails
        """
        if query is None:
            return
        for record in records:
            if self._cancel.cancelled:
                return
            try:
                self._resolve_record(record, query)
            except LookupResolutionError as e:
                log_lookup_skipped(
                    endpoint_id=query.parent,
                    lookup=query.endpoint,
                    reason=str(e),
                    path=e.path,
                )

    def _resolve_record(self, record: Any, query: LookupQuery) -> None:
        endpoint = query.descriptor or self._registry.get(query.endpoint)
        if endpoint is None:
            raise LookupResolutionError(
                f"Lookup endpoint '{query.endpoint}' does not exist",
                endpoint=query.endpoint,
            )

        path = query.lookup.match_path
        matches: list[Any] = []
        for match in find(record, path):
            matches.extend(match if isinstance(match, list) else [match])
        if not matches:
            raise LookupResolutionError(
                f"Match path '{path}' did not resolve", endpoint=query.endpoint, path=path
            )

        # Results for scalar matches are collected onto the record itself
        scalar_results: list[Any] = []
        for match in matches:
            if self._cancel.cancelled:
                return
            values = {
                variable: find_first(match, value_path)
                for variable, value_path in query.lookup.parameters.items()
            }
            try:
                results = self._fetch(endpoint, values, query.child)
            except LookupResolutionError as e:
                log_lookup_skipped(
                    endpoint_id=query.parent,
                    lookup=query.endpoint,
                    reason=str(e),
                    path=e.path,
                )
                continue
            if isinstance(match, dict):
                match[query.lookup.attach_key] = self._attach(results, query)
            else:
                scalar_results.extend(results)

        if not scalar_results:
            return
        if isinstance(record, dict):
            record[query.lookup.attach_key] = self._attach(scalar_results, query)
        else:
            log_lookup_skipped(
                endpoint_id=query.parent,
                lookup=query.endpoint,
                reason="record is not an object",
                path=path,
            )

    @staticmethod
    def _attach(results: list[Any], query: LookupQuery) -> Any:
        return ExpandMarker(results, query.flatten_levels) if query.expand else results

    def _fetch(
        self,
        endpoint: EndpointDescriptor,
        values: Mapping[str, Any],
        child: LookupQuery | None,
    ) -> list[Any]:
        try:
            iterator = self._source.open_lookup_iterator(endpoint, values)
        except ConfigurationError as e:
            raise LookupResolutionError(str(e), endpoint=endpoint.name) from e

        results: list[Any] = []
        with iterator:
            for document in iterator:
                records = self._source.extract_records(endpoint, document)
                self.resolve(records, child)
                results.extend(records)
        return results

"""Query engine.

Architecture:
    QueryEngine turns a saved EndpointQuery into a base RestRequest, opens a
    DataIterator for it and drives the pipeline page by page:

        pages -> records (json_path) -> lookups (depth-first) -> sink

    Exactly one request is outstanding at any time. The next page is only
    requested once every record of the current page, and every lookup query
    those records trigger, has completed.

Design Decisions:
    - Collaborators (executor, transformer, config) are injected
    - The engine itself is the LookupSource used by the resolver
    - A cancelled run returns the sink as filled so far, without raising;
      a record whose lookups were interrupted is not appended
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from ..config import CUSTOM_ENDPOINT, DEFAULT_CONTENT_TYPE, DEFAULT_JSON_PATH, EngineConfig
from ..core.cancellation import CancellationToken
from ..core.enums import HttpMethod
from ..core.exceptions import ConfigurationError
from ..core.request import RequestExecutor, RestRequest
from ..documents.transformers import JsonResponseTransformer, ResponseTransformer
from ..lookup.chain import LookupChain
from ..lookup.query import (
    LookupQuery,
    build_custom_lookup_queries,
    build_lookup_queries,
    mark_expanded,
)
from ..lookup.registry import EndpointRegistry
from ..lookup.resolver import LookupResolver
from ..models.endpoint import EndpointDescriptor
from ..models.parameters import HttpParameter
from ..models.query import EndpointQuery, RestDataSource
from ..pagination.iterator import DataIterator
from ..template.builder import SuffixTemplate, custom_suffix_from
from .sinks import Sink, TableSink
from .transport import HTTPRequestExecutor


def _split_origin(url: str) -> tuple[str, str]:
    """Split ``scheme://host`` off an absolute URL template."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return "", url
    host, slash, path = rest.partition("/")
    return f"{scheme}://{host}", slash + path


class QueryEngine:
    """Runs endpoint queries against one REST data source."""

    def __init__(
        self,
        data_source: RestDataSource,
        registry: EndpointRegistry,
        *,
        executor: RequestExecutor | None = None,
        transformer: ResponseTransformer | None = None,
        config: EngineConfig | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            data_source: Base URL and default headers / query parameters
            registry: Endpoint catalog
            executor: Request executor (default: HTTPRequestExecutor)
            transformer: Response transformer (default: JSON)
            config: Runtime limits
            cancel_token: Shared cancellation flag
        """
        self.config = config or EngineConfig()
        self.data_source = data_source
        self.registry = registry
        self.executor = executor or HTTPRequestExecutor(timeout=self.config.timeout)
        self.transformer = transformer or JsonResponseTransformer()
        self.cancel_token = cancel_token or CancellationToken()

    def cancel(self) -> None:
        self.cancel_token.cancel()

    def resolve_endpoint(self, query: EndpointQuery) -> EndpointDescriptor:
        """The endpoint a query runs against.

        Custom queries get an ad hoc descriptor built from their own suffix
        (or the suffix derived from their template endpoint). Pagination and
        request settings the query leaves unset come from the template. A
        custom endpoint has no catalog lookups.

        Raises:
            ConfigurationError: If the endpoint is unknown or a custom query
                has no suffix
        """
        if not query.is_custom:
            endpoint = self.registry.require(query.endpoint)
            if query.json_path:
                endpoint = endpoint.model_copy(update={"json_path": query.json_path})
            return endpoint

        template = (
            self.registry.require(query.template_endpoint) if query.template_endpoint else None
        )
        suffix = query.custom_suffix
        if suffix is None and template is not None:
            suffix = custom_suffix_from(template.suffix)
        if suffix is None:
            raise ConfigurationError("A custom endpoint query needs a suffix or a template endpoint")

        pagination = query.pagination
        if pagination is None and template is not None and template.paged:
            pagination = template.pagination
        method = query.method or (template.method if template else HttpMethod.GET)
        body = query.body if query.body is not None else (template.body if template else None)
        if body is not None and method != HttpMethod.POST:
            raise ConfigurationError(f"A {method} request cannot carry a body")

        return EndpointDescriptor(
            name=CUSTOM_ENDPOINT,
            suffix=suffix,
            paged=pagination is not None,
            pagination=pagination,
            json_path=query.json_path or (template.json_path if template else DEFAULT_JSON_PATH),
            method=method,
            body=body,
            content_type=query.content_type
            or (template.content_type if template else DEFAULT_CONTENT_TYPE),
            ignore_base_url=query.ignore_base_url,
        )

    def build_request(
        self,
        endpoint: EndpointDescriptor,
        values: Mapping[str, Any],
        additional_parameters: Iterable[HttpParameter] = (),
    ) -> RestRequest:
        """Base request for an endpoint with its template variables bound.

        POST requests carry a copy of the endpoint body and its content type.

        Raises:
            ConfigurationError: If a required template variable has no value
        """
        origin, template = "", endpoint.suffix
        if endpoint.ignore_base_url:
            origin, template = _split_origin(template)
        suffix = (
            SuffixTemplate(template)
            .bind(values)
            .with_additional_parameters(additional_parameters)
            .build()
        )
        defaults = tuple(
            (p.name, p.value) for p in self.data_source.query_parameters if p.value is not None
        )
        headers = self.data_source.header_map()
        body = None
        if endpoint.method == HttpMethod.POST:
            headers["Content-Type"] = endpoint.content_type
            body = copy.deepcopy(endpoint.body)
        return RestRequest(
            url=origin + suffix if endpoint.ignore_base_url else self.data_source.url_for(suffix),
            method=endpoint.method,
            query_params=defaults,
            headers=headers,
            body=body,
        )

    def _iterator(self, endpoint: EndpointDescriptor, request: RestRequest) -> DataIterator:
        return DataIterator(
            request=request,
            executor=self.executor,
            transformer=self.transformer,
            pagination=endpoint.effective_pagination,
            cancel_token=self.cancel_token,
            endpoint_id=endpoint.name,
            live_page_limit=self.config.live_page_limit,
        )

    def open_iterator(self, query: EndpointQuery) -> DataIterator:
        endpoint = self.resolve_endpoint(query)
        request = self.build_request(endpoint, query.parameters, query.additional_parameters)
        return self._iterator(endpoint, request)

    def open_lookup_iterator(
        self, endpoint: EndpointDescriptor, values: Mapping[str, Any]
    ) -> DataIterator:
        iterator = self._iterator(endpoint, self.build_request(endpoint, values))
        iterator.set_lookup(True)
        return iterator

    def extract_records(self, endpoint: EndpointDescriptor, document: Any) -> list[Any]:
        return self.transformer.extract_records(document, endpoint.json_path)

    def lookup_query_for(self, query: EndpointQuery) -> LookupQuery | None:
        if query.is_custom:
            return build_custom_lookup_queries(
                query.custom_lookups,
                expand=query.lookup_expanded,
                top_level_only=query.lookup_top_level_only,
                limit=self.config.lookup_depth_limit,
            )
        if not query.lookup_chain:
            return None
        return build_lookup_queries(
            LookupChain(root=query.endpoint, entries=query.lookup_chain),
            self.registry,
            expand=query.lookup_expanded,
            top_level_only=query.lookup_top_level_only,
            limit=self.config.lookup_depth_limit,
        )

    def run(self, query: EndpointQuery, sink: Sink | None = None, *, live: bool = False) -> Sink:
        """Run a query to completion, cancellation or a full sink.

        Args:
            query: Saved query to run
            sink: Destination (default: TableSink capped at config.max_rows)
            live: Cap the run at config.live_page_limit pages

        Returns:
            The sink

        Raises:
            ConfigurationError: If the query or its pagination is misconfigured
            FetchError: If a page fetch fails
        """
        sink = sink if sink is not None else TableSink(self.config.max_rows)
        endpoint = self.resolve_endpoint(query)
        request = self.build_request(endpoint, query.parameters, query.additional_parameters)
        lookup = self.lookup_query_for(query)
        resolver = LookupResolver(self.registry, self, self.cancel_token)

        with self._iterator(endpoint, request) as iterator:
            iterator.set_live_mode(live)
            while iterator.has_next() and not sink.full:
                document = iterator.next()
                if document is None:
                    continue
                for record in self.extract_records(endpoint, document):
                    if self.cancel_token.cancelled or sink.full:
                        return sink
                    resolver.resolve([record], lookup)
                    if self.cancel_token.cancelled:
                        return sink
                    if query.expanded_path:
                        record = mark_expanded(record, query.expanded_path)
                    sink.append(record)
        return sink

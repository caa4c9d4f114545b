"""Tabrest - paginated REST querying with nested lookups for tabular output."""

from .config import (
    CUSTOM_ENDPOINT,
    DEFAULT_JSON_PATH,
    DEFAULT_TIMEOUT,
    LIVE_MODE_PAGE_LIMIT,
    LOOKUP_QUERY_LIMIT,
    EngineConfig,
)
from .core import (
    ConfigurationError,
    FetchError,
    HttpMethod,
    LookupResolutionError,
    PaginationType,
    ParamKind,
    RequestExecutor,
    RestQueryError,
    RestRequest,
    RestResponse,
    TemplateSyntaxError,
)
from .core.cancellation import CancellationToken
from .documents import (
    JsonResponseTransformer,
    ResponseTransformer,
    XmlResponseTransformer,
    parse_link_header,
)
from .lookup import (
    EndpointRegistry,
    ExpandMarker,
    LookupChain,
    LookupQuery,
    LookupResolver,
    build_custom_lookup_queries,
    build_lookup_queries,
)
from .models import (
    CustomLookup,
    EndpointDescriptor,
    EndpointQuery,
    HttpParameter,
    LookupEndpoint,
    RestDataSource,
)
from .pagination import (
    DataIterator,
    FetchState,
    PaginationSpec,
    ParameterDescriptor,
    create_strategy,
)
from .runtime import HTTPRequestExecutor, QueryEngine, Sink, TableSink
from .template import (
    EndpointTemplate,
    SuffixTemplate,
    TemplateComponent,
    custom_suffix_from,
    format_template,
    parse_template,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "CUSTOM_ENDPOINT",
    "DEFAULT_JSON_PATH",
    "DEFAULT_TIMEOUT",
    "LIVE_MODE_PAGE_LIMIT",
    "LOOKUP_QUERY_LIMIT",
    "EngineConfig",
    # Core
    "CancellationToken",
    "HttpMethod",
    "PaginationType",
    "ParamKind",
    "RequestExecutor",
    "RestRequest",
    "RestResponse",
    # Exceptions
    "RestQueryError",
    "ConfigurationError",
    "TemplateSyntaxError",
    "FetchError",
    "LookupResolutionError",
    # Documents
    "ResponseTransformer",
    "JsonResponseTransformer",
    "XmlResponseTransformer",
    "parse_link_header",
    # Templates
    "EndpointTemplate",
    "TemplateComponent",
    "SuffixTemplate",
    "custom_suffix_from",
    "format_template",
    "parse_template",
    # Models
    "CustomLookup",
    "EndpointDescriptor",
    "EndpointQuery",
    "HttpParameter",
    "LookupEndpoint",
    "RestDataSource",
    # Pagination
    "DataIterator",
    "FetchState",
    "PaginationSpec",
    "ParameterDescriptor",
    "create_strategy",
    # Lookups
    "EndpointRegistry",
    "ExpandMarker",
    "LookupChain",
    "LookupQuery",
    "LookupResolver",
    "build_custom_lookup_queries",
    "build_lookup_queries",
    # Runtime
    "HTTPRequestExecutor",
    "QueryEngine",
    "Sink",
    "TableSink",
]

"""Core components."""

from .enums import HttpMethod, PaginationType, ParamKind
from .exceptions import (
    ConfigurationError,
    FetchError,
    LookupResolutionError,
    RestQueryError,
    TemplateSyntaxError,
)
from .request import RequestExecutor, RestRequest, RestResponse

__all__ = [
    "HttpMethod",
    "PaginationType",
    "ParamKind",
    "RestQueryError",
    "ConfigurationError",
    "TemplateSyntaxError",
    "FetchError",
    "LookupResolutionError",
    "RestRequest",
    "RestResponse",
    "RequestExecutor",
]

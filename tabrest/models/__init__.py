"""Persisted configuration models.

Architecture:
    Pydantic v2 models for everything that is saved and reloaded: the
    endpoint catalog, saved queries and data source settings. All models are
    frozen; editing produces a new instance via ``model_copy(update=...)``.
"""

from .endpoint import CustomLookup, EndpointDescriptor, LookupEndpoint
from .parameters import HttpParameter
from .query import EndpointQuery, RestDataSource

__all__ = [
    "CustomLookup",
    "EndpointDescriptor",
    "EndpointQuery",
    "HttpParameter",
    "LookupEndpoint",
    "RestDataSource",
]

"""Persisted query and data source models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import CUSTOM_ENDPOINT, LOOKUP_QUERY_LIMIT
from ..core.enums import HttpMethod
from ..pagination.definitions import PaginationSpec
from .endpoint import CustomLookup
from .parameters import HttpParameter


class RestDataSource(BaseModel):
    """Connection settings shared by every query against one REST service."""

    base_url: str = Field(..., min_length=1)
    headers: tuple[HttpParameter, ...] = ()
    query_parameters: tuple[HttpParameter, ...] = ()

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    def url_for(self, suffix: str) -> str:
        """Append a rendered endpoint suffix to the base URL."""
        if not suffix:
            return self.base_url
        if suffix.startswith("?"):
            return self.base_url + suffix
        return f"{self.base_url.rstrip('/')}/{suffix.lstrip('/')}"

    def header_map(self) -> dict[str, str]:
        return {h.name: h.value for h in self.headers if h.value is not None}


class EndpointQuery(BaseModel):
    """A saved query against one endpoint of a data source.

    ``endpoint`` names a catalog endpoint, or is CUSTOM_ENDPOINT to use
    ``custom_suffix`` directly. A custom query may start from
    ``template_endpoint``, inheriting its pagination and request settings
    unless it sets its own. Catalog queries join child endpoints through
    ``lookup_chain``; custom queries use ``custom_lookups`` instead.
    ``expanded_path`` names an array inside each record that is flattened
    into one row per element.
    """

    endpoint: str = Field(..., min_length=1)
    custom_suffix: str | None = None
    template_endpoint: str | None = None
    parameters: dict[str, str | None] = Field(default_factory=dict)
    additional_parameters: tuple[HttpParameter, ...] = ()
    pagination: PaginationSpec | None = None
    json_path: str | None = None
    method: HttpMethod | None = None
    body: dict[str, Any] | None = None
    content_type: str | None = None
    ignore_base_url: bool = False
    expanded_path: str | None = None
    lookup_chain: tuple[str | None, ...] = ()
    custom_lookups: tuple[CustomLookup, ...] = ()
    lookup_expanded: bool = True
    lookup_top_level_only: bool = True

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @property
    def is_custom(self) -> bool:
        return self.endpoint == CUSTOM_ENDPOINT

    @field_validator("lookup_chain", "custom_lookups")
    @classmethod
    def validate_lookup_depth(cls, v: tuple[Any, ...]) -> tuple[Any, ...]:
        """Validate lookups do not exceed the lookup depth cap."""
        if len(v) > LOOKUP_QUERY_LIMIT:
            raise ValueError(f"A query holds at most {LOOKUP_QUERY_LIMIT} lookup levels")
        return v

    @model_validator(mode="after")
    def validate_custom(self) -> EndpointQuery:
        """Request overrides and custom lookups only apply to custom endpoints."""
        if self.is_custom:
            if self.lookup_chain:
                raise ValueError("a custom endpoint query uses custom_lookups, not lookup_chain")
            if self.body is not None and self.method == HttpMethod.GET:
                raise ValueError("a GET request cannot carry a body")
            return self

        overrides = {
            "pagination": self.pagination is not None,
            "method": self.method is not None,
            "body": self.body is not None,
            "content_type": self.content_type is not None,
            "ignore_base_url": self.ignore_base_url,
            "custom_lookups": bool(self.custom_lookups),
        }
        for name, is_set in overrides.items():
            if is_set:
                raise ValueError(f"{name} can only be set on a custom endpoint query")
        return self

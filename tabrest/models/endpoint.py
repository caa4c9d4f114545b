"""Endpoint catalog models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import CUSTOM_ENDPOINT, DEFAULT_CONTENT_TYPE, DEFAULT_JSON_PATH
from ..core.enums import HttpMethod
from ..pagination.definitions import PaginationSpec


class LookupEndpoint(BaseModel):
    """A child endpoint that can be joined onto records of its parent.

    Attributes:
        endpoint: Name of the child endpoint
        match_path: JSON path inside a parent record locating the sub-entities
        parameters: Child template variable -> JSON path relative to a match
        key: Field the results are attached under (default: endpoint name)
    """

    endpoint: str = Field(..., min_length=1)
    match_path: str = DEFAULT_JSON_PATH
    parameters: dict[str, str] = Field(default_factory=dict)
    key: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @property
    def attach_key(self) -> str:
        return self.key or self.endpoint


class EndpointDescriptor(BaseModel):
    """A logical REST endpoint.

    ``suffix`` is an endpoint template appended to the data source URL, or
    used as the whole URL when ``ignore_base_url`` is set. Pagination only
    applies when ``paged`` is set. ``body`` is sent with POST requests only.
    """

    name: str = Field(..., min_length=1)
    suffix: str = ""
    paged: bool = False
    pagination: PaginationSpec | None = None
    json_path: str = DEFAULT_JSON_PATH
    method: HttpMethod = HttpMethod.GET
    body: dict[str, Any] | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    ignore_base_url: bool = False
    lookups: tuple[LookupEndpoint, ...] = ()

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @model_validator(mode="after")
    def validate_body(self) -> EndpointDescriptor:
        if self.body is not None and self.method != HttpMethod.POST:
            raise ValueError(f"{self.method} endpoint '{self.name}' cannot carry a request body")
        return self

    @property
    def effective_pagination(self) -> PaginationSpec:
        if self.paged and self.pagination is not None:
            return self.pagination
        return PaginationSpec()

    @property
    def child_names(self) -> list[str]:
        return [lookup.endpoint for lookup in self.lookups]

    def lookup_for(self, child: str) -> LookupEndpoint | None:
        """The lookup declaration for a child endpoint, if declared."""
        for lookup in self.lookups:
            if lookup.endpoint == child:
                return lookup
        return None


class CustomLookup(BaseModel):
    """An ad hoc lookup level of a custom endpoint query.

    Level N (one-based) is requested at ``url``, a suffix template whose
    ``{paramN}`` variable is bound per match. Matches are located in the
    parent record by ``json_path``; ``key`` names the field of a match that
    supplies the value, or the whole match is used when it is unset.
    Results are attached under ``CUSTOMN``.

    Attributes:
        url: Suffix template of the lookup request
        json_path: JSON path inside a parent record locating the matches
        key: Field (or JSON path) inside a match bound to ``{paramN}``
        ignore_base_url: Treat ``url`` as a full URL
    """

    url: str = Field(..., min_length=1)
    json_path: str = DEFAULT_JSON_PATH
    key: str | None = None
    ignore_base_url: bool = False

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @staticmethod
    def endpoint_name(level: int) -> str:
        return f"{CUSTOM_ENDPOINT}{level + 1}"

    @staticmethod
    def parameter_name(level: int) -> str:
        return f"param{level + 1}"

    def descriptor(self, level: int) -> EndpointDescriptor:
        """Unpaged GET endpoint requested by this level."""
        return EndpointDescriptor(
            name=self.endpoint_name(level),
            suffix=self.url,
            ignore_base_url=self.ignore_base_url,
        )

    def lookup(self, level: int) -> LookupEndpoint:
        """Join declaration binding ``{paramN}`` from each match."""
        if not self.key:
            value_path = DEFAULT_JSON_PATH
        elif self.key.startswith("$"):
            value_path = self.key
        else:
            value_path = f"$.{self.key}"
        return LookupEndpoint(
            endpoint=self.endpoint_name(level),
            match_path=self.json_path or DEFAULT_JSON_PATH,
            parameters={self.parameter_name(level): value_path},
        )

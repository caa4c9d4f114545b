"""Pagination metadata definitions.

This module defines the declarative pagination configuration attached to an
endpoint (PaginationSpec and its ParameterDescriptor roles), the per-run
FetchState cursor, and the validation rules tying each pagination type to the
roles it needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import PaginationType, ParamKind
from ..core.exceptions import ConfigurationError


class ParameterDescriptor(BaseModel):
    """Where a pagination value is read from or written to.

    Attributes:
        name: Query parameter / header name, JSON path, XPath, or Link relation
        kind: Location kind
    """

    name: str = Field(..., min_length=1)
    kind: ParamKind

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class PaginationSpec(BaseModel):
    """Pagination configuration for one endpoint.

    Only the parameter roles used by ``type`` may be set; see ROLE_REQUIREMENTS.
    """

    type: PaginationType = PaginationType.NONE
    zero_based_page_index: bool = False
    max_results_per_page: int = Field(0, ge=0)
    first_page_index: int | None = None
    increment_offset: bool = False

    total_pages_param: ParameterDescriptor | None = None
    page_number_param: ParameterDescriptor | None = None
    record_count_param: ParameterDescriptor | None = None
    has_next_param: ParameterDescriptor | None = None
    page_offset_param_to_read: ParameterDescriptor | None = None
    page_offset_param_to_write: ParameterDescriptor | None = None
    link_param: ParameterDescriptor | None = None
    total_count_param: ParameterDescriptor | None = None
    offset_param: ParameterDescriptor | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def first_page(self) -> int:
        """Index of the first page written into requests."""
        if self.first_page_index is not None:
            return self.first_page_index
        return 0 if self.zero_based_page_index else 1


# Role directions
READ = "read"
WRITE = "write"
LINK = "link"

ROLE_NAMES = (
    "total_pages_param",
    "page_number_param",
    "record_count_param",
    "has_next_param",
    "page_offset_param_to_read",
    "page_offset_param_to_write",
    "link_param",
    "total_count_param",
    "offset_param",
)

ROLE_REQUIREMENTS: dict[PaginationType, dict[str, str]] = {
    PaginationType.NONE: {},
    PaginationType.PAGE_COUNT: {"total_pages_param": READ, "page_number_param": WRITE},
    PaginationType.PAGE: {"page_number_param": WRITE, "record_count_param": READ},
    PaginationType.ITERATION: {
        "has_next_param": READ,
        "page_offset_param_to_read": READ,
        "page_offset_param_to_write": WRITE,
    },
    PaginationType.LINK_ITERATION: {"link_param": LINK},
    PaginationType.TOTAL_COUNT_AND_OFFSET: {"total_count_param": READ, "offset_param": WRITE},
    PaginationType.TOTAL_COUNT_AND_PAGE: {"total_count_param": READ, "page_number_param": WRITE},
}


def _kind_allowed(kind: ParamKind, direction: str) -> bool:
    if direction == READ:
        return kind.readable
    if direction == WRITE:
        return kind.writable
    return kind.readable or kind == ParamKind.LINK_HEADER_RELATION


def validate_pagination_spec(spec: PaginationSpec) -> None:
    """Check that exactly the roles required by the pagination type are set.

    Raises:
        ConfigurationError: If a required role is unset, an unrelated role is
            set, a role uses a kind that cannot flow in its direction, a
            total-count type has no positive max_results_per_page, or
            increment_offset is set on a type other than ITERATION
    """
    required = ROLE_REQUIREMENTS[spec.type]

    for role in ROLE_NAMES:
        descriptor: ParameterDescriptor | None = getattr(spec, role)
        direction = required.get(role)

        if direction is None:
            if descriptor is not None:
                raise ConfigurationError(f"{role} is not used by {spec.type} pagination")
            continue
        if descriptor is None:
            raise ConfigurationError(f"{spec.type} pagination requires {role}")
        if not _kind_allowed(descriptor.kind, direction):
            raise ConfigurationError(
                f"{role} cannot use {descriptor.kind} for {spec.type} pagination"
            )

    if (
        spec.type in (PaginationType.TOTAL_COUNT_AND_OFFSET, PaginationType.TOTAL_COUNT_AND_PAGE)
        and spec.max_results_per_page <= 0
    ):
        raise ConfigurationError(f"{spec.type} pagination requires max_results_per_page > 0")

    if spec.increment_offset and spec.type != PaginationType.ITERATION:
        raise ConfigurationError(f"increment_offset is not used by {spec.type} pagination")


def body_write_roles(spec: PaginationSpec) -> list[str]:
    """Roles of spec that write a value into the JSON request body."""
    return [
        role
        for role, direction in ROLE_REQUIREMENTS[spec.type].items()
        if direction == WRITE
        and getattr(spec, role) is not None
        and getattr(spec, role).kind == ParamKind.JSON_PATH
    ]


@dataclass(frozen=True)
class FetchState:
    """Cursor of one pagination run.

    Replaced (never mutated) once per successful page fetch.

    Attributes:
        page: Page index written into the next request
        offset: Record offset written into the next request
        cursor: Continuation value (next offset token or next link URL)
        total: Last page index or total record count read from the first response
        fetches: Number of pages fetched so far
        done: Whether no further page should be requested
    """

    page: int = 0
    offset: int = 0
    cursor: Any = None
    total: int | None = None
    fetches: int = 0
    done: bool = False

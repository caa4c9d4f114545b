"""Core enumerations shared by the pagination, template and lookup layers.

Architecture:
    String enums so that persisted query definitions serialize to readable
    values and round-trip through pydantic without custom encoders.

Key Types:
    - PaginationType: The seven supported pagination conventions
    - ParamKind: Where a pagination value is read from or written to
    - HttpMethod: Request verbs supported by endpoint definitions
"""

from enum import Enum


class PaginationType(str, Enum):
    """Pagination convention used by an endpoint."""

    NONE = "NONE"
    PAGE_COUNT = "PAGE_COUNT"
    PAGE = "PAGE"
    ITERATION = "ITERATION"
    LINK_ITERATION = "LINK_ITERATION"
    TOTAL_COUNT_AND_OFFSET = "TOTAL_COUNT_AND_OFFSET"
    TOTAL_COUNT_AND_PAGE = "TOTAL_COUNT_AND_PAGE"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value


class ParamKind(str, Enum):
    """Location of a pagination parameter.

    QUERY_PARAM and HEADER can be written to a request; JSON_PATH can be both
    read from a response document and merged into a request body; XPATH is
    read-only; LINK_HEADER_RELATION names a relation in the HTTP Link header.
    """

    QUERY_PARAM = "QUERY_PARAM"
    JSON_PATH = "JSON_PATH"
    XPATH = "XPATH"
    LINK_HEADER_RELATION = "LINK_HEADER_RELATION"
    HEADER = "HEADER"

    def __str__(self) -> str:
        return self.value

    @property
    def readable(self) -> bool:
        """Whether a value can be read from a response using this kind."""
        return self in (ParamKind.JSON_PATH, ParamKind.XPATH, ParamKind.HEADER)

    @property
    def writable(self) -> bool:
        """Whether a value can be written into a request using this kind."""
        return self in (ParamKind.QUERY_PARAM, ParamKind.JSON_PATH, ParamKind.HEADER)


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"

    def __str__(self) -> str:
        return self.value

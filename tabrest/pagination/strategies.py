"""Pagination strategies.

Architecture:
    Each pagination type is a small flat class implementing the
    PaginationStrategy protocol. Strategies hold no mutable state of their
    own: the driver (DataIterator) owns a FetchState and hands it back to the
    strategy to derive the next request and the next state.

Design Decisions:
    - Dispatch by PaginationSpec.type through STRATEGIES, no class hierarchy
    - Role validation runs in every constructor, before any network I/O
    - Totals and page counts are read from the first response only
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Protocol
from urllib.parse import urljoin

from ..core.enums import PaginationType, ParamKind
from ..core.exceptions import ConfigurationError
from ..core.request import RestRequest, RestResponse
from ..documents.links import parse_link_header
from ..documents.transformers import ResponseTransformer
from .definitions import FetchState, PaginationSpec, ParameterDescriptor, validate_pagination_spec

logger = logging.getLogger(__name__)

_FALSY_STRINGS = frozenset({"", "false", "0", "no", "null", "none"})


@dataclass(frozen=True)
class Page:
    """One fetched page as seen by a strategy.

    The response body has already been consumed and closed; only its status
    and headers remain usable.
    """

    request: RestRequest
    response: RestResponse
    document: Any
    transformer: ResponseTransformer


def read_value(page: Page, descriptor: ParameterDescriptor) -> Any | None:
    """Read a pagination value from a fetched page.

    Returns None when the value is absent.
    """
    if descriptor.kind == ParamKind.HEADER:
        return page.response.header(descriptor.name)
    if descriptor.kind == ParamKind.LINK_HEADER_RELATION:
        links = parse_link_header(page.response.header_values("Link"))
        return links.get(descriptor.name.lower())
    if descriptor.kind in (ParamKind.JSON_PATH, ParamKind.XPATH):
        if page.document is None:
            return None
        return page.transformer.extract_scalar(page.document, descriptor.name, descriptor.kind)
    raise ConfigurationError(f"{descriptor.kind} parameters cannot be read from a response")


def write_value(request: RestRequest, descriptor: ParameterDescriptor, value: Any) -> RestRequest:
    """Write a pagination value into a request."""
    if descriptor.kind == ParamKind.QUERY_PARAM:
        return request.with_query_param(descriptor.name, value)
    if descriptor.kind == ParamKind.HEADER:
        return request.with_header(descriptor.name, value)
    if descriptor.kind == ParamKind.JSON_PATH:
        return request.with_body_value(descriptor.name, value)
    raise ConfigurationError(f"{descriptor.kind} parameters cannot be written into a request")


def to_int(value: Any) -> int | None:
    """Coerce a scalar into an int, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            return int(number) if number.is_integer() else None
    return None


def is_truthy(value: Any) -> bool:
    """Interpret a has-next flag read from a response."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    if isinstance(value, (list, dict)):
        return bool(value)
    return True


def is_empty(value: Any) -> bool:
    """Whether a record-count value signals an empty page."""
    if value is None:
        return True
    if isinstance(value, (list, dict)):
        return not value
    if isinstance(value, str) and not value.strip():
        return True
    return to_int(value) == 0


class PaginationStrategy(Protocol):
    """Derives requests and stop conditions for one pagination type."""

    spec: PaginationSpec

    def initial_state(self) -> FetchState: ...

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest: ...

    def update_state(self, state: FetchState, page: Page) -> FetchState: ...

    def is_done(self, state: FetchState) -> bool: ...


class _BaseStrategy:
    type: PaginationType = PaginationType.NONE

    def __init__(self, spec: PaginationSpec) -> None:
        if spec.type != self.type:
            raise ConfigurationError(
                f"{type(self).__name__} cannot run {spec.type} pagination"
            )
        validate_pagination_spec(spec)
        self.spec = spec

    def initial_state(self) -> FetchState:
        return FetchState()

    def is_done(self, state: FetchState) -> bool:
        return state.done


class NoPaginationStrategy(_BaseStrategy):
    """Single request, no paging."""

    type = PaginationType.NONE

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        return base

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        return replace(state, fetches=state.fetches + 1, done=True)


class PageCountStrategy(_BaseStrategy):
    """Page numbers up to a total page count read from the first response."""

    type = PaginationType.PAGE_COUNT

    def initial_state(self) -> FetchState:
        return FetchState(page=self.spec.first_page)

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        return write_value(base, self.spec.page_number_param, state.page)

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        last_page = state.total
        if state.fetches == 0:
            count = to_int(read_value(page, self.spec.total_pages_param))
            if count is None:
                return replace(state, fetches=1, done=True)
            last_page = self.spec.first_page + count - 1

        next_page = state.page + 1
        return replace(
            state,
            page=next_page,
            total=last_page,
            fetches=state.fetches + 1,
            done=last_page is None or next_page > last_page,
        )


class PageStrategy(_BaseStrategy):
    """Page numbers until a page reports no records."""

    type = PaginationType.PAGE

    def initial_state(self) -> FetchState:
        return FetchState(page=self.spec.first_page)

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        return write_value(base, self.spec.page_number_param, state.page)

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        done = is_empty(read_value(page, self.spec.record_count_param))
        return replace(state, page=state.page + 1, fetches=state.fetches + 1, done=done)


class IterationStrategy(_BaseStrategy):
    """Opaque continuation offsets read from each response."""

    type = PaginationType.ITERATION

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        if state.cursor is None:
            return base
        return write_value(base, self.spec.page_offset_param_to_write, state.cursor)

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        fetched = replace(state, fetches=state.fetches + 1)
        # An absent has-next flag is read as end of data.
        if not is_truthy(read_value(page, self.spec.has_next_param)):
            return replace(fetched, done=True)

        offset = read_value(page, self.spec.page_offset_param_to_read)
        if offset is None:
            logger.warning(
                "Next page offset missing at %s; stopping",
                self.spec.page_offset_param_to_read.name,
            )
            return replace(fetched, done=True)

        if self.spec.increment_offset:
            number = to_int(offset)
            if number is None:
                logger.warning("Next page offset %r is not numeric; stopping", offset)
                return replace(fetched, done=True)
            offset = number + 1

        return replace(fetched, cursor=offset)


class LinkIterationStrategy(_BaseStrategy):
    """Follows a next-page link, replacing the whole request URL."""

    type = PaginationType.LINK_ITERATION

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        if state.cursor is None:
            return base
        return base.with_url(state.cursor)

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        link = read_value(page, self.spec.link_param)
        if link is None or not str(link).strip():
            return replace(state, fetches=state.fetches + 1, done=True)
        url = urljoin(page.request.full_url, str(link).strip())
        return replace(state, cursor=url, fetches=state.fetches + 1)


class TotalCountAndOffsetStrategy(_BaseStrategy):
    """Record offsets up to a total record count."""

    type = PaginationType.TOTAL_COUNT_AND_OFFSET

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        if state.fetches == 0:
            return base
        return write_value(base, self.spec.offset_param, state.offset)

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        total = state.total
        if state.fetches == 0:
            total = to_int(read_value(page, self.spec.total_count_param))
        if total is None:
            return replace(state, fetches=state.fetches + 1, done=True)

        offset = state.offset + self.spec.max_results_per_page
        return replace(
            state,
            offset=offset,
            total=total,
            fetches=state.fetches + 1,
            done=offset >= total,
        )


class TotalCountAndPageStrategy(_BaseStrategy):
    """Page numbers derived from a total record count and the page size."""

    type = PaginationType.TOTAL_COUNT_AND_PAGE

    def initial_state(self) -> FetchState:
        return FetchState(page=self.spec.first_page)

    def build_next_request(self, state: FetchState, base: RestRequest) -> RestRequest:
        return write_value(base, self.spec.page_number_param, state.page)

    def update_state(self, state: FetchState, page: Page) -> FetchState:
        total = state.total
        if state.fetches == 0:
            total = to_int(read_value(page, self.spec.total_count_param))
        if total is None:
            return replace(state, fetches=state.fetches + 1, done=True)

        pages = math.ceil(total / self.spec.max_results_per_page)
        last_page = self.spec.first_page + pages - 1
        next_page = state.page + 1
        return replace(
            state,
            page=next_page,
            total=total,
            fetches=state.fetches + 1,
            done=next_page > last_page,
        )


STRATEGIES: dict[PaginationType, type[_BaseStrategy]] = {
    PaginationType.NONE: NoPaginationStrategy,
    PaginationType.PAGE_COUNT: PageCountStrategy,
    PaginationType.PAGE: PageStrategy,
    PaginationType.ITERATION: IterationStrategy,
    PaginationType.LINK_ITERATION: LinkIterationStrategy,
    PaginationType.TOTAL_COUNT_AND_OFFSET: TotalCountAndOffsetStrategy,
    PaginationType.TOTAL_COUNT_AND_PAGE: TotalCountAndPageStrategy,
}


def create_strategy(spec: PaginationSpec | None) -> PaginationStrategy:
    """Build the strategy for a pagination spec (None means no pagination).

    Raises:
        ConfigurationError: If the spec is missing roles its type requires
    """
    spec = spec or PaginationSpec()
    return STRATEGIES[spec.type](spec)

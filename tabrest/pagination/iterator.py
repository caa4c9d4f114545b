"""Generic pagination driver.

This module provides DataIterator, which owns the has_next/next contract and
delegates request building and stop conditions to a PaginationStrategy.
Exactly one page is in flight at a time and each response is closed before
next() returns.
"""

from __future__ import annotations

from collections.abc import Iterator
from time import perf_counter
from typing import Any

from ..config import LIVE_MODE_PAGE_LIMIT
from ..core.cancellation import CancellationToken
from ..core.enums import HttpMethod
from ..core.exceptions import ConfigurationError, FetchError
from ..core.request import RequestExecutor, RestRequest
from ..documents.transformers import ResponseTransformer
from .definitions import FetchState, PaginationSpec, body_write_roles
from .strategies import Page, PaginationStrategy, create_strategy
from .telemetry import (
    log_page_error,
    log_page_fetched,
    log_pagination_cancelled,
    log_pagination_complete,
)


def is_empty_document(document: Any) -> bool:
    """Whether a parsed document carries no content."""
    if document is None:
        return True
    if isinstance(document, (list, dict, str)):
        return not document
    return False


class DataIterator:
    """Iterates the pages of one endpoint query.

    ``next()`` returns the parsed document of the next page, or None when the
    page was fetched but had no content; callers must keep checking
    ``has_next()``. Iterating the object directly yields only non-empty
    documents.
    """

    def __init__(
        self,
        *,
        request: RestRequest,
        executor: RequestExecutor,
        transformer: ResponseTransformer,
        pagination: PaginationSpec | PaginationStrategy | None = None,
        cancel_token: CancellationToken | None = None,
        endpoint_id: str = "unknown",
        live_page_limit: int = LIVE_MODE_PAGE_LIMIT,
    ) -> None:
        """Initialize the iterator.

        Args:
            request: Base request for the first page
            executor: Performs the HTTP requests
            transformer: Parses response bodies and reads pagination values
            pagination: Pagination spec or prebuilt strategy (None = single page)
            cancel_token: Shared cancellation flag
            endpoint_id: Endpoint identifier used in logs
            live_page_limit: Page cap applied in live mode

        Raises:
            ConfigurationError: If the pagination spec is incomplete or writes
                into the body of a GET request
        """
        if pagination is None or isinstance(pagination, PaginationSpec):
            self._strategy = create_strategy(pagination)
        else:
            self._strategy = pagination
        body_roles = body_write_roles(self._strategy.spec)
        if body_roles and request.method == HttpMethod.GET:
            raise ConfigurationError(
                f"{', '.join(body_roles)} writes into the request body, which GET requests do not send"
            )
        self._request = request
        self._executor = executor
        self._transformer = transformer
        self._cancel = cancel_token or CancellationToken()
        self._endpoint_id = endpoint_id
        self._live_page_limit = live_page_limit
        self._state: FetchState = self._strategy.initial_state()
        self._live = False
        self._lookup = False
        self._closed = False
        self._started: float | None = None

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def is_lookup(self) -> bool:
        """Whether this iterator services a nested lookup query."""
        return self._lookup

    @property
    def cancel_token(self) -> CancellationToken:
        return self._cancel

    def set_live_mode(self, live: bool) -> None:
        self._live = live

    def set_lookup(self, lookup: bool) -> None:
        self._lookup = lookup

    def _page_limit_reached(self) -> bool:
        return self._live and self._state.fetches >= self._live_page_limit

    def has_next(self) -> bool:
        if self._closed or self._cancel.cancelled:
            return False
        return not (self._strategy.is_done(self._state) or self._page_limit_reached())

    def next(self) -> Any | None:
        """Fetch the next page.

        Returns:
            The parsed document, or None if the page had no content or there
            is nothing left to fetch

        Raises:
            FetchError: On transport failure, non-success status or parse failure
            ConfigurationError: If a pagination value cannot be read or written
        """
        if self._cancel.cancelled:
            self._finish_cancelled()
            return None
        if not self.has_next():
            return None

        if self._started is None:
            self._started = perf_counter()
        page_index = self._state.fetches
        request = self._strategy.build_next_request(self._state, self._request)
        url = request.full_url

        page_start = perf_counter()
        try:
            with self._executor.execute(request) as response:
                if not response.ok:
                    raise FetchError(
                        f"HTTP {response.status} from {url}",
                        status_code=response.status,
                        url=url,
                    )
                document = self._transformer.parse(response.body)
                page = Page(
                    request=request,
                    response=response,
                    document=document,
                    transformer=self._transformer,
                )
                self._state = self._strategy.update_state(self._state, page)
        except ConfigurationError:
            self.close()
            raise
        except Exception as e:
            if self._cancel.cancelled:
                self._finish_cancelled()
                return None
            log_page_error(
                endpoint_id=self._endpoint_id,
                page_index=page_index,
                url=url,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            self.close()
            if isinstance(e, FetchError):
                raise
            raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e

        log_page_fetched(
            endpoint_id=self._endpoint_id,
            page_index=page_index,
            url=url,
            status=response.status,
            latency_ms=(perf_counter() - page_start) * 1000.0,
        )
        if not self.has_next() and not self._cancel.cancelled:
            log_pagination_complete(
                endpoint_id=self._endpoint_id,
                pages_fetched=self._state.fetches,
                total_latency_ms=(perf_counter() - self._started) * 1000.0,
            )

        return None if is_empty_document(document) else document

    def _finish_cancelled(self) -> None:
        if not self._closed:
            log_pagination_cancelled(
                endpoint_id=self._endpoint_id,
                pages_fetched=self._state.fetches,
            )
        self.close()

    def close(self) -> None:
        """Release the iterator. Safe to call more than once."""
        self._closed = True

    def __iter__(self) -> Iterator[Any]:
        try:
            while self.has_next():
                document = self.next()
                if document is not None:
                    yield document
        finally:
            self.close()

    def __enter__(self) -> DataIterator:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

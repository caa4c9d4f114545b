"""Unit tests for the DataIterator driver."""

from __future__ import annotations

import logging

import aiohttp
import pytest

from tabrest.core.cancellation import CancellationToken
from tabrest.core.enums import PaginationType, ParamKind
from tabrest.core.exceptions import ConfigurationError, FetchError
from tabrest.core.request import RestRequest
from tabrest.documents import JsonResponseTransformer
from tabrest.pagination import DataIterator, PaginationSpec, ParameterDescriptor

PAGED = PaginationSpec(
    type=PaginationType.PAGE,
    page_number_param=ParameterDescriptor(name="page", kind=ParamKind.QUERY_PARAM),
    record_count_param=ParameterDescriptor(name="$.items", kind=ParamKind.JSON_PATH),
)


def make_iterator(executor, pagination=PAGED, **kwargs) -> DataIterator:
    return DataIterator(
        request=RestRequest(url="https://api.test/items"),
        executor=executor,
        transformer=JsonResponseTransformer(),
        pagination=pagination,
        endpoint_id="items",
        **kwargs,
    )


class TestDataIterator:
    """Test the has_next/next contract."""

    def test_iterates_non_empty_documents(self, fake_executor, respond):
        """Test Python iteration skips empty pages."""
        executor = fake_executor(
            [respond({"items": [1]}), respond({"items": [2]}), respond({"items": []})]
        )

        documents = list(make_iterator(executor))

        assert documents == [{"items": [1]}, {"items": [2]}, {"items": []}]

    def test_empty_body_returns_none(self, fake_executor, respond):
        """Test an empty page yields None from next()."""
        iterator = make_iterator(fake_executor([respond(None)]))

        assert iterator.has_next() is True
        assert iterator.next() is None
        assert iterator.has_next() is False

    def test_next_after_done_returns_none(self, fake_executor, respond):
        """Test next() past the end does not fetch."""
        executor = fake_executor([respond({"items": []})])
        iterator = make_iterator(executor)
        iterator.next()

        assert iterator.next() is None
        assert len(executor.requests) == 1

    def test_responses_are_closed(self, fake_executor, respond):
        """Test every response body is closed before next() returns."""
        executor = fake_executor([respond({"items": [1]}), respond({"items": []})])
        iterator = make_iterator(executor)

        iterator.next()
        assert executor.responses[0].body.closed

        iterator.next()
        assert all(response.body.closed for response in executor.responses)

    def test_close_is_idempotent(self, fake_executor, respond):
        """Test close() can be called repeatedly and stops iteration."""
        executor = fake_executor([respond({"items": [1]})])
        iterator = make_iterator(executor)

        iterator.close()
        iterator.close()

        assert iterator.has_next() is False
        assert iterator.next() is None
        assert executor.requests == []

    def test_context_manager_closes(self, fake_executor):
        """Test leaving the context closes the iterator."""
        with make_iterator(fake_executor([])) as iterator:
            pass

        assert iterator.has_next() is False

    def test_live_mode_caps_pages(self, fake_executor, respond):
        """Test live mode stops after live_page_limit pages."""
        executor = fake_executor([respond({"items": [1]}), respond({"items": [2]})])
        iterator = make_iterator(executor, live_page_limit=1)
        iterator.set_live_mode(True)

        assert list(iterator) == [{"items": [1]}]
        assert len(executor.requests) == 1

    def test_lookup_flag(self, fake_executor):
        """Test set_lookup marks the iterator."""
        iterator = make_iterator(fake_executor([]))

        iterator.set_lookup(True)

        assert iterator.is_lookup is True

    def test_logs_page_events(self, fake_executor, respond, caplog):
        """Test structured page_fetched and pagination_complete events."""
        executor = fake_executor([respond({"items": []})])

        with caplog.at_level(logging.INFO, logger="tabrest.pagination.telemetry"):
            list(make_iterator(executor))

        messages = [record.getMessage() for record in caplog.records]
        assert "page_fetched" in messages
        assert "pagination_complete" in messages
        fetched = next(r for r in caplog.records if r.getMessage() == "page_fetched")
        assert fetched.endpoint_id == "items"
        assert fetched.url == "https://api.test/items?page=1"


class TestDataIteratorErrors:
    """Test failure handling."""

    def test_http_error_status_raises_fetch_error(self, fake_executor, respond):
        """Test a non-2xx status raises FetchError."""
        executor = fake_executor([respond({"error": "x"}, status=503)])
        iterator = make_iterator(executor)

        with pytest.raises(FetchError) as exc_info:
            iterator.next()

        assert exc_info.value.status_code == 503
        assert exc_info.value.url == "https://api.test/items?page=1"
        assert executor.responses[0].body.closed
        assert iterator.has_next() is False

    def test_transport_error_is_wrapped(self, fake_executor):
        """Test transport exceptions become FetchError."""
        executor = fake_executor([aiohttp.ClientConnectionError("refused")])

        with pytest.raises(FetchError) as exc_info:
            make_iterator(executor).next()

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    def test_parse_error_is_wrapped(self, fake_executor, respond):
        """Test malformed bodies become FetchError."""
        executor = fake_executor([respond(raw=b"{broken")])

        with pytest.raises(FetchError):
            make_iterator(executor).next()

    def test_error_logged(self, fake_executor, caplog):
        """Test failures emit a page_error event."""
        executor = fake_executor([aiohttp.ClientConnectionError("refused")])

        with caplog.at_level(logging.ERROR), pytest.raises(FetchError):
            make_iterator(executor).next()

        error = next(r for r in caplog.records if r.getMessage() == "page_error")
        assert error.error_type == "ClientConnectionError"

    def test_configuration_error_propagates(self, fake_executor, respond):
        """Test reading a JSON document with an XPath parameter is a configuration error."""
        spec = PaginationSpec(
            type=PaginationType.PAGE,
            page_number_param=ParameterDescriptor(name="page", kind=ParamKind.QUERY_PARAM),
            record_count_param=ParameterDescriptor(name="/items", kind=ParamKind.XPATH),
        )
        executor = fake_executor([respond({"items": [1]})])

        with pytest.raises(ConfigurationError):
            make_iterator(executor, pagination=spec).next()


class TestDataIteratorCancellation:
    """Test cooperative cancellation."""

    def test_cancel_between_fetches(self, fake_executor, respond):
        """Test no request is issued after cancellation."""
        token = CancellationToken()
        executor = fake_executor([respond({"items": [1]}), respond({"items": [2]})])
        iterator = make_iterator(executor, cancel_token=token)

        assert iterator.next() == {"items": [1]}
        token.cancel()

        assert iterator.has_next() is False
        assert iterator.next() is None
        assert len(executor.requests) == 1

    def test_failure_after_cancel_is_silent(self, fake_executor):
        """Test a fetch failure is discarded once cancellation was requested."""
        token = CancellationToken()
        executor = fake_executor([aiohttp.ClientConnectionError("aborted")])
        executor.on_execute = lambda count: token.cancel()
        iterator = make_iterator(executor, cancel_token=token)

        assert iterator.next() is None
        assert iterator.has_next() is False

    def test_cancel_during_iteration(self, fake_executor, respond):
        """Test cancelling from the consumer ends iteration cleanly."""
        token = CancellationToken()
        executor = fake_executor([respond({"items": [i]}) for i in range(5)])
        iterator = make_iterator(executor, cancel_token=token)

        seen = []
        for document in iterator:
            seen.append(document)
            if len(seen) == 2:
                token.cancel()

        assert len(seen) == 2
        assert len(executor.requests) == 2

"""Shared fixtures: a scripted request executor and response builders."""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Iterable
from typing import Any

import pytest

from tabrest.core.request import RestRequest, RestResponse


def make_response(
    payload: Any = None,
    *,
    status: int = 200,
    headers: Iterable[tuple[str, str]] = (),
    raw: bytes | None = None,
) -> RestResponse:
    """Build a response with a JSON body (or raw bytes)."""
    if raw is None:
        raw = b"" if payload is None else json.dumps(payload).encode("utf-8")
    return RestResponse(status=status, headers=tuple(headers), body=io.BytesIO(raw))


class FakeExecutor:
    """Request executor replaying scripted responses.

    ``script`` is either a list of responses / exceptions consumed in order,
    or a callable mapping a request to a response.
    """

    def __init__(
        self,
        script: list[RestResponse | Exception] | Callable[[RestRequest], RestResponse],
    ) -> None:
        self._script = script
        self.requests: list[RestRequest] = []
        self.responses: list[RestResponse] = []
        self.on_execute: Callable[[int], None] | None = None

    def execute(self, request: RestRequest) -> RestResponse:
        self.requests.append(request)
        if self.on_execute is not None:
            self.on_execute(len(self.requests))
        if callable(self._script):
            item = self._script(request)
        else:
            if not self._script:
                raise AssertionError(f"Unexpected request: {request.full_url}")
            item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        self.responses.append(item)
        return item

    def query_values(self, name: str) -> list[str | None]:
        """Value of one query parameter in each recorded request."""
        values = []
        for request in self.requests:
            params = dict(request.query_params)
            values.append(params.get(name))
        return values


@pytest.fixture
def respond() -> Callable[..., RestResponse]:
    return make_response


@pytest.fixture
def fake_executor() -> type[FakeExecutor]:
    return FakeExecutor

"""Request and response value types exchanged with the request executor.

Architecture:
    RestRequest is immutable: pagination strategies derive the next request
    from a base request with the ``with_*`` methods instead of mutating it.
    RestResponse owns the response body stream and must be closed once the
    page has been parsed; it is a context manager for that purpose.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO, Protocol
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from ..documents.jsonpath import set_value
from .enums import HttpMethod
from .exceptions import ConfigurationError


def _drop_url_param(url: str, name: str) -> str:
    """Remove every ``name`` pair already present in the URL's query string."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(key, value) for key, value in pairs if key != name]
    if len(kept) == len(pairs):
        return url
    return urlunsplit(parts._replace(query=urlencode(kept, quote_via=quote)))


@dataclass(frozen=True)
class RestRequest:
    """A single HTTP request.

    Attributes:
        url: Absolute URL without the query parameters below
        method: HTTP verb
        query_params: Ordered query pairs (names may repeat)
        headers: Request headers
        body: JSON-serializable body for POST requests
    """

    url: str
    method: HttpMethod = HttpMethod.GET
    query_params: tuple[tuple[str, str], ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def full_url(self) -> str:
        """URL including the encoded query string."""
        if not self.query_params:
            return self.url
        sep = "&" if "?" in self.url else "?"
        return f"{self.url}{sep}{urlencode(self.query_params, quote_via=quote)}"

    def with_query_param(self, name: str, value: Any) -> RestRequest:
        """Copy with every existing ``name`` pair replaced by one new pair.

        Pairs rendered into ``url`` itself are removed as well.
        """
        params = tuple(p for p in self.query_params if p[0] != name)
        return replace(
            self,
            url=_drop_url_param(self.url, name),
            query_params=(*params, (name, str(value))),
        )

    def with_header(self, name: str, value: Any) -> RestRequest:
        headers = {k: v for k, v in self.headers.items() if k.lower() != name.lower()}
        headers[name] = str(value)
        return replace(self, headers=headers)

    def with_body_value(self, path: str, value: Any) -> RestRequest:
        """Copy with value merged into the JSON body at path.

        Sibling fields already present in the body are preserved.

        Raises:
            ConfigurationError: If the request is a GET, which sends no body
        """
        if self.method == HttpMethod.GET:
            raise ConfigurationError(f"Cannot write {path} into the body of a GET request")
        body = copy.deepcopy(self.body) if isinstance(self.body, dict) else {}
        return replace(self, body=set_value(body, path, value))

    def with_url(self, url: str) -> RestRequest:
        """Copy targeting a new URL; query parameters are dropped."""
        return replace(self, url=url, query_params=())


@dataclass
class RestResponse:
    """Response returned by a RequestExecutor.

    Attributes:
        status: HTTP status code
        headers: Header pairs in received order (names may repeat)
        body: Readable binary stream holding the response payload
        url: URL that produced the response
    """

    status: int
    headers: tuple[tuple[str, str], ...]
    body: BinaryIO
    url: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        """First value of a header (case-insensitive)."""
        values = self.header_values(name)
        return values[0] if values else None

    def header_values(self, name: str) -> list[str]:
        lowered = name.lower()
        return [value for key, value in self.headers if key.lower() == lowered]

    def close(self) -> None:
        self.body.close()

    def __enter__(self) -> RestResponse:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class RequestExecutor(Protocol):
    """Performs one HTTP request synchronously.

    Implementations raise on transport failure and do their own retrying, if
    any. The returned response body is read and closed by the caller.
    """

    def execute(self, request: RestRequest) -> RestResponse: ...

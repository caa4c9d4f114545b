"""HTTP request executor."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from ..config import DEFAULT_TIMEOUT
from ..core.exceptions import FetchError
from ..core.request import RestRequest, RestResponse

SessionFactory = Callable[[aiohttp.ClientTimeout], aiohttp.ClientSession]


def _default_session(timeout: aiohttp.ClientTimeout) -> aiohttp.ClientSession:
    return aiohttp.ClientSession(timeout=timeout)


def _sends_json(headers: Mapping[str, str]) -> bool:
    content_type = next((v for k, v in headers.items() if k.lower() == "content-type"), None)
    return content_type is None or "json" in content_type.lower()


class HTTPRequestExecutor:
    """Blocking request executor on top of aiohttp.

    Every call opens and closes its own client session, so no connection
    outlives the page it fetched. ``execute`` drives the coroutine with
    ``asyncio.run`` and therefore must not be called from a running event
    loop; async callers use ``fetch`` directly.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session_factory = session_factory or _default_session

    def execute(self, request: RestRequest) -> RestResponse:
        return asyncio.run(self.fetch(request))

    async def fetch(self, request: RestRequest) -> RestResponse:
        """Perform the request and buffer the body.

        Raises:
            FetchError: On connection failure or timeout
        """
        url = request.full_url
        kwargs: dict[str, Any] = {"headers": dict(request.headers) or None}
        if request.body is not None:
            # Non-JSON content types send the body as-is (form fields for a dict)
            kwargs["json" if _sends_json(request.headers) else "data"] = request.body
        try:
            async with self._session_factory(self.timeout) as session:
                async with session.request(request.method.value, url, **kwargs) as response:
                    payload = await response.read()
                    return RestResponse(
                        status=response.status,
                        headers=tuple(response.headers.items()),
                        body=io.BytesIO(payload),
                        url=str(response.url),
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Request to {url} failed: {e}", url=url) from e

import asyncio
from typing import Any

import requests

from welcomesign_sdk.exceptions import TransportError

from .base import BaseTransport
from .base import UnifiedResponse


class RequestsTransport(BaseTransport):
    """
    Sync transport implementation using requests.Session.

    Each call runs in the default executor so the event loop is never
    blocked. For best performance, use httpx or aiohttp.
    """

    def __init__(self, timeout: float = 30.0):
        self._timeout = timeout
        self._session = requests.Session()

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        content: str | bytes | None = None,
        timeout: float | None = None,
    ) -> UnifiedResponse:
        loop = asyncio.get_running_loop()

        def make_request() -> requests.Response:
            return self._session.request(
                method=method,
                url=url,
                headers=headers or {},
                params=params or {},
                data=content,
                timeout=timeout or self._timeout,
            )

        try:
            response = await loop.run_in_executor(None, make_request)
        except requests.RequestException as err:
            raise TransportError(f"{method} {url} failed: {err}") from err
        return UnifiedResponse(response.status_code, response.text, response.headers)

    async def close(self):
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._session.close)

from typing import Any

import httpx

from welcomesign_sdk.exceptions import TransportError

from .base import BaseTransport
from .base import UnifiedResponse


class HttpxTransport(BaseTransport):
    """
    Async transport implementation using httpx.AsyncClient.
    """

    def __init__(self, timeout: float = 30.0):
        self._timeout = timeout
        self._client = httpx.AsyncClient(timeout=self._timeout)

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        content: str | bytes | None = None,
        timeout: float | None = None,
    ) -> UnifiedResponse:
        try:
            response = await self._client.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                content=content,
                timeout=timeout or self._timeout,
            )
        except httpx.HTTPError as err:
            raise TransportError(f"{method} {url} failed: {err}") from err
        return UnifiedResponse(response.status_code, response.text, response.headers)

    async def close(self):
        await self._client.aclose()

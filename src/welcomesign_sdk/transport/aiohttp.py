"""
Aiohttp transport implementation for WelcomeSign SDK.

The session is created lazily on first use so the transport can be built
outside a running event loop.
"""

import asyncio
from typing import Any

import aiohttp

from welcomesign_sdk.exceptions import TransportError

from .base import BaseTransport
from .base import UnifiedResponse


class AiohttpTransport(BaseTransport):
    """
    Async transport implementation using aiohttp.ClientSession.
    """

    def __init__(self, timeout: float = 30.0):
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        content: str | bytes | None = None,
        timeout: float | None = None,
    ) -> UnifiedResponse:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )

        try:
            async with self._session.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                data=content,
                timeout=aiohttp.ClientTimeout(total=timeout or self._timeout),
            ) as response:
                text = await response.text()
                return UnifiedResponse(response.status, text, response.headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise TransportError(f"{method} {url} failed: {err}") from err

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

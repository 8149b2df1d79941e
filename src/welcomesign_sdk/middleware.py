"""
Middleware interface for WelcomeSignClient.

This module defines the `Middleware` protocol used in WelcomeSign SDK.
It allows users to hook into the request/response lifecycle of every HTTP
call made by `WelcomeSignClient`, including the token refresh call and the
retry that follows it.

Any class that implements this interface can be passed to the client as a middleware.

Current implementations:
- Logging (see: LoggingMiddleware) - logs requests/responses with timing
"""

from typing import Any
from typing import Protocol

from welcomesign_sdk.transport.base import UnifiedResponse


class Middleware(Protocol):
    async def on_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        params: dict[str, Any] | None,
        body: Any,
    ) -> None:
        """
        Called before the HTTP request is executed.

        Headers are passed by reference, so a middleware may add to them.
        Raising aborts the call.

        Args:
            method (str): HTTP method, e.g., 'GET', 'POST'
            url (str): Full URL of the request
            headers (dict): Request headers (modifiable)
            params (dict | None): Query parameters
            body (Any): Request body before JSON encoding
        """

    async def on_response(self, response: UnifiedResponse) -> None:
        """
        Called after the HTTP response is received (but before it's parsed).

        Args:
            response (UnifiedResponse): Unified response object from transport layer
        """

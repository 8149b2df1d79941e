"""
Logging middleware for WelcomeSign SDK.

Logs every HTTP request and response with timing. Bearer credentials are
redacted before anything reaches the log.
"""

import logging
import time

from welcomesign_sdk.transport.base import UnifiedResponse

logger = logging.getLogger("welcomesign_sdk.middleware.logging")

REDACTED = "Bearer ***"


def redact_headers(headers: dict) -> dict:
    return {
        key: (REDACTED if key.lower() == "authorization" else value)
        for key, value in headers.items()
    }


class LoggingMiddleware:
    """
    Middleware for logging HTTP requests and responses in WelcomeSignClient.
    Uses standard Python logging.
    """

    def __init__(self, log_bodies: bool = False):
        self._start_time = None
        self.log_bodies = log_bodies

    async def on_request(self, method: str, url: str, headers: dict, params, body):
        self._start_time = time.monotonic()
        message = f"Request: {method} {url} | headers={redact_headers(headers)} | params={params}"
        # bodies can carry passwords and refresh tokens
        if self.log_bodies:
            message += f" | body={body}"
        logger.info(message)

    async def on_response(self, response: UnifiedResponse):
        elapsed = (time.monotonic() - self._start_time) if self._start_time else None
        logger.info(
            f"Response: {response.status_code}"
            + (f" | elapsed={elapsed:.3f}s" if elapsed is not None else "")
        )

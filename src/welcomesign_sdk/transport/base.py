import json as jsonlib
from typing import Any

from welcomesign_sdk.exceptions import ResponseDecodeError


class UnifiedResponse:
    """
    Transport-neutral response.

    Backends read the body fully before building one of these, so the
    object stays valid after the underlying connection is released.
    """

    def __init__(self, status_code: int, text: str = "", headers=None):
        self.status_code = status_code
        self.text = text or ""
        self.headers = dict(headers) if headers else {}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """
        Decode the body as JSON.

        An empty body decodes to None. Anything else that is not JSON raises
        ResponseDecodeError.
        """
        if not self.text.strip():
            return None
        try:
            return jsonlib.loads(self.text)
        except ValueError as err:
            raise ResponseDecodeError(
                f"Invalid JSON in response (status {self.status_code})",
                status_code=self.status_code,
                text=self.text,
            ) from err

    def __repr__(self) -> str:
        return f"UnifiedResponse(status_code={self.status_code})"


class BaseTransport:
    """
    Abstract transport layer interface for WelcomeSign SDK.
    All HTTP client backends should inherit from this class.

    Supported transports:
    - httpx: Native async HTTP client
    - aiohttp: Native async HTTP client
    - requests: Sync HTTP client wrapped in async interface

    Implementations raise TransportError for network failures so callers
    never see backend-specific exceptions.
    """

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        content: str | bytes | None = None,
        timeout: float | None = None,
    ) -> UnifiedResponse:
        raise NotImplementedError(
            "Transport implementations must override this method."
        )

    async def close(self):
        pass

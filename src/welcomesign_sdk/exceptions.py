"""
Custom exceptions for the WelcomeSign SDK.
Provides meaningful error classes for client consumers.
"""

from typing import Any, Optional


class WelcomeSignError(Exception):
    """
    Base exception for every failure raised by the SDK.

    Args:
        message (str): Short explanation of the error.
        status_code (int | None): HTTP status when the failure came from a response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class WelcomeSignAPIError(WelcomeSignError):
    """
    Raised for any non-2xx API response.

    Args:
        message (str): Message from the response body, or a generic fallback.
        status_code (int): HTTP status code of the response.
        data (Any | None): Decoded response body, kept as-is for callers to inspect.
    """

    DEFAULT_MESSAGE = "API request failed"

    def __init__(self, message: str, status_code: int, data: Optional[Any] = None):
        super().__init__(message, status_code=status_code)
        self.data = data

    @classmethod
    def from_response(cls, status_code: int, data: Any) -> "WelcomeSignAPIError":
        message = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("error")
        return cls(message or cls.DEFAULT_MESSAGE, status_code, data)

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    def __repr__(self) -> str:
        return f"WelcomeSignAPIError(status_code={self.status_code}, message={self.message!r})"


class TransportError(WelcomeSignError):
    """Network-level failure; the backend exception is chained as __cause__."""


class ResponseDecodeError(WelcomeSignError):
    """Response body could not be decoded as JSON."""

    def __init__(self, message: str, status_code: int, text: str = ""):
        super().__init__(message, status_code=status_code)
        self.text = text


class AuthError(WelcomeSignError):
    """Token refresh could not be performed."""

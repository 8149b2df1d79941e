"""
Transport layer for WelcomeSign SDK.

This module provides a unified transport interface that abstracts different HTTP clients.
The SDK supports multiple transport backends for flexibility:

- httpx: Modern async HTTP client (default, recommended)
- aiohttp: Async HTTP client with advanced features
- requests: Sync HTTP client wrapped in async interface

All transports implement the same interface, making them interchangeable.
"""

from .base import BaseTransport
from .base import UnifiedResponse
from .httpx import HttpxTransport

TRANSPORTS = ("httpx", "aiohttp", "requests")


def get_transport(name: str, timeout: float = 30.0) -> BaseTransport:
    """
    Get transport instance by name.

    Available transports:
    - httpx: Async HTTP client (default)
    - aiohttp: Async HTTP client
    - requests: Sync HTTP client (wrapped in async interface)
    """
    name = name.lower()
    if name == "httpx":
        return HttpxTransport(timeout)
    elif name == "aiohttp":
        try:
            from .aiohttp import AiohttpTransport
        except ImportError as err:
            raise ImportError(
                "aiohttp transport requires aiohttp package. Install with: pip install 'welcomesign-sdk[aiohttp]'"
            ) from err
        return AiohttpTransport(timeout)
    elif name == "requests":
        try:
            from .requests import RequestsTransport
        except ImportError as err:
            raise ImportError(
                "requests transport requires requests package. Install with: pip install 'welcomesign-sdk[requests]'"
            ) from err
        return RequestsTransport(timeout)
    else:
        raise ValueError(
            f"Unknown transport: {name}. Available: {', '.join(TRANSPORTS)}"
        )


__all__ = ["BaseTransport", "UnifiedResponse", "HttpxTransport", "get_transport"]

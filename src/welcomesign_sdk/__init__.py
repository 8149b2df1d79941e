"""
WelcomeSign SDK - Async-first SDK for the WelcomeSign API.

This SDK provides:
- Async client with bearer-token auth and automatic refresh on 401
- Single in-flight token refresh shared by concurrent requests
- Device-token authentication, pairing and heartbeat for signage devices
- Optional token persistence through pluggable storage
- Synchronous wrapper for sync operations
- Multiple HTTP transport support
- Middleware support
"""

from .auth import AuthManager
from .callbacks import LogRecovery
from .callbacks import RecoveryStrategy
from .callbacks import SessionCallbacks
from .client import WelcomeSignClient
from .client_sync import WelcomeSignClientSync
from .config import WelcomeSignSettings
from .credentials import Credentials
from .exceptions import AuthError
from .exceptions import ResponseDecodeError
from .exceptions import TransportError
from .exceptions import WelcomeSignAPIError
from .exceptions import WelcomeSignError
from .heartbeat import DeviceHeartbeat
from .middleware import Middleware
from .models import TokenBundle
from .persistence import PersistentWelcomeSignClient
from .persistence import create_client
from .token_store import FileTokenStorage
from .token_store import MemoryTokenStorage
from .token_store import TokenStorage

__version__ = "1.0.0"

__all__ = [
    "WelcomeSignClient",
    "WelcomeSignClientSync",
    "PersistentWelcomeSignClient",
    "create_client",
    "WelcomeSignSettings",
    "AuthManager",
    "Credentials",
    "TokenBundle",
    "SessionCallbacks",
    "RecoveryStrategy",
    "LogRecovery",
    "DeviceHeartbeat",
    "WelcomeSignError",
    "WelcomeSignAPIError",
    "TransportError",
    "ResponseDecodeError",
    "AuthError",
    "Middleware",
    "TokenStorage",
    "FileTokenStorage",
    "MemoryTokenStorage",
]

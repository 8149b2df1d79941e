"""
Synchronous wrapper for WelcomeSignClient.

This module provides a synchronous interface on top of the async
WelcomeSignClient. All calls run on one private event loop, so the
underlying connection pool and any pending token refresh stay bound to the
same loop for the lifetime of the wrapper.

Heartbeats need a running loop and are only available on the async client.
"""

import asyncio
from typing import Any, Optional

from .client import WelcomeSignClient
from .config import WelcomeSignSettings


class WelcomeSignClientSync:
    """
    Synchronous wrapper for WelcomeSignClient.

    Example:
        with WelcomeSignClientSync(settings) as client:
            client.login("host@example.com", "secret")
            me = client.request("/users/me")
    """

    def __init__(
        self,
        settings: Optional[WelcomeSignSettings] = None,
        client: Optional[WelcomeSignClient] = None,
        **kwargs: Any,
    ):
        """
        Initialize the synchronous client.

        Args:
            settings: API configuration settings
            client: Existing async client to drive (e.g. a PersistentWelcomeSignClient)
            **kwargs: Passed to WelcomeSignClient when no client is given
        """
        self._loop = asyncio.new_event_loop()
        self._async_client = client or WelcomeSignClient(settings, **kwargs)

    @property
    def async_client(self) -> WelcomeSignClient:
        return self._async_client

    def _run(self, coro):
        return self._loop.run_until_complete(coro)

    def request(self, endpoint: str, **options: Any) -> Any:
        """Synchronous generic request. See WelcomeSignClient.request."""
        return self._run(self._async_client.request(endpoint, **options))

    def login(self, email: str, password: str) -> Any:
        return self._run(self._async_client.login(email, password))

    def register(self, user_data: dict) -> Any:
        return self._run(self._async_client.register(user_data))

    def logout(self) -> Any:
        return self._run(self._async_client.logout())

    def get_sessions(self) -> Any:
        return self._run(self._async_client.get_sessions())

    def revoke_all_sessions(self) -> Any:
        return self._run(self._async_client.revoke_all_sessions())

    def forgot_password(self, email: str) -> Any:
        return self._run(self._async_client.forgot_password(email))

    def reset_password(self, token: str, new_password: str) -> Any:
        return self._run(self._async_client.reset_password(token, new_password))

    def generate_pairing_code(self, device_identifier: str) -> Any:
        return self._run(self._async_client.generate_pairing_code(device_identifier))

    def verify_pairing_code(self, code: str) -> Any:
        return self._run(self._async_client.verify_pairing_code(code))

    def register_device(self, registration: dict) -> Any:
        return self._run(self._async_client.register_device(registration))

    def device_heartbeat(self) -> Any:
        return self._run(self._async_client.device_heartbeat())

    def get_device_info(self) -> Any:
        return self._run(self._async_client.get_device_info())

    def get_device_content(self) -> Any:
        return self._run(self._async_client.get_device_content())

    def set_tokens(self, token: Optional[str], refresh_token: Optional[str]):
        self._async_client.set_tokens(token, refresh_token)

    def set_device_token(self, device_token: Optional[str]):
        self._async_client.set_device_token(device_token)

    def get_tokens(self) -> dict:
        return self._async_client.get_tokens()

    def clear_tokens(self):
        self._async_client.clear_tokens()

    def close(self):
        """
        Synchronous cleanup of client resources.
        """
        if self._loop.is_closed():
            return
        try:
            self._run(self._async_client.aclose())
        finally:
            self._loop.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

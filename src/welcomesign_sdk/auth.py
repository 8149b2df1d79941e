"""
This module provides an asynchronous AuthManager class responsible for:
- owning the client's credential set
- exchanging the refresh token for a new access/refresh pair
- making sure only one refresh is ever in flight per client.

Under rotating refresh tokens, two parallel refreshes would invalidate each
other's new refresh token, so every caller that needs a refresh while one is
pending awaits the same task instead of starting its own.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from welcomesign_sdk.callbacks import SessionCallbacks
from welcomesign_sdk.credentials import Credentials
from welcomesign_sdk.exceptions import AuthError
from welcomesign_sdk.models import TokenBundle

logger = logging.getLogger("welcomesign_sdk.auth")

RefreshCall = Callable[[str], Awaitable[Any]]


def _retrieve_exception(task: asyncio.Future) -> None:
    # Every waiter may have been cancelled; mark the failure as seen anyway.
    if not task.cancelled():
        task.exception()


class AuthManager:
    """
    Coordinates token refresh for one client instance.

    Attributes:
        credentials (Credentials): Tokens held by the client.
        callbacks (SessionCallbacks): Notified after each successful refresh.
    """

    def __init__(
        self,
        refresh_call: RefreshCall,
        credentials: Optional[Credentials] = None,
        callbacks: Optional[SessionCallbacks] = None,
    ):
        """
        Args:
            refresh_call: Coroutine function that posts the refresh token to the
                API and returns the decoded payload.
            credentials: Initial credential set. Defaults to an empty one.
            callbacks: Session callbacks. Defaults to no-op callbacks.
        """
        self._refresh_call = refresh_call
        self.credentials = credentials or Credentials()
        self.callbacks = callbacks or SessionCallbacks()
        self._pending: Optional[asyncio.Future] = None

    @property
    def in_progress(self) -> bool:
        return self._pending is not None

    @property
    def can_refresh(self) -> bool:
        return bool(self.credentials.refresh_token)

    async def refresh(self, failed_token: Optional[str] = None) -> Optional[TokenBundle]:
        """
        Refresh the access token, joining a refresh that is already running.

        Args:
            failed_token: Access token that was rejected. If the held token has
                already moved on and nothing is pending, another caller has
                refreshed in the meantime and no network call is made.

        Returns:
            TokenBundle | None: New credentials, or None when the refresh was skipped.

        Raises:
            AuthError: No refresh token held or malformed refresh response.
            WelcomeSignError: Whatever the refresh request itself raised.
        """
        if self._pending is None:
            if failed_token is not None and failed_token != self.credentials.access_token:
                logger.debug("Access token already rotated, skipping refresh")
                return None
            self._pending = asyncio.ensure_future(self._refresh_once())
            self._pending.add_done_callback(_retrieve_exception)
        else:
            logger.debug("Refresh already in progress, waiting for it")
        # shield: a cancelled waiter must not cancel the shared refresh
        return await asyncio.shield(self._pending)

    async def _refresh_once(self) -> TokenBundle:
        try:
            refresh_token = self.credentials.refresh_token
            if not refresh_token:
                raise AuthError("Refresh token is missing or empty")

            logger.debug("Refreshing access token...")
            data = await self._refresh_call(refresh_token)
            try:
                bundle = TokenBundle.model_validate(data)
            except ValidationError as err:
                logger.error("Refresh response is missing token fields")
                raise AuthError("Malformed refresh response") from err

            self.credentials.replace(bundle.token, bundle.refresh_token)
            logger.debug("New access token acquired (expires at %s)", bundle.expires_at)
            await self.callbacks.token_refreshed(bundle)
            return bundle
        except Exception as err:
            logger.warning("Token refresh failed: %s", err)
            raise
        finally:
            self._pending = None

"""
Notifications from the client to the embedding application.

The client never decides what to do about a lost session: it reports three
events and leaves storage and UI follow-up to the application.

- on_token_refresh(bundle): new access/refresh pair after register, login or refresh
- on_auth_error(error): a user-authenticated 401 that refresh could not resolve
- on_device_session_invalid(): the device pairing is gone; credentials are already cleared

Callbacks may be plain functions or coroutine functions.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from welcomesign_sdk.exceptions import WelcomeSignAPIError
from welcomesign_sdk.models import TokenBundle

logger = logging.getLogger("welcomesign_sdk.callbacks")

Callback = Callable[..., Union[None, Awaitable[None]]]


async def invoke_callback(callback: Callback, *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class RecoveryStrategy(Protocol):
    """What to do when the device session is invalid and no callback is set."""

    async def recover(self) -> None: ...


class LogRecovery:
    """
    Default recovery: log that the device has to be paired again.

    Hosts that can restart their pairing flow should pass their own
    RecoveryStrategy instead.
    """

    async def recover(self) -> None:
        logger.error(
            "Device session invalid and no on_device_session_invalid callback "
            "configured; the device must be paired again"
        )


class SessionCallbacks:
    def __init__(
        self,
        on_token_refresh: Optional[Callback] = None,
        on_auth_error: Optional[Callback] = None,
        on_device_session_invalid: Optional[Callback] = None,
        recovery: Optional[RecoveryStrategy] = None,
    ):
        self.on_token_refresh = on_token_refresh
        self.on_auth_error = on_auth_error
        self.on_device_session_invalid = on_device_session_invalid
        self.recovery = recovery or LogRecovery()

    async def token_refreshed(self, bundle: TokenBundle) -> None:
        if self.on_token_refresh:
            await invoke_callback(self.on_token_refresh, bundle)

    async def auth_failed(self, error: WelcomeSignAPIError) -> None:
        if self.on_auth_error:
            await invoke_callback(self.on_auth_error, error)

    async def device_session_invalidated(self) -> None:
        if self.on_device_session_invalid:
            await invoke_callback(self.on_device_session_invalid)
        else:
            await self.recovery.recover()

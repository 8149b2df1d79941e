"""
Async-first WelcomeSign API SDK Client.

This module provides the main WelcomeSignClient class. Every call goes through
one dispatcher that:

- attaches the right bearer credential (device token or user access token)
- unwraps the optional ``data`` envelope of successful responses
- refreshes the access token once on 401 and retries the call with the new token
- raises WelcomeSignAPIError with status and body for every other failure

Example usage:
    from welcomesign_sdk import WelcomeSignClient, WelcomeSignSettings

    settings = WelcomeSignSettings(base_url="https://api.welcomesign.com")
    async with WelcomeSignClient(settings) as client:
        await client.login("host@example.com", "secret")
        properties = await client.request("/properties")
"""

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

from pydantic import ValidationError
from tenacity import AsyncRetrying
from tenacity import retry_if_exception_type
from tenacity import stop_after_attempt
from tenacity import wait_exponential

from welcomesign_sdk.auth import AuthManager
from welcomesign_sdk.callbacks import Callback
from welcomesign_sdk.callbacks import RecoveryStrategy
from welcomesign_sdk.callbacks import SessionCallbacks
from welcomesign_sdk.config import WelcomeSignSettings
from welcomesign_sdk.credentials import Credentials
from welcomesign_sdk.exceptions import AuthError
from welcomesign_sdk.exceptions import TransportError
from welcomesign_sdk.exceptions import WelcomeSignAPIError
from welcomesign_sdk.heartbeat import DeviceHeartbeat
from welcomesign_sdk.middleware import Middleware
from welcomesign_sdk.models import RequestDescriptor
from welcomesign_sdk.models import TokenBundle
from welcomesign_sdk.transport import get_transport
from welcomesign_sdk.transport.base import UnifiedResponse

logger = logging.getLogger("welcomesign_sdk.client")

REFRESH_ENDPOINT = "/auth/refresh"


def unwrap_payload(payload: Any) -> Any:
    """Return ``payload["data"]`` when the server wrapped the result, else the payload itself."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def encode_body(body: Any) -> str | bytes | None:
    if body is None or isinstance(body, (str, bytes)):
        return body
    return json.dumps(body)


class WelcomeSignClient:
    """
    Async client for the WelcomeSign API.

    Args:
        settings (WelcomeSignSettings | None): SDK configuration. Loaded from the
            environment when omitted.
        token (str | None): Initial access token.
        refresh_token (str | None): Initial refresh token.
        device_token (str | None): Device token for kiosk-style clients.
        on_token_refresh: Called with a TokenBundle after register, login and refresh.
        on_auth_error: Called with the WelcomeSignAPIError of an unrecoverable 401.
        on_device_session_invalid: Called after a device-info 401 cleared the credentials.
        recovery (RecoveryStrategy | None): Used instead of on_device_session_invalid
            when that callback is not set.
        transport_name (str | None): 'httpx', 'aiohttp' or 'requests'.
            Defaults to settings.transport.
        middlewares (list[Middleware] | None): Request/response hooks.
    """

    def __init__(
        self,
        settings: Optional[WelcomeSignSettings] = None,
        token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        device_token: Optional[str] = None,
        on_token_refresh: Optional[Callback] = None,
        on_auth_error: Optional[Callback] = None,
        on_device_session_invalid: Optional[Callback] = None,
        recovery: Optional[RecoveryStrategy] = None,
        transport_name: str | None = None,
        middlewares: list[Middleware] | None = None,
    ):
        self.settings = settings or WelcomeSignSettings()
        self.base_url = self.settings.base_url

        self.callbacks = SessionCallbacks(
            on_token_refresh=on_token_refresh,
            on_auth_error=on_auth_error,
            on_device_session_invalid=on_device_session_invalid,
            recovery=recovery,
        )
        self.auth = AuthManager(
            refresh_call=self._call_refresh_endpoint,
            credentials=Credentials(token, refresh_token, device_token),
            callbacks=self.callbacks,
        )

        transport = transport_name or self.settings.transport
        self.transport = get_transport(transport, timeout=self.settings.timeout)
        self.middlewares = middlewares or []
        self._retry_attempts = self.settings.retry_attempts
        self._retry_wait = wait_exponential(multiplier=0.5, min=1, max=5)
        self._heartbeats: set[DeviceHeartbeat] = set()

    @property
    def credentials(self) -> Credentials:
        return self.auth.credentials

    # ------------------------------------------------------------------
    # Request dispatch
    # ------------------------------------------------------------------

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        auth: bool = True,
        use_device_token: bool = False,
        skip_token_refresh: bool = False,
    ) -> Any:
        """
        Call any API endpoint through the authenticated dispatcher.

        Args:
            endpoint (str): Path relative to the base URL, e.g. '/properties/p1'.
            method (str): HTTP method.
            body (Any): dict/list bodies are JSON-encoded, str/bytes sent verbatim.
            params (dict | None): Query parameters.
            headers (dict | None): Extra headers, merged over the defaults.
            auth (bool): Attach the user access token when held.
            use_device_token (bool): Authenticate with the device token when held.
            skip_token_refresh (bool): Never refresh on 401 for this call.

        Returns:
            Any: The decoded body, unwrapped from its ``data`` key when present.

        Raises:
            WelcomeSignAPIError: On any non-2xx response not resolved by refresh.
            TransportError: On network failure.
            ResponseDecodeError: On a non-JSON response body.
        """
        descriptor = RequestDescriptor(
            endpoint=endpoint,
            method=method.upper(),
            body=body,
            params=params,
            headers=headers or {},
            auth=auth,
            use_device_token=use_device_token,
            skip_token_refresh=skip_token_refresh,
        )
        return await self._dispatch(descriptor)

    async def _dispatch(self, descriptor: RequestDescriptor) -> Any:
        credentials = self.auth.credentials
        via_device = credentials.uses_device_token(descriptor.use_device_token)
        bearer = credentials.bearer_for(descriptor.use_device_token, descriptor.auth)

        url = f"{self.base_url}{descriptor.endpoint}"
        headers = {"Content-Type": "application/json", **descriptor.headers}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        response = await self._send(descriptor, url, headers)
        payload = response.json()

        if response.ok:
            return unwrap_payload(payload)

        if (
            response.status_code == 401
            and not descriptor.skip_token_refresh
            and not via_device
            and self.auth.can_refresh
        ):
            logger.debug("401 on %s %s, refreshing token", descriptor.method, descriptor.endpoint)
            await self.auth.refresh(failed_token=bearer)
            return await self._dispatch(descriptor.for_retry())

        error = WelcomeSignAPIError.from_response(response.status_code, payload)
        if error.is_unauthorized:
            await self.callbacks.auth_failed(error)
        raise error

    async def _send(
        self, descriptor: RequestDescriptor, url: str, headers: dict[str, str]
    ) -> UnifiedResponse:
        for mw in self.middlewares:
            await mw.on_request(
                method=descriptor.method,
                url=url,
                headers=headers,
                params=descriptor.params,
                body=descriptor.body,
            )

        content = encode_body(descriptor.body)

        # Only network failures are retried, never HTTP statuses
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=self._retry_wait,
            retry=retry_if_exception_type(TransportError),
            reraise=True,
        ):
            with attempt:
                response = await self.transport.request(
                    method=descriptor.method,
                    url=url,
                    headers=headers,
                    params=descriptor.params,
                    content=content,
                )

        for mw in self.middlewares:
            await mw.on_response(response)
        return response

    async def _call_refresh_endpoint(self, refresh_token: str) -> Any:
        return await self.request(
            REFRESH_ENDPOINT,
            method="POST",
            body={"refresh_token": refresh_token},
            auth=False,
            skip_token_refresh=True,
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def _accept_tokens(self, data: Any) -> None:
        try:
            bundle = TokenBundle.model_validate(data)
        except ValidationError as err:
            raise AuthError("Response did not include token and refresh_token") from err
        self.auth.credentials.replace(bundle.token, bundle.refresh_token)
        await self.callbacks.token_refreshed(bundle)

    async def register(self, user_data: dict) -> Any:
        """
        Register a new user account and keep the issued tokens.

        Args:
            user_data (dict): email, password and optional firstname, lastname, phone.

        Returns:
            Any: User data with tokens.
        """
        data = await self.request("/auth/register", method="POST", body=user_data, auth=False)
        await self._accept_tokens(data)
        return data

    async def login(self, email: str, password: str) -> Any:
        """Log in with email and password and keep the issued tokens."""
        data = await self.request(
            "/auth/login",
            method="POST",
            body={"email": email, "password": password},
            auth=False,
        )
        await self._accept_tokens(data)
        return data

    async def logout(self) -> Any:
        """Revoke the current session and drop the user tokens. The device token is kept."""
        result = await self.request("/auth/logout", method="POST")
        self.set_tokens(None, None)
        return result

    async def get_sessions(self) -> Any:
        return await self.request("/auth/sessions")

    async def revoke_all_sessions(self) -> Any:
        """Revoke all sessions except the current one."""
        return await self.request("/auth/sessions", method="DELETE")

    async def forgot_password(self, email: str) -> Any:
        return await self.request(
            "/auth/forgot-password", method="POST", body={"email": email}, auth=False
        )

    async def reset_password(self, token: str, new_password: str) -> Any:
        return await self.request(
            "/auth/reset-password",
            method="POST",
            body={"token": token, "password": new_password},
            auth=False,
        )

    def set_tokens(self, token: Optional[str], refresh_token: Optional[str]):
        self.auth.credentials.replace(token, refresh_token)

    def get_tokens(self) -> dict:
        return self.auth.credentials.snapshot()

    def clear_tokens(self):
        self.auth.credentials.clear()
        logger.debug("Cleared all tokens")

    # ------------------------------------------------------------------
    # Device pairing and device API
    # ------------------------------------------------------------------

    async def generate_pairing_code(self, device_identifier: str) -> Any:
        """Generate a pairing code for a device (no authentication required)."""
        return await self.request(
            "/pairing/code", params={"device_identifier": device_identifier}, auth=False
        )

    async def verify_pairing_code(self, code: str) -> Any:
        return await self.request(f"/pairing/verify/{quote(code, safe='')}", auth=False)

    async def register_device(self, registration: dict) -> Any:
        """
        Register a device using a pairing code.

        Args:
            registration (dict): code, property_id, platform and optional name.

        Returns:
            Any: Device data. Its device_token, when present, is kept for
            device-authenticated calls.
        """
        data = await self.request("/devices/register", method="POST", body=registration)
        if isinstance(data, dict) and data.get("device_token"):
            self.set_device_token(data["device_token"])
        return data

    def set_device_token(self, device_token: Optional[str]):
        self.auth.credentials.set_device_token(device_token)

    async def device_heartbeat(self) -> Any:
        return await self.request("/device/heartbeat", method="POST", use_device_token=True)

    async def get_device_info(self) -> Any:
        """
        Get the device's own information and configuration.

        A 401 here means the pairing itself is gone: all credentials are
        cleared, then the device-session-invalid callback (or the recovery
        strategy) runs, and the error is re-raised.
        """
        try:
            return await self.request("/device/info", use_device_token=True)
        except WelcomeSignAPIError as error:
            if error.is_unauthorized:
                logger.error("Device session invalid on /device/info, triggering re-pairing")
                self.clear_tokens()
                await self.callbacks.device_session_invalidated()
            raise

    async def get_device_content(self) -> Any:
        """Content for display, grouped by type (message, background, house_rules...)."""
        return await self.request("/device/content", use_device_token=True)

    def start_device_heartbeat(self, interval: Optional[float] = None) -> DeviceHeartbeat:
        """
        Start sending heartbeats every ``interval`` seconds (settings.heartbeat_interval by default).

        Must be called from a running event loop.

        Returns:
            DeviceHeartbeat: Handle to pass to stop_device_heartbeat.
        """
        heartbeat = DeviceHeartbeat(
            self, interval if interval is not None else self.settings.heartbeat_interval
        )
        heartbeat.start()
        self._heartbeats.add(heartbeat)
        return heartbeat

    def stop_device_heartbeat(self, heartbeat: DeviceHeartbeat):
        heartbeat.stop()
        self._heartbeats.discard(heartbeat)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self):
        """Stop running heartbeats and close the transport."""
        for heartbeat in list(self._heartbeats):
            self.stop_device_heartbeat(heartbeat)
        await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

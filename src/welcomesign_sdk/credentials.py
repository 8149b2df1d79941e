"""
In-memory credential set owned by a single client instance.
"""

from typing import Optional


class Credentials:
    """
    Holds the access, refresh and device tokens.

    The access/refresh pair is only ever replaced together. The device token
    is independent. Attributes are read-only; mutation goes through
    ``replace``, ``set_device_token`` and ``clear``.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        device_token: Optional[str] = None,
    ):
        self._access_token = access_token or None
        self._refresh_token = refresh_token or None
        self._device_token = device_token or None

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    @property
    def device_token(self) -> Optional[str]:
        return self._device_token

    def replace(self, access_token: Optional[str], refresh_token: Optional[str]):
        self._access_token = access_token or None
        self._refresh_token = refresh_token or None

    def set_device_token(self, device_token: Optional[str]):
        self._device_token = device_token or None

    def clear(self):
        self._access_token = None
        self._refresh_token = None
        self._device_token = None

    def uses_device_token(self, use_device_token: bool) -> bool:
        """True when a request asking for device auth will actually carry the device token."""
        return use_device_token and self._device_token is not None

    def bearer_for(self, use_device_token: bool, auth: bool) -> Optional[str]:
        """
        Pick the credential to send for a request.

        Device token wins when requested and held; otherwise the access token
        is sent unless the request opted out of auth.
        """
        if self.uses_device_token(use_device_token):
            return self._device_token
        if auth and self._access_token:
            return self._access_token
        return None

    def snapshot(self) -> dict:
        return {
            "token": self._access_token,
            "refresh_token": self._refresh_token,
            "device_token": self._device_token,
        }

    def __repr__(self) -> str:
        held = [name for name, value in self.snapshot().items() if value]
        return f"Credentials(held={held})"

"""
Client variant that keeps its credentials in a TokenStorage.

Tokens are loaded once at construction and written back whenever they
change: login, register, every refresh, set_tokens, logout and
set_device_token (which register_device goes through). clear_tokens, and
therefore an invalid device session, removes the stored entry.

Storage failures are logged and never interrupt the API call that caused
the write.
"""

import json
import logging
from typing import Any, Optional

from welcomesign_sdk.callbacks import Callback
from welcomesign_sdk.callbacks import invoke_callback
from welcomesign_sdk.client import WelcomeSignClient
from welcomesign_sdk.config import WelcomeSignSettings
from welcomesign_sdk.models import TokenBundle
from welcomesign_sdk.token_store import FileTokenStorage
from welcomesign_sdk.token_store import TokenStorage

logger = logging.getLogger("welcomesign_sdk.persistence")


def load_saved_tokens(storage: TokenStorage, storage_key: str) -> dict:
    try:
        raw = storage.get(storage_key)
        if not raw:
            return {}
        saved = json.loads(raw)
    except Exception as e:
        logger.warning(f"Failed to load saved tokens: {e}")
        return {}
    return saved if isinstance(saved, dict) else {}


class PersistentWelcomeSignClient(WelcomeSignClient):
    """
    WelcomeSignClient that saves and restores its tokens.

    Args:
        settings (WelcomeSignSettings | None): SDK configuration.
        storage (TokenStorage | None): Defaults to a FileTokenStorage at
            settings.token_cache_path.
        storage_key (str | None): Defaults to settings.storage_key.
        on_token_refresh: Still called after the tokens are saved.
        **kwargs: Passed to WelcomeSignClient. Explicit tokens are used only
            when nothing is stored.
    """

    def __init__(
        self,
        settings: Optional[WelcomeSignSettings] = None,
        storage: Optional[TokenStorage] = None,
        storage_key: Optional[str] = None,
        on_token_refresh: Optional[Callback] = None,
        **kwargs: Any,
    ):
        settings = settings or WelcomeSignSettings()
        self.storage = storage if storage is not None else FileTokenStorage(settings.token_cache_path)
        self.storage_key = storage_key or settings.storage_key
        self._user_on_token_refresh = on_token_refresh

        saved = load_saved_tokens(self.storage, self.storage_key)
        for field in ("token", "refresh_token", "device_token"):
            if saved.get(field):
                kwargs[field] = saved[field]
        if saved:
            logger.debug(f"Loaded saved tokens from storage key {self.storage_key}")

        super().__init__(settings, on_token_refresh=self._on_token_refresh, **kwargs)

    async def _on_token_refresh(self, bundle: TokenBundle):
        self.save_tokens(expires_at=bundle.expires_at)
        if self._user_on_token_refresh:
            await invoke_callback(self._user_on_token_refresh, bundle)

    def save_tokens(self, expires_at: Any = None):
        data = self.get_tokens()
        if expires_at is not None:
            data["expires_at"] = expires_at
        try:
            self.storage.set(self.storage_key, json.dumps(data))
        except Exception as e:
            logger.warning(f"Failed to save tokens: {e}")

    def set_tokens(self, token: Optional[str], refresh_token: Optional[str]):
        super().set_tokens(token, refresh_token)
        self.save_tokens()

    def set_device_token(self, device_token: Optional[str]):
        super().set_device_token(device_token)
        self.save_tokens()

    def clear_tokens(self):
        super().clear_tokens()
        try:
            self.storage.remove(self.storage_key)
            logger.debug(f"Cleared tokens from storage: {self.storage_key}")
        except Exception as e:
            logger.warning(f"Failed to clear tokens from storage: {e}")


def create_client(
    settings: Optional[WelcomeSignSettings] = None,
    storage: Optional[TokenStorage] = None,
    storage_key: Optional[str] = None,
    **kwargs: Any,
) -> PersistentWelcomeSignClient:
    """
    Build a client whose tokens survive restarts.

    Example:
        client = create_client(WelcomeSignSettings(base_url="https://api.welcomesign.com"))
        await client.login("host@example.com", "secret")  # saved to ~/.welcomesign/tokens.json
    """
    return PersistentWelcomeSignClient(
        settings, storage=storage, storage_key=storage_key, **kwargs
    )

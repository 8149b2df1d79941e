"""
Configuration management for WelcomeSign SDK.

This module provides WelcomeSignSettings class that handles all SDK configuration
with support for environment variables, .env files, and sensible defaults.

Environment variables are automatically loaded with WELCOMESIGN_ prefix.
Example: WELCOMESIGN_BASE_URL=https://api.welcomesign.com
"""

from pathlib import Path

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class WelcomeSignSettings(BaseSettings):
    """
    Configuration settings for WelcomeSign SDK with environment variable support.

    This class automatically loads configuration from:
    - Environment variables (with WELCOMESIGN_ prefix)
    - .env files
    - Default values for optional settings

    Example:
        # From environment
        export WELCOMESIGN_BASE_URL=https://api.welcomesign.com
        export WELCOMESIGN_TIMEOUT=60.0

        # In code
        settings = WelcomeSignSettings()
    """

    base_url: str = Field(..., description="API base URL, e.g. https://api.welcomesign.com")
    timeout: float = 30.0
    transport: str = "httpx"  # default, can be 'aiohttp' or 'requests'
    retry_attempts: int = Field(default=1, ge=1)
    heartbeat_interval: float = Field(default=60.0, gt=0)
    storage_key: str = "welcomesign_tokens"
    token_cache_path: Path = Field(
        default=Path.home() / ".welcomesign" / "tokens.json"
    )

    model_config = SettingsConfigDict(
        env_prefix="WELCOMESIGN_", env_file=".env", extra="ignore"
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url is required")
        return value.rstrip("/")

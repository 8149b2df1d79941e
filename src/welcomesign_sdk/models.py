"""
Value objects passed around the request engine.
"""

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class RequestDescriptor(BaseModel):
    """
    Everything needed to issue one API call.

    Built per call and consumed once; the retry after a refresh is a copy
    with ``skip_token_refresh`` set.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] | None = None
    body: Any = None
    auth: bool = True
    use_device_token: bool = False
    skip_token_refresh: bool = False

    def for_retry(self) -> "RequestDescriptor":
        return self.model_copy(update={"skip_token_refresh": True})


class TokenBundle(BaseModel):
    """Credentials issued by login, register or refresh."""

    model_config = ConfigDict(extra="ignore")

    token: str
    refresh_token: str
    expires_at: Any = None

"""
Domain models for persisted OAuth and game-session credentials.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def coerce_epoch(value: Any) -> int:
    """Return ``value`` as non-negative epoch seconds, or ``0`` when malformed."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if value >= 0 else 0
    if isinstance(value, float) and value.is_integer():
        return int(value) if value >= 0 else 0
    if isinstance(value, str) and re.fullmatch(r"[0-9]+", value.strip()):
        return int(value.strip())
    return 0


class _CredentialDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON nulls fall back to field defaults instead of failing validation.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class DownloaderCredential(_CredentialDocument):
    """Long-lived download credential shared with the downloader binary."""

    access_token: str = Field("", repr=False)
    refresh_token: str = Field("", repr=False)
    expires_at: int = 0
    branch: str = "release"

    @field_validator("expires_at", mode="before")
    @classmethod
    def _coerce_expiry(cls, value: Any) -> int:
        return coerce_epoch(value)

    @field_validator("branch", mode="before")
    @classmethod
    def _default_branch(cls, value: Any) -> Any:
        return value or "release"

    def needs_refresh(self, *, now: float, buffer_seconds: int = 300) -> bool:
        return self.expires_at <= now + buffer_seconds


class ServerCredential(_CredentialDocument):
    """Authenticated identity the game server presents to the game network."""

    access_token: str = Field("", repr=False)
    refresh_token: str = Field("", repr=False)
    session_token: str = Field("", repr=False)
    identity_token: str = Field("", repr=False)
    profile_uuid: str = ""
    profile_username: str = ""
    session_expires_at: int = Field(0, description="Epoch seconds.")

    @field_validator("session_expires_at", mode="before")
    @classmethod
    def _coerce_expiry(cls, value: Any) -> int:
        return coerce_epoch(value)

    def session_valid(self, *, now: float, buffer_seconds: int = 300) -> bool:
        """A session is usable only if it outlives the refresh buffer."""
        return self.session_expires_at > now + buffer_seconds


__all__ = ["DownloaderCredential", "ServerCredential", "coerce_epoch"]

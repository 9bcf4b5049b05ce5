"""Result of the startup authentication decision."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from hytale_entrypoint.models.credentials import ServerCredential

SESSION_TOKEN_ENV = "HYTALE_SERVER_SESSION_TOKEN"
IDENTITY_TOKEN_ENV = "HYTALE_SERVER_IDENTITY_TOKEN"


class AuthSource(str, Enum):
    DISABLED = "disabled"
    ENVIRONMENT = "environment"
    CACHED = "cached"
    REFRESHED = "refreshed"
    DEVICE_FLOW = "device_flow"
    UNAUTHENTICATED = "unauthenticated"


class AuthState(BaseModel):
    """Tokens handed to the game process, and where they came from."""

    source: AuthSource
    session_token: Optional[str] = Field(None, repr=False)
    identity_token: Optional[str] = Field(None, repr=False)
    profile_uuid: Optional[str] = None
    profile_username: Optional[str] = None
    session_expires_at: Optional[int] = None

    @classmethod
    def from_credential(
        cls, credential: ServerCredential, *, source: AuthSource
    ) -> "AuthState":
        return cls(
            source=source,
            session_token=credential.session_token or None,
            identity_token=credential.identity_token or None,
            profile_uuid=credential.profile_uuid or None,
            profile_username=credential.profile_username or None,
            session_expires_at=credential.session_expires_at or None,
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.session_token and self.identity_token)

    def as_environment(self) -> Dict[str, str]:
        """Environment entries for the launched server; empty tokens are omitted."""
        env: Dict[str, str] = {}
        if self.session_token:
            env[SESSION_TOKEN_ENV] = self.session_token
        if self.identity_token:
            env[IDENTITY_TOKEN_ENV] = self.identity_token
        return env


__all__ = [
    "AuthSource",
    "AuthState",
    "IDENTITY_TOKEN_ENV",
    "SESSION_TOKEN_ENV",
]

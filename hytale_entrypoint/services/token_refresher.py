"""
Refresh-token grants for both credential documents.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

import httpx

from hytale_entrypoint.clients.oauth import HytaleOAuthClient
from hytale_entrypoint.core.errors import RefreshFailed
from hytale_entrypoint.utils.http import provider_message

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600


@dataclass(slots=True)
class RefreshedTokens:
    """Tokens returned by a successful refresh grant."""

    access_token: str
    refresh_token: str
    expires_at: int


def _expires_in(payload: dict) -> int:
    value = payload.get("expires_in")
    if value is None or isinstance(value, bool):
        return DEFAULT_EXPIRES_IN
    try:
        seconds = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_EXPIRES_IN
    return max(seconds, 0)


class TokenRefresher:
    """Exchange a stored refresh token for a fresh access token."""

    def __init__(
        self,
        oauth_client: HytaleOAuthClient,
        *,
        client_id: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._oauth = oauth_client
        self._client_id = client_id
        self._clock = clock

    async def refresh(self, refresh_token: str) -> RefreshedTokens:
        requested_at = int(self._clock())
        try:
            payload = await self._oauth.refresh_token(
                refresh_token, client_id=self._client_id
            )
        except httpx.HTTPError as exc:
            raise RefreshFailed(f"token endpoint unreachable ({type(exc).__name__})") from exc

        access_token = payload.get("access_token")
        if not access_token:
            raise RefreshFailed(provider_message(payload))

        # Providers that do not rotate refresh tokens omit the field.
        return RefreshedTokens(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or refresh_token,
            expires_at=requested_at + _expires_in(payload),
        )


__all__ = ["RefreshedTokens", "TokenRefresher"]

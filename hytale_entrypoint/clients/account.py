"""Account-data and game-session endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from hytale_entrypoint.core.config import OAuthSettings
from hytale_entrypoint.utils.http import RetryConfig, json_or_empty, request_with_retry


class HytaleAccountClient:
    """Look up game profiles and open game sessions with a bearer token."""

    def __init__(
        self,
        oauth_settings: OAuthSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = oauth_settings
        self._transport = transport
        self._retry = RetryConfig(
            attempts=oauth_settings.http_retry_attempts,
            backoff_seconds=oauth_settings.http_retry_backoff_seconds,
        )

    def _client(self, access_token: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds,
            transport=self._transport,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def get_profiles(self, access_token: str) -> Dict[str, Any]:
        async with self._client(access_token) as client:
            response = await request_with_retry(
                client.get, self._settings.profiles_url, retry_config=self._retry
            )
        return json_or_empty(response)

    async def create_game_session(
        self, access_token: str, profile_uuid: str
    ) -> Dict[str, Any]:
        async with self._client(access_token) as client:
            response = await request_with_retry(
                client.post,
                self._settings.session_url,
                json={"uuid": profile_uuid},
                retry_config=self._retry,
            )
        return json_or_empty(response)


__all__ = ["HytaleAccountClient"]

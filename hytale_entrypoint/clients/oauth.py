"""
Hytale OAuth utilities.

These helpers wrap the token and device-authorization endpoints. They
return the decoded provider payload as-is: pending, slow-down and rejected
grants arrive as 4xx bodies and the caller decides what each one means.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from hytale_entrypoint.core.config import OAuthSettings
from hytale_entrypoint.utils.http import RetryConfig, json_or_empty, request_with_retry

DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"


class HytaleOAuthClient:
    """Issue refresh-token and device-code grants against the OAuth provider."""

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

    async def _post_form(self, url: str, data: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds, transport=self._transport
        ) as client:
            response = await request_with_retry(
                client.post, url, data=data, retry_config=self._retry
            )
        return json_or_empty(response)

    async def refresh_token(self, refresh_token: str, *, client_id: str) -> Dict[str, Any]:
        """Exchange a refresh token for a new access token."""
        return await self._post_form(
            self._settings.token_url,
            {
                "grant_type": "refresh_token",
                "client_id": client_id,
                "refresh_token": refresh_token,
            },
        )

    async def request_device_code(self) -> Dict[str, Any]:
        """Start a device authorization for the server client."""
        return await self._post_form(
            self._settings.device_auth_url,
            {
                "client_id": self._settings.server_client_id,
                "scope": self._settings.scope,
            },
        )

    async def poll_device_token(self, device_code: str) -> Dict[str, Any]:
        """Ask whether the user has approved ``device_code`` yet."""
        return await self._post_form(
            self._settings.token_url,
            {
                "grant_type": DEVICE_CODE_GRANT,
                "client_id": self._settings.server_client_id,
                "device_code": device_code,
            },
        )


__all__ = ["DEVICE_CODE_GRANT", "HytaleOAuthClient"]

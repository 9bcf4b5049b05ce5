"""
Startup decision for the server's game-session credentials.

Player authentication problems never stop the server from starting: the
operator can still authenticate later from the server console, so every
failure path here ends in a warning and an unauthenticated ``AuthState``.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from hytale_entrypoint.clients.credential_store import CredentialStore
from hytale_entrypoint.core.config import AppSettings, AuthMode
from hytale_entrypoint.core.errors import AuthError
from hytale_entrypoint.models.auth import AuthSource, AuthState
from hytale_entrypoint.models.credentials import ServerCredential
from hytale_entrypoint.services.device_auth import DeviceAuthorizer
from hytale_entrypoint.services.session_exchange import SessionExchanger
from hytale_entrypoint.services.token_refresher import TokenRefresher

logger = logging.getLogger(__name__)

CONSOLE_LOGIN_HINT = "Use '/auth login device' in server console to authenticate"


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except ValueError:
        return False


class AuthOrchestrator:
    """Pick the cheapest way to obtain valid session tokens for this start."""

    def __init__(
        self,
        settings: AppSettings,
        store: CredentialStore,
        refresher: TokenRefresher,
        exchanger: SessionExchanger,
        device_authorizer: DeviceAuthorizer,
        *,
        notifications_enabled: bool,
        is_interactive: Callable[[], bool] = _stdin_is_tty,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._store = store
        self._refresher = refresher
        self._exchanger = exchanger
        self._device = device_authorizer
        self._notifications_enabled = notifications_enabled
        self._is_interactive = is_interactive
        self._clock = clock

    @property
    def _credentials_file(self) -> Path:
        return self._settings.paths.server_credentials_file

    async def run(self) -> AuthState:
        auth_mode = self._settings.server.auth_mode
        if auth_mode != AuthMode.AUTHENTICATED:
            logger.info(
                "Auth mode is '%s', skipping server authentication", auth_mode.value
            )
            return AuthState(source=AuthSource.DISABLED)

        if self._settings.session_token and self._settings.identity_token:
            logger.info("Using server tokens from environment")
            return AuthState(
                source=AuthSource.ENVIRONMENT,
                session_token=self._settings.session_token,
                identity_token=self._settings.identity_token,
            )

        state = await self._from_stored_credentials()
        if state is not None:
            return state

        logger.info("No valid server credentials found")
        if self._is_interactive() or self._notifications_enabled:
            return await self._from_device_flow()

        logger.warning("Non-interactive mode and no Discord webhook configured")
        logger.warning("Run 'docker compose up' (without -d) first to authenticate")
        logger.warning("Or set DISCORD_WEBHOOK_URL to receive auth links via Discord")
        logger.warning("Or mount existing credentials at %s", self._credentials_file)
        return AuthState(source=AuthSource.UNAUTHENTICATED)

    async def _from_stored_credentials(self) -> Optional[AuthState]:
        credential = self._store.load(self._credentials_file, ServerCredential)
        if credential is None:
            return None

        buffer_seconds = self._settings.oauth.refresh_buffer_seconds
        if credential.session_valid(now=self._clock(), buffer_seconds=buffer_seconds):
            logger.info("Server credentials valid")
            return self._loaded(credential, AuthSource.CACHED)

        if not credential.refresh_token:
            return None

        logger.info("Refreshing server OAuth token...")
        try:
            tokens = await self._refresher.refresh(credential.refresh_token)
            refreshed = await self._exchanger.exchange(
                tokens.access_token, tokens.refresh_token
            )
        except AuthError as exc:
            logger.warning("Failed to refresh server session: %s", exc)
            return None
        return self._loaded(refreshed, AuthSource.REFRESHED)

    async def _from_device_flow(self) -> AuthState:
        try:
            credential = await self._device.authorize()
        except AuthError as exc:
            logger.warning("Server authentication failed: %s", exc)
            logger.warning("Server authentication failed - server will start without tokens")
            logger.warning(CONSOLE_LOGIN_HINT)
            return AuthState(source=AuthSource.UNAUTHENTICATED)
        return self._loaded(credential, AuthSource.DEVICE_FLOW)

    @staticmethod
    def _loaded(credential: ServerCredential, source: AuthSource) -> AuthState:
        state = AuthState.from_credential(credential, source=source)
        if state.session_token:
            logger.info("Session token loaded")
        if state.identity_token:
            logger.info("Identity token loaded")
        return state


__all__ = ["AuthOrchestrator", "CONSOLE_LOGIN_HINT"]

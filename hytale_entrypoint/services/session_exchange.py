"""
Turn an OAuth access token into a game session for the account's profile.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from hytale_entrypoint.clients.account import HytaleAccountClient
from hytale_entrypoint.clients.credential_store import CredentialStore
from hytale_entrypoint.core.errors import (
    CredentialPersistenceError,
    NoProfile,
    SessionCreateFailed,
)
from hytale_entrypoint.models.credentials import ServerCredential
from hytale_entrypoint.utils.http import provider_message
from hytale_entrypoint.utils.timefmt import format_epoch

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECONDS = 3600


def parse_expiry(value: Any) -> Optional[int]:
    """Parse an ISO-8601 timestamp or epoch seconds into epoch seconds."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value) if value >= 0 else None
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.isdigit():
        return int(text)
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


class SessionExchanger:
    """Fetch the account profile, open a game session and persist the result."""

    def __init__(
        self,
        account_client: HytaleAccountClient,
        store: CredentialStore,
        *,
        credentials_file: Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._accounts = account_client
        self._store = store
        self._path = Path(credentials_file)
        self._clock = clock

    async def exchange(self, access_token: str, refresh_token: str) -> ServerCredential:
        logger.info("Fetching game profiles...")
        try:
            profiles_payload = await self._accounts.get_profiles(access_token)
        except httpx.HTTPError as exc:
            raise NoProfile(f"profile endpoint unreachable ({type(exc).__name__})") from exc

        profiles = profiles_payload.get("profiles") or []
        profile = profiles[0] if isinstance(profiles, list) and profiles else None
        profile_uuid = profile.get("uuid") if isinstance(profile, dict) else None
        if not profile_uuid:
            raise NoProfile(provider_message(profiles_payload, "error", "message"))
        profile_username = str(profile.get("username") or "")
        logger.info("Using profile: %s (%s)", profile_username, profile_uuid)

        logger.info("Creating game session...")
        try:
            session_payload = await self._accounts.create_game_session(
                access_token, str(profile_uuid)
            )
        except httpx.HTTPError as exc:
            raise SessionCreateFailed(
                f"session endpoint unreachable ({type(exc).__name__})"
            ) from exc

        session_token = session_payload.get("sessionToken")
        identity_token = session_payload.get("identityToken")
        if not session_token or not identity_token:
            raise SessionCreateFailed(
                provider_message(session_payload, "error", "message")
            )

        expires_at = parse_expiry(session_payload.get("expiresAt"))
        if expires_at is None:
            expires_at = int(self._clock()) + DEFAULT_SESSION_SECONDS

        credential = ServerCredential(
            access_token=access_token,
            refresh_token=refresh_token,
            session_token=session_token,
            identity_token=identity_token,
            profile_uuid=str(profile_uuid),
            profile_username=profile_username,
            session_expires_at=expires_at,
        )
        try:
            self._store.save(self._path, credential)
        except CredentialPersistenceError as exc:
            logger.warning(
                "Game session could not be saved; it is used for this run only "
                "and authentication will be needed again after a restart: %s",
                exc,
            )
        logger.info("Game session created (expires at: %s)", format_epoch(expires_at))
        return credential


__all__ = ["SessionExchanger", "parse_expiry"]

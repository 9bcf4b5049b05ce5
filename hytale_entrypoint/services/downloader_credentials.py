"""
Keep the downloader's credential file current.

The downloader binary reads this file itself; without a usable access token
no server files can be fetched, so every failure here stops startup.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from hytale_entrypoint.clients.credential_store import CredentialStore, restrict_permissions
from hytale_entrypoint.core.errors import (
    CredentialPersistenceError,
    CredentialUnavailable,
    RefreshFailed,
)
from hytale_entrypoint.models.credentials import DownloaderCredential
from hytale_entrypoint.services.token_refresher import TokenRefresher
from hytale_entrypoint.utils.timefmt import format_epoch

logger = logging.getLogger(__name__)


class DownloaderCredentialService:
    """Refresh the downloader access token when it is close to expiry."""

    def __init__(
        self,
        store: CredentialStore,
        refresher: TokenRefresher,
        *,
        credentials_file: Path,
        refresh_buffer_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._refresher = refresher
        self._path = Path(credentials_file)
        self._buffer = refresh_buffer_seconds
        self._clock = clock

    def validate(self) -> DownloaderCredential:
        """Ensure the mounted credential file exists and parses."""
        if not self._path.is_file():
            raise CredentialUnavailable(
                f"Credentials file not found at {self._path}; mount "
                f".hytale-downloader-credentials.json at that path"
            )
        credential = self._store.load(self._path, DownloaderCredential)
        if credential is None:
            raise CredentialUnavailable(
                f"Credentials file is not valid JSON: {self._path}"
            )
        restrict_permissions(self._path)
        return credential

    async def ensure_fresh(self) -> DownloaderCredential:
        credential = self.validate()
        now = self._clock()
        if not credential.needs_refresh(now=now, buffer_seconds=self._buffer):
            logger.info(
                "Access token still valid (expires at: %s)",
                format_epoch(credential.expires_at),
            )
            return credential

        logger.info("Access token expired or expiring soon, refreshing...")
        if not credential.refresh_token:
            raise RefreshFailed(
                f"No refresh token available in {self._path}; re-create it by "
                "running hytale-downloader interactively"
            )

        try:
            tokens = await self._refresher.refresh(credential.refresh_token)
        except RefreshFailed as exc:
            raise RefreshFailed(
                f"Failed to refresh downloader token ({exc.provider_message}); "
                f"re-create {self._path} by running hytale-downloader interactively"
            ) from exc
        refreshed = DownloaderCredential(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
            branch=credential.branch,
        )
        try:
            self._store.save(self._path, refreshed)
        except CredentialPersistenceError as exc:
            logger.warning(
                "Refreshed downloader token could not be saved; it is used for "
                "this run only: %s",
                exc,
            )
        logger.info(
            "Token refreshed successfully (expires at: %s)",
            format_epoch(refreshed.expires_at),
        )
        return refreshed


__all__ = ["DownloaderCredentialService"]

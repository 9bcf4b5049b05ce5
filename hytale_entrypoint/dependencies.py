"""
Factory functions wiring clients and services from settings.
"""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Optional

from hytale_entrypoint.clients import (
    CredentialStore,
    DiscordWebhookClient,
    DownloaderCli,
    HytaleAccountClient,
    HytaleOAuthClient,
    find_downloader,
)
from hytale_entrypoint.core.config import AppSettings
from hytale_entrypoint.services import (
    AotCachePlanner,
    AuthOrchestrator,
    DeviceAuthorizer,
    DownloaderCredentialService,
    ServerConfigWriter,
    ServerFilesManager,
    ServerLauncher,
    SessionExchanger,
    TokenRefresher,
    WebhookNotifier,
)


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the shared credential store."""
    return CredentialStore()


def get_oauth_client(settings: AppSettings) -> HytaleOAuthClient:
    return HytaleOAuthClient(settings.oauth)


def get_notifier(settings: AppSettings) -> WebhookNotifier:
    """Provide a notifier; it is a no-op when no webhook is configured."""
    url = settings.notifications.discord_webhook_url
    client = DiscordWebhookClient(str(url)) if url else None
    return WebhookNotifier(client)


def get_downloader_credential_service(
    settings: AppSettings,
) -> DownloaderCredentialService:
    refresher = TokenRefresher(
        get_oauth_client(settings), client_id=settings.oauth.downloader_client_id
    )
    return DownloaderCredentialService(
        get_credential_store(),
        refresher,
        credentials_file=settings.paths.credentials_file,
        refresh_buffer_seconds=settings.oauth.refresh_buffer_seconds,
    )


def get_auth_orchestrator(
    settings: AppSettings, *, stop_event: Optional[asyncio.Event] = None
) -> AuthOrchestrator:
    """Build the server-session orchestrator and its collaborators."""
    store = get_credential_store()
    oauth_client = get_oauth_client(settings)
    notifier = get_notifier(settings)
    exchanger = SessionExchanger(
        HytaleAccountClient(settings.oauth),
        store,
        credentials_file=settings.paths.server_credentials_file,
    )
    device_authorizer = DeviceAuthorizer(
        oauth_client, exchanger, notifier, stop_event=stop_event
    )
    return AuthOrchestrator(
        settings,
        store,
        TokenRefresher(oauth_client, client_id=settings.oauth.server_client_id),
        exchanger,
        device_authorizer,
        notifications_enabled=notifier.enabled,
    )


def get_downloader(settings: AppSettings) -> DownloaderCli:
    return DownloaderCli(
        find_downloader(settings.paths.server_root),
        credentials_file=settings.paths.credentials_file,
        skip_update_check=settings.updates.skip_update_check,
    )


def get_server_files_manager(
    settings: AppSettings, downloader: DownloaderCli
) -> ServerFilesManager:
    return ServerFilesManager(
        settings.paths, downloader, update_mode=settings.updates.update_mode
    )


def get_config_writer(settings: AppSettings) -> ServerConfigWriter:
    return ServerConfigWriter(settings.paths, settings.server)


def get_aot_planner(settings: AppSettings) -> AotCachePlanner:
    return AotCachePlanner(settings.paths, enabled=settings.updates.enable_aot)


def get_launcher(settings: AppSettings) -> ServerLauncher:
    return ServerLauncher(settings.server, working_dir=settings.paths.server_files_dir)


__all__ = [
    "get_aot_planner",
    "get_auth_orchestrator",
    "get_config_writer",
    "get_credential_store",
    "get_downloader",
    "get_downloader_credential_service",
    "get_launcher",
    "get_notifier",
    "get_oauth_client",
    "get_server_files_manager",
]

"""Expose constructed client wrappers."""

from .account import HytaleAccountClient
from .credential_store import CredentialStore
from .discord_webhook import DiscordWebhookClient
from .downloader import DownloaderCli, find_downloader
from .oauth import HytaleOAuthClient

__all__ = [
    "CredentialStore",
    "DiscordWebhookClient",
    "DownloaderCli",
    "HytaleAccountClient",
    "HytaleOAuthClient",
    "find_downloader",
]

"""Service layer exports."""

from .aot_cache import AotCachePlanner
from .auth_orchestrator import AuthOrchestrator
from .device_auth import DeviceAuthorizer, DeviceFlowState
from .downloader_credentials import DownloaderCredentialService
from .launcher import ServerLauncher, build_command
from .notifications import Notifier, WebhookNotifier
from .server_config import ServerConfigWriter
from .server_files import ServerFilesManager
from .session_exchange import SessionExchanger
from .token_refresher import RefreshedTokens, TokenRefresher

__all__ = [
    "AotCachePlanner",
    "AuthOrchestrator",
    "DeviceAuthorizer",
    "DeviceFlowState",
    "DownloaderCredentialService",
    "Notifier",
    "RefreshedTokens",
    "ServerConfigWriter",
    "ServerFilesManager",
    "ServerLauncher",
    "SessionExchanger",
    "TokenRefresher",
    "WebhookNotifier",
    "build_command",
]

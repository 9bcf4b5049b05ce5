"""Model exports."""

from .auth import AuthSource, AuthState
from .credentials import DownloaderCredential, ServerCredential
from .notifications import Notification

__all__ = [
    "AuthSource",
    "AuthState",
    "DownloaderCredential",
    "Notification",
    "ServerCredential",
]

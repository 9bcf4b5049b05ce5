"""Exception hierarchy shared by the entrypoint steps."""

from __future__ import annotations


class EntrypointError(Exception):
    """Base class for failures raised by entrypoint code."""


class ConfigError(EntrypointError):
    """Raised when a required input is missing or malformed; always fatal."""


class CredentialUnavailable(EntrypointError):
    """Raised when a credential document is missing or cannot be parsed."""


class CredentialPersistenceError(EntrypointError):
    """Raised when a credential document could not be written durably."""


class UpdateError(EntrypointError):
    """Raised when server files cannot be downloaded or installed."""


class NotificationError(EntrypointError):
    """Raised when a webhook notification could not be delivered."""


class AuthError(EntrypointError):
    """Base class for OAuth and game-session failures."""

    def __init__(self, message: str = "Unknown error") -> None:
        super().__init__(message)
        self.provider_message = message


class RefreshFailed(AuthError):
    """The token endpoint did not return an access token."""


class NoProfile(AuthError):
    """The account has no game profile to create a session for."""


class SessionCreateFailed(AuthError):
    """The session endpoint did not return both game-session tokens."""


class DeviceFlowDenied(AuthError):
    """The provider rejected the device authorization."""


class DeviceFlowExpired(AuthError):
    """The device code expired, or could not be issued, before authorization."""


class DeviceFlowCancelled(AuthError):
    """Polling stopped because the process is shutting down."""


__all__ = [
    "AuthError",
    "ConfigError",
    "CredentialPersistenceError",
    "CredentialUnavailable",
    "DeviceFlowCancelled",
    "DeviceFlowDenied",
    "DeviceFlowExpired",
    "EntrypointError",
    "NoProfile",
    "NotificationError",
    "RefreshFailed",
    "SessionCreateFailed",
    "UpdateError",
]

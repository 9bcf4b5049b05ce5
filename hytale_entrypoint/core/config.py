"""
Entrypoint configuration models and helpers.

Every knob the container exposes is an environment variable; the settings
groups below bind each one through an alias so the same names work for
``docker run -e`` and for keyword construction in tests.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

from pydantic import (
    AliasChoices,
    AnyHttpUrl,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from hytale_entrypoint.core.errors import ConfigError


class AuthMode(str, Enum):
    AUTHENTICATED = "authenticated"
    OPEN = "open"
    OFFLINE = "offline"


class UpdateMode(str, Enum):
    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


_BASE_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class ServerSettings(BaseSettings):
    """Values forwarded to the game server and its config file."""

    model_config = _BASE_CONFIG

    server_name: str = Field("Hytale Server", alias="SERVER_NAME")
    server_password: str = Field("", alias="SERVER_PASSWORD")
    max_players: int = Field(10, ge=0, alias="MAX_PLAYERS")
    view_distance: int = Field(10, ge=0, alias="VIEW_DISTANCE")
    memory_mb: int = Field(4096, ge=0, alias="MEMORY_MB")
    auth_mode: AuthMode = Field(AuthMode.AUTHENTICATED, alias="AUTH_MODE")
    bind: str = Field("0.0.0.0:5520", alias="SERVER_BIND")

    @field_validator("auth_mode", mode="before")
    @classmethod
    def _lower_auth_mode(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class UpdateSettings(BaseSettings):
    """Controls how server binaries are kept current."""

    model_config = _BASE_CONFIG

    update_mode: UpdateMode = Field(UpdateMode.AUTO, alias="UPDATE_MODE")
    skip_update_check: bool = Field(False, alias="SKIP_UPDATE_CHECK")
    enable_aot: bool = Field(True, alias="ENABLE_AOT")

    @field_validator("update_mode", "skip_update_check", "enable_aot", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class PathSettings(BaseSettings):
    """Filesystem layout inside the container."""

    model_config = _BASE_CONFIG

    server_root: Path = Field(Path("/server"), alias="SERVER_ROOT")
    credentials_file: Optional[Path] = Field(None, alias="CREDENTIALS_FILE")
    server_credentials_file: Optional[Path] = Field(
        None, alias="SERVER_CREDENTIALS_FILE"
    )
    server_files_dir: Optional[Path] = Field(None, alias="SERVER_FILES_DIR")
    current_version_file: Optional[Path] = Field(None, alias="CURRENT_VERSION_FILE")
    config_dir: Optional[Path] = Field(None, alias="CONFIG_DIR")
    config_file: Optional[Path] = Field(None, alias="CONFIG_FILE")
    server_config_link: Optional[Path] = Field(None, alias="SERVER_CONFIG_LINK")
    aot_cache_dir: Optional[Path] = Field(None, alias="AOT_CACHE_DIR")
    aot_cache_file: Optional[Path] = Field(None, alias="AOT_CACHE_FILE")
    aot_version_file: Optional[Path] = Field(None, alias="AOT_VERSION_FILE")

    @model_validator(mode="after")
    def _derive_defaults(self) -> "PathSettings":
        """Fill unset paths relative to the server root, as the image lays them out."""
        root = self.server_root
        if self.credentials_file is None:
            self.credentials_file = root / ".hytale-downloader-credentials.json"
        if self.server_credentials_file is None:
            self.server_credentials_file = root / ".hytale-server-credentials.json"
        if self.server_files_dir is None:
            self.server_files_dir = root / "server-files"
        if self.current_version_file is None:
            self.current_version_file = self.server_files_dir / ".current-version"
        if self.config_dir is None:
            self.config_dir = root / "config"
        if self.config_file is None:
            self.config_file = self.config_dir / "config.json"
        if self.server_config_link is None:
            self.server_config_link = self.server_files_dir / "config.json"
        if self.aot_cache_dir is None:
            self.aot_cache_dir = root / ".aot-cache"
        if self.aot_cache_file is None:
            self.aot_cache_file = self.aot_cache_dir / "HytaleServer.aot"
        if self.aot_version_file is None:
            self.aot_version_file = self.aot_cache_dir / ".version"
        return self


class OAuthSettings(BaseSettings):
    """OAuth and account endpoint configuration."""

    model_config = _BASE_CONFIG

    device_auth_url: str = Field(
        "https://oauth.accounts.hytale.com/oauth2/device/auth",
        alias="OAUTH_DEVICE_AUTH_URL",
    )
    token_url: str = Field(
        "https://oauth.accounts.hytale.com/oauth2/token", alias="OAUTH_TOKEN_URL"
    )
    profiles_url: str = Field(
        "https://account-data.hytale.com/my-account/get-profiles",
        alias="PROFILES_URL",
    )
    session_url: str = Field(
        "https://sessions.hytale.com/game-session/new", alias="SESSION_URL"
    )
    server_client_id: str = Field("hytale-server", alias="OAUTH_SERVER_CLIENT_ID")
    downloader_client_id: str = Field(
        "hytale-downloader", alias="OAUTH_DOWNLOADER_CLIENT_ID"
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("openid", "offline", "auth:server"), alias="OAUTH_SCOPES"
    )
    refresh_buffer_seconds: int = Field(
        300, ge=0, alias="TOKEN_REFRESH_BUFFER_SECONDS"
    )
    http_timeout_seconds: float = Field(20.0, gt=0, alias="HTTP_TIMEOUT_SECONDS")
    http_retry_attempts: int = Field(3, ge=1, alias="HTTP_RETRY_ATTEMPTS")
    http_retry_backoff_seconds: float = Field(
        1.0, ge=0, alias="HTTP_RETRY_BACKOFF_SECONDS"
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a space- or comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(
            scope.strip() for scope in value.replace(",", " ").split() if scope.strip()
        )

    @property
    def scope(self) -> str:
        return " ".join(self.scopes)


class NotificationSettings(BaseSettings):
    """Outbound notification channel."""

    model_config = _BASE_CONFIG

    discord_webhook_url: Optional[AnyHttpUrl] = Field(
        None,
        alias="DISCORD_WEBHOOK_URL",
        description="Webhook used to deliver device codes to headless deployments.",
    )

    @field_validator("discord_webhook_url", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AppSettings(BaseSettings):
    """Root settings object for the entrypoint."""

    model_config = _BASE_CONFIG

    log_level: str = Field(
        "INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level")
    )
    session_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("HYTALE_SERVER_SESSION_TOKEN", "session_token"),
        repr=False,
    )
    identity_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "HYTALE_SERVER_IDENTITY_TOKEN", "identity_token"
        ),
        repr=False,
    )
    server: ServerSettings = Field(default_factory=ServerSettings)
    updates: UpdateSettings = Field(default_factory=UpdateSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


def _describe_validation_error(exc: ValidationError) -> str:
    """Render the first validation failure as a single actionable line."""
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or exc.title
    value = error.get("input")
    return f"{location} is invalid (got {value!r}): {error.get('msg')}"


def load_settings() -> AppSettings:
    """Build settings from the environment, converting validation failures."""
    try:
        return AppSettings()
    except ValidationError as exc:
        raise ConfigError(_describe_validation_error(exc)) from exc


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return load_settings()


__all__ = [
    "AppSettings",
    "AuthMode",
    "NotificationSettings",
    "OAuthSettings",
    "PathSettings",
    "ServerSettings",
    "UpdateMode",
    "UpdateSettings",
    "get_settings",
    "load_settings",
]

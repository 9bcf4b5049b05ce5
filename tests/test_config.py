try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path

import pytest

from hytale_entrypoint.core.config import (
    AuthMode,
    OAuthSettings,
    PathSettings,
    UpdateMode,
    load_settings,
)
from hytale_entrypoint.core.errors import ConfigError


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    # Keep a stray .env in the working directory out of these tests.
    monkeypatch.chdir(tmp_path)
    for key in (
        "SERVER_NAME",
        "MAX_PLAYERS",
        "MEMORY_MB",
        "UPDATE_MODE",
        "ENABLE_AOT",
        "OAUTH_SCOPES",
        "CREDENTIALS_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_follow_image_layout(clean_env) -> None:
    settings = load_settings()

    assert settings.server.server_name == "Hytale Server"
    assert settings.server.max_players == 10
    assert settings.server.memory_mb == 4096
    assert settings.server.auth_mode == AuthMode.AUTHENTICATED
    assert settings.updates.update_mode == UpdateMode.AUTO
    assert settings.updates.enable_aot is True
    assert settings.paths.credentials_file == Path("/server/.hytale-downloader-credentials.json")
    assert settings.paths.server_config_link == Path("/server/server-files/config.json")
    assert settings.oauth.scope == "openid offline auth:server"
    assert settings.notifications.discord_webhook_url is None
    assert settings.session_token is None


def test_environment_overrides(clean_env) -> None:
    clean_env.setenv("SERVER_NAME", "Dealer Node")
    clean_env.setenv("MAX_PLAYERS", "42")
    clean_env.setenv("AUTH_MODE", "OFFLINE")
    clean_env.setenv("UPDATE_MODE", "Never")
    clean_env.setenv("ENABLE_AOT", "FALSE")
    clean_env.setenv("DISCORD_WEBHOOK_URL", "   ")
    clean_env.setenv("HYTALE_SERVER_SESSION_TOKEN", "s")

    settings = load_settings()

    assert settings.server.server_name == "Dealer Node"
    assert settings.server.max_players == 42
    assert settings.server.auth_mode == AuthMode.OFFLINE
    assert settings.updates.update_mode == UpdateMode.NEVER
    assert settings.updates.enable_aot is False
    assert settings.notifications.discord_webhook_url is None
    assert settings.session_token == "s"


@pytest.mark.parametrize(
    ("key", "value", "fragment"),
    [
        ("MAX_PLAYERS", "abc", "MAX_PLAYERS"),
        ("MEMORY_MB", "-1", "MEMORY_MB"),
        ("UPDATE_MODE", "sometimes", "UPDATE_MODE"),
        ("DISCORD_WEBHOOK_URL", "discord webhook", "DISCORD_WEBHOOK_URL"),
    ],
)
def test_invalid_values_raise_config_error(clean_env, key, value, fragment) -> None:
    clean_env.setenv(key, value)

    with pytest.raises(ConfigError) as excinfo:
        load_settings()

    assert fragment in str(excinfo.value)
    assert repr(value) in str(excinfo.value)


def test_scopes_accept_spaces_or_commas() -> None:
    assert OAuthSettings(OAUTH_SCOPES="openid,offline  auth:server").scopes == (
        "openid",
        "offline",
        "auth:server",
    )


def test_paths_derive_from_root_unless_overridden(tmp_path: Path) -> None:
    paths = PathSettings(SERVER_ROOT=tmp_path, CONFIG_DIR=tmp_path / "etc")

    assert paths.server_files_dir == tmp_path / "server-files"
    assert paths.current_version_file == tmp_path / "server-files" / ".current-version"
    assert paths.config_file == tmp_path / "etc" / "config.json"
    assert paths.aot_cache_file == tmp_path / ".aot-cache" / "HytaleServer.aot"
    assert paths.aot_version_file == tmp_path / ".aot-cache" / ".version"


def test_webhook_url_is_parsed(clean_env) -> None:
    clean_env.setenv("DISCORD_WEBHOOK_URL", "https://discord.com/api/webhooks/1/abc")

    settings = load_settings()

    assert str(settings.notifications.discord_webhook_url) == (
        "https://discord.com/api/webhooks/1/abc"
    )

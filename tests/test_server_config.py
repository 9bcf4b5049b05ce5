try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from pathlib import Path

import pytest

from hytale_entrypoint.core.config import PathSettings, ServerSettings
from hytale_entrypoint.core.errors import ConfigError
from hytale_entrypoint.services.server_config import ServerConfigWriter, apply_settings

SERVER = ServerSettings(
    SERVER_NAME="Dealer Node", SERVER_PASSWORD="hunter2", MAX_PLAYERS=20, VIEW_DISTANCE=12
)


def test_new_document_uses_canonical_keys() -> None:
    assert apply_settings({}, SERVER) == {
        "ServerName": "Dealer Node",
        "Password": "hunter2",
        "MaxPlayers": 20,
        "ViewDistance": 12,
    }


def test_existing_spellings_are_updated_in_place() -> None:
    document = {
        "server_name": "old",
        "maxPlayers": 5,
        "password": "",
        "MOTD": "keep me",
    }

    updated = apply_settings(document, SERVER)

    assert updated == {
        "server_name": "Dealer Node",
        "maxPlayers": 20,
        "password": "hunter2",
        "MOTD": "keep me",
        "ViewDistance": 12,
    }
    assert document["server_name"] == "old"


def test_writer_generates_config_and_links_it(tmp_path: Path) -> None:
    paths = PathSettings(SERVER_ROOT=tmp_path)

    written = ServerConfigWriter(paths, SERVER).write()

    assert written == paths.config_file
    assert json.loads(written.read_text(encoding="utf-8"))["ServerName"] == "Dealer Node"
    assert paths.server_config_link.is_symlink()
    assert paths.server_config_link.resolve() == paths.config_file.resolve()


def test_writer_preserves_unmanaged_keys_and_replaces_stale_link(tmp_path: Path) -> None:
    paths = PathSettings(SERVER_ROOT=tmp_path)
    paths.config_file.parent.mkdir(parents=True)
    paths.config_file.write_text(json.dumps({"Seed": 7, "MaxPlayers": 1}), encoding="utf-8")
    paths.server_config_link.parent.mkdir(parents=True)
    paths.server_config_link.write_text("{}", encoding="utf-8")

    ServerConfigWriter(paths, SERVER).write()

    document = json.loads(paths.config_file.read_text(encoding="utf-8"))
    assert document["Seed"] == 7
    assert document["MaxPlayers"] == 20
    assert paths.server_config_link.is_symlink()


@pytest.mark.parametrize("contents", ["{broken", "[]"])
def test_writer_rejects_unusable_existing_config(tmp_path: Path, contents: str) -> None:
    paths = PathSettings(SERVER_ROOT=tmp_path)
    paths.config_file.parent.mkdir(parents=True)
    paths.config_file.write_text(contents, encoding="utf-8")

    with pytest.raises(ConfigError):
        ServerConfigWriter(paths, SERVER).write()

    assert paths.config_file.read_text(encoding="utf-8") == contents

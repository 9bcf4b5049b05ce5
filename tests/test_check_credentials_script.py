"""Tests for the credential status script."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts import check_credentials

NOW = 1_700_000_000


@pytest.fixture
def server_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SERVER_ROOT", str(tmp_path))
    monkeypatch.delenv("MAX_PLAYERS", raising=False)
    return tmp_path


def _write(path: Path, document: dict) -> None:
    path.write_text(json.dumps(document), encoding="utf-8")


def test_check_reports_invalid_settings(
    server_root: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setenv("MAX_PLAYERS", "lots")

    assert check_credentials.main(["check"]) == check_credentials.EXIT_VALIDATION_ERROR
    assert "MAX_PLAYERS" in capsys.readouterr().err


def test_check_accepts_valid_settings(server_root: Path, capsys: pytest.CaptureFixture) -> None:
    assert check_credentials.main(["check"]) == check_credentials.EXIT_OK
    assert "Settings OK." in capsys.readouterr().out


def test_status_reports_missing_documents(server_root: Path) -> None:
    assert check_credentials.main(["status"]) == check_credentials.EXIT_CREDENTIALS_MISSING


def test_status_never_prints_tokens(
    server_root: Path, capsys: pytest.CaptureFixture
) -> None:
    settings = check_credentials.load_settings()
    _write(
        settings.paths.credentials_file,
        {"access_token": "dl-secret", "refresh_token": "dl-refresh", "expires_at": NOW + 3600},
    )
    _write(
        settings.paths.server_credentials_file,
        {
            "refresh_token": "srv-refresh",
            "session_token": "srv-session",
            "identity_token": "srv-identity",
            "profile_username": "builder",
            "session_expires_at": NOW + 3600,
        },
    )

    code = check_credentials._status(settings, clock=lambda: NOW)

    output = capsys.readouterr().out
    assert code == check_credentials.EXIT_OK
    assert "builder" in output
    for secret in ("dl-secret", "dl-refresh", "srv-refresh", "srv-session", "srv-identity"):
        assert secret not in output


def test_status_flags_unrecoverable_expiry(
    server_root: Path, capsys: pytest.CaptureFixture
) -> None:
    settings = check_credentials.load_settings()
    _write(settings.paths.credentials_file, {"access_token": "a", "expires_at": 0})
    _write(settings.paths.server_credentials_file, {"session_expires_at": 0})

    code = check_credentials._status(settings, clock=lambda: NOW)

    assert code == check_credentials.EXIT_CREDENTIALS_EXPIRED
    assert "device login required" in capsys.readouterr().out

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from pathlib import Path

import httpx
import pytest

from hytale_entrypoint.clients.credential_store import CredentialStore
from hytale_entrypoint.core.errors import (
    CredentialPersistenceError,
    NoProfile,
    SessionCreateFailed,
)
from hytale_entrypoint.services.session_exchange import SessionExchanger, parse_expiry


class StubAccountClient:
    def __init__(self, profiles=None, session=None, profiles_error=None) -> None:
        self.profiles = profiles if profiles is not None else {
            "profiles": [{"uuid": "uuid-1", "username": "builder"}, {"uuid": "uuid-2"}]
        }
        self.session = session if session is not None else {
            "sessionToken": "session-1",
            "identityToken": "identity-1",
            "expiresAt": "2023-11-14T23:13:20Z",
        }
        self.profiles_error = profiles_error
        self.profile_calls = []
        self.session_calls = []

    async def get_profiles(self, access_token: str):
        self.profile_calls.append(access_token)
        if self.profiles_error is not None:
            raise self.profiles_error
        return self.profiles

    async def create_game_session(self, access_token: str, profile_uuid: str):
        self.session_calls.append((access_token, profile_uuid))
        return self.session


class FailingStore(CredentialStore):
    def save(self, path, credential) -> None:
        raise CredentialPersistenceError("disk full")


def _exchanger(tmp_path: Path, accounts, clock, store=None) -> SessionExchanger:
    return SessionExchanger(
        accounts,
        store or CredentialStore(),
        credentials_file=tmp_path / "server.json",
        clock=clock,
    )


@pytest.mark.asyncio
async def test_exchange_uses_first_profile_and_persists(tmp_path: Path, clock) -> None:
    accounts = StubAccountClient()

    credential = await _exchanger(tmp_path, accounts, clock).exchange("access", "refresh")

    assert accounts.session_calls == [("access", "uuid-1")]
    assert credential.profile_username == "builder"
    assert credential.session_expires_at == 1_700_003_600
    stored = json.loads((tmp_path / "server.json").read_text(encoding="utf-8"))
    assert stored["session_token"] == "session-1"
    assert stored["identity_token"] == "identity-1"
    assert stored["refresh_token"] == "refresh"
    assert stored["session_expires_at"] == 1_700_003_600


@pytest.mark.asyncio
@pytest.mark.parametrize("profiles", [{"profiles": []}, {}, {"profiles": [{}]}])
async def test_no_profile_skips_session_creation(tmp_path: Path, clock, profiles) -> None:
    accounts = StubAccountClient(profiles=profiles)

    with pytest.raises(NoProfile):
        await _exchanger(tmp_path, accounts, clock).exchange("access", "refresh")

    assert accounts.session_calls == []
    assert not (tmp_path / "server.json").exists()


@pytest.mark.asyncio
async def test_no_profile_carries_provider_message(tmp_path: Path, clock) -> None:
    accounts = StubAccountClient(profiles={"message": "Account suspended"})

    with pytest.raises(NoProfile) as excinfo:
        await _exchanger(tmp_path, accounts, clock).exchange("access", "refresh")

    assert excinfo.value.provider_message == "Account suspended"


@pytest.mark.asyncio
async def test_unreachable_profile_endpoint_is_no_profile(tmp_path: Path, clock) -> None:
    accounts = StubAccountClient(profiles_error=httpx.ReadTimeout("slow"))

    with pytest.raises(NoProfile):
        await _exchanger(tmp_path, accounts, clock).exchange("access", "refresh")


@pytest.mark.asyncio
async def test_missing_identity_token_fails_session_creation(tmp_path: Path, clock) -> None:
    accounts = StubAccountClient(session={"sessionToken": "s", "error": "quota"})

    with pytest.raises(SessionCreateFailed) as excinfo:
        await _exchanger(tmp_path, accounts, clock).exchange("access", "refresh")

    assert excinfo.value.provider_message == "quota"
    assert not (tmp_path / "server.json").exists()


@pytest.mark.asyncio
async def test_unparsable_expiry_defaults_to_one_hour(tmp_path: Path, clock) -> None:
    accounts = StubAccountClient(
        session={"sessionToken": "s", "identityToken": "i", "expiresAt": "next tuesday"}
    )

    credential = await _exchanger(tmp_path, accounts, clock).exchange("access", "refresh")

    assert credential.session_expires_at == int(clock.now) + 3600
    stored = json.loads((tmp_path / "server.json").read_text(encoding="utf-8"))
    assert stored["session_expires_at"] == int(clock.now) + 3600


@pytest.mark.asyncio
async def test_persistence_failure_still_returns_session(
    tmp_path: Path, clock, caplog: pytest.LogCaptureFixture
) -> None:
    credential = await _exchanger(
        tmp_path, StubAccountClient(), clock, store=FailingStore()
    ).exchange("access", "refresh")

    assert credential.session_token == "session-1"
    assert "could not be saved" in caplog.text


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2023-11-14T22:13:20Z", 1_700_000_000),
        ("2023-11-14T23:13:20+01:00", 1_700_000_000),
        ("2023-11-14T22:13:20", 1_700_000_000),
        ("2023-11-14T22:13:20.500Z", 1_700_000_000),
        ("1700000000", 1_700_000_000),
        (1_700_000_000, 1_700_000_000),
        ("", None),
        ("tomorrow", None),
        (None, None),
        (True, None),
        (-1, None),
    ],
)
def test_parse_expiry(value, expected) -> None:
    assert parse_expiry(value) == expected

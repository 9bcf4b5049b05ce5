"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path

import pytest

from hytale_entrypoint.core.config import (
    AppSettings,
    NotificationSettings,
    OAuthSettings,
    PathSettings,
    ServerSettings,
)

NOW = 1_700_000_000.0


class FakeClock:
    """Wall clock that only moves when the code under test sleeps."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_settings(tmp_path: Path):
    """Build settings rooted in a temporary directory."""

    def _make(**overrides) -> AppSettings:
        server = overrides.pop("server", None) or ServerSettings()
        notifications = overrides.pop("notifications", None) or NotificationSettings()
        oauth = overrides.pop("oauth", None) or OAuthSettings(
            HTTP_RETRY_BACKOFF_SECONDS=0
        )
        return AppSettings(
            server=server,
            paths=PathSettings(SERVER_ROOT=tmp_path),
            oauth=oauth,
            notifications=notifications,
            **overrides,
        )

    return _make

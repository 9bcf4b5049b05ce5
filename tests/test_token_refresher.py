try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from hytale_entrypoint.core.errors import RefreshFailed
from hytale_entrypoint.services.token_refresher import TokenRefresher


class StubOAuthClient:
    def __init__(self, payload=None, error: Exception | None = None) -> None:
        self.payload = payload or {}
        self.error = error
        self.calls = []

    async def refresh_token(self, refresh_token: str, *, client_id: str):
        self.calls.append((refresh_token, client_id))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.mark.asyncio
async def test_refresh_rotates_tokens_and_computes_expiry(clock) -> None:
    oauth = StubOAuthClient(
        {"access_token": "new-access", "refresh_token": "new-refresh", "expires_in": 120}
    )
    refresher = TokenRefresher(oauth, client_id="hytale-server", clock=clock)

    tokens = await refresher.refresh("old-refresh")

    assert oauth.calls == [("old-refresh", "hytale-server")]
    assert tokens.access_token == "new-access"
    assert tokens.refresh_token == "new-refresh"
    assert tokens.expires_at == int(clock.now) + 120


@pytest.mark.asyncio
async def test_refresh_keeps_old_refresh_token_when_not_rotated(clock) -> None:
    refresher = TokenRefresher(
        StubOAuthClient({"access_token": "a"}), client_id="c", clock=clock
    )

    tokens = await refresher.refresh("keep-me")

    assert tokens.refresh_token == "keep-me"
    assert tokens.expires_at == int(clock.now) + 3600


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"error": "invalid_grant", "error_description": "Token revoked"}, "Token revoked"),
        ({"error": "invalid_grant"}, "invalid_grant"),
        ({}, "Unknown error"),
    ],
)
async def test_refresh_without_access_token_fails_with_provider_message(
    clock, payload, message
) -> None:
    refresher = TokenRefresher(StubOAuthClient(payload), client_id="c", clock=clock)

    with pytest.raises(RefreshFailed) as excinfo:
        await refresher.refresh("rt")

    assert excinfo.value.provider_message == message


@pytest.mark.asyncio
async def test_unreachable_token_endpoint_is_a_refresh_failure(clock) -> None:
    error = httpx.ConnectError("refused")
    refresher = TokenRefresher(StubOAuthClient(error=error), client_id="c", clock=clock)

    with pytest.raises(RefreshFailed):
        await refresher.refresh("rt")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("expires_in", "expected"),
    [(0, 0), (-30, 0), ("90", 90), (None, 3600), ("soon", 3600), ([], 3600)],
)
async def test_expires_in_handling(clock, expires_in, expected) -> None:
    refresher = TokenRefresher(
        StubOAuthClient({"access_token": "a", "expires_in": expires_in}),
        client_id="c",
        clock=clock,
    )

    tokens = await refresher.refresh("rt")

    assert tokens.expires_at == int(clock.now) + expected

"""
OAuth device-code flow for the server identity.

The operator approves the server from a browser on any device using the
code printed to the console (and, for headless deployments, sent through
the notification channel) while this process polls the token endpoint.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional, TextIO

import httpx

from hytale_entrypoint.clients.oauth import HytaleOAuthClient
from hytale_entrypoint.core.errors import (
    DeviceFlowCancelled,
    DeviceFlowDenied,
    DeviceFlowExpired,
)
from hytale_entrypoint.models.credentials import ServerCredential
from hytale_entrypoint.models.notifications import (
    COLOR_ACTION_REQUIRED,
    COLOR_SUCCESS,
    Notification,
)
from hytale_entrypoint.services.notifications import Notifier
from hytale_entrypoint.services.session_exchange import SessionExchanger
from hytale_entrypoint.utils.http import provider_message
from hytale_entrypoint.utils.polling import Sleeper, TimedRetry

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5
DEFAULT_EXPIRES_IN = 900
SLOW_DOWN_STEP = 5


class DeviceFlowState(str, Enum):
    REQUESTING = "requesting"
    DISPLAYING = "displaying"
    POLLING = "polling"
    AUTHORIZED = "authorized"
    EXPIRED = "expired"
    DENIED = "denied"
    CANCELLED = "cancelled"


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


class DeviceAuthorizer:
    """Run one device authorization from code request to game session."""

    def __init__(
        self,
        oauth_client: HytaleOAuthClient,
        session_exchanger: SessionExchanger,
        notifier: Notifier,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Optional[Sleeper] = None,
        stop_event: Optional[asyncio.Event] = None,
        console: Optional[TextIO] = None,
    ) -> None:
        self._oauth = oauth_client
        self._exchanger = session_exchanger
        self._notifier = notifier
        self._clock = clock
        self._sleep = sleep
        self._stop_event = stop_event
        self._console = console
        self.state: Optional[DeviceFlowState] = None

    async def authorize(self) -> ServerCredential:
        """Return the exchanged credential or raise an ``AuthError``."""
        try:
            return await self._run()
        finally:
            await self._notifier.drain()

    async def _run(self) -> ServerCredential:
        logger.info("Starting OAuth device flow for server authentication...")
        self.state = DeviceFlowState.REQUESTING
        try:
            grant = await self._oauth.request_device_code()
        except httpx.HTTPError as exc:
            self.state = DeviceFlowState.EXPIRED
            raise DeviceFlowExpired(
                f"Failed to start device flow: {type(exc).__name__}"
            ) from exc

        device_code = grant.get("device_code")
        user_code = grant.get("user_code")
        if not device_code or not user_code:
            self.state = DeviceFlowState.EXPIRED
            raise DeviceFlowExpired(
                f"Failed to start device flow: {provider_message(grant)}"
            )

        interval = _positive_int(grant.get("interval"), DEFAULT_INTERVAL)
        expires_in = _positive_int(grant.get("expires_in"), DEFAULT_EXPIRES_IN)

        self.state = DeviceFlowState.DISPLAYING
        self._display(grant, expires_in)

        self.state = DeviceFlowState.POLLING
        poller = TimedRetry(
            interval=interval,
            timeout=expires_in,
            clock=self._clock,
            sleep=self._sleep,
            stop_event=self._stop_event,
        )
        async for _ in poller:
            payload = await self._poll(device_code)
            if payload is None:
                continue

            error = payload.get("error") or ""
            if error == "authorization_pending":
                continue
            if error == "slow_down":
                poller.slow_down(SLOW_DOWN_STEP)
                logger.info("Provider asked to slow down; polling every %ss", poller.interval)
                continue
            if error:
                self.state = DeviceFlowState.DENIED
                raise DeviceFlowDenied(provider_message(payload))

            access_token = payload.get("access_token")
            if not access_token:
                continue

            self.state = DeviceFlowState.AUTHORIZED
            logger.info("OAuth authorization successful!")
            credential = await self._exchanger.exchange(
                access_token, payload.get("refresh_token") or ""
            )
            self._notifier.dispatch(
                Notification(
                    title="✅ Authentication Successful",
                    description=(
                        "Server authentication completed successfully. "
                        "The server is now starting."
                    ),
                    color=COLOR_SUCCESS,
                )
            )
            return credential

        if poller.stopped:
            self.state = DeviceFlowState.CANCELLED
            raise DeviceFlowCancelled("Shutdown requested while waiting for authorization")
        self.state = DeviceFlowState.EXPIRED
        raise DeviceFlowExpired("Authentication timed out")

    async def _poll(self, device_code: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._oauth.poll_device_token(device_code)
        except httpx.HTTPError as exc:
            logger.warning("Token poll failed (%s); will retry", type(exc).__name__)
            return None

    def _display(self, grant: Dict[str, Any], expires_in: int) -> None:
        user_code = grant.get("user_code", "")
        verification_uri = grant.get("verification_uri") or ""
        verification_uri_complete = grant.get("verification_uri_complete") or ""
        rule = "═" * 66
        lines = [
            "",
            f"╔{rule}╗",
            "║" + "SERVER AUTHENTICATION".center(66) + "║",
            f"╠{rule}╣",
            f"║  Visit: {verification_uri}",
            f"║  Code:  {user_code}",
            "║",
            "║  Or go directly to:",
            f"║  {verification_uri_complete}",
            f"╚{rule}╝",
            "",
        ]
        print("\n".join(lines), file=self._console or sys.stdout, flush=True)
        logger.info("Waiting for authorization (expires in %s seconds)...", expires_in)

        self._notifier.dispatch(
            Notification(
                title="\U0001f510 Hytale Server Authentication Required",
                description=(
                    "The server needs authentication to start.\n\n"
                    f"**Code:** `{user_code}`\n\n"
                    f"**Click the link below or visit:** {verification_uri}"
                ),
                color=COLOR_ACTION_REQUIRED,
                link=verification_uri_complete or None,
            )
        )


__all__ = ["DeviceAuthorizer", "DeviceFlowState"]

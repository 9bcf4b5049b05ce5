"""
Fire-and-forget operator notifications.

Delivery runs as background tasks so a slow or unreachable webhook never
delays authentication; failures are logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Set

from hytale_entrypoint.clients.discord_webhook import DiscordWebhookClient
from hytale_entrypoint.core.errors import NotificationError
from hytale_entrypoint.models.notifications import Notification

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """One-way notification port."""

    @property
    def enabled(self) -> bool: ...

    def dispatch(self, notification: Notification) -> None: ...

    async def drain(self) -> None: ...


class WebhookNotifier:
    """Schedule webhook deliveries without waiting for them."""

    def __init__(
        self,
        client: Optional[DiscordWebhookClient],
        *,
        drain_timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._drain_timeout = drain_timeout
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def dispatch(self, notification: Notification) -> None:
        if self._client is None:
            return
        task = asyncio.get_running_loop().create_task(self._deliver(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, notification: Notification) -> None:
        assert self._client is not None
        try:
            await self._client.send(notification)
        except NotificationError as exc:
            logger.warning("Failed to send Discord notification: %s", exc)

    async def drain(self) -> None:
        """Give in-flight deliveries a bounded chance to finish."""
        if not self._pending:
            return
        _, pending = await asyncio.wait(
            set(self._pending), timeout=self._drain_timeout
        )
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Abandoned %d undelivered notification(s)", len(pending))


__all__ = ["Notifier", "WebhookNotifier"]

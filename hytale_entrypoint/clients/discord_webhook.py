"""Discord webhook delivery for operator notifications."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from hytale_entrypoint.core.errors import NotificationError
from hytale_entrypoint.models.notifications import Notification


class DiscordWebhookClient:
    """POST notifications to a Discord webhook as a single rich embed."""

    def __init__(
        self,
        webhook_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = webhook_url
        self._timeout = timeout
        self._transport = transport

    @staticmethod
    def build_payload(
        notification: Notification, *, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        timestamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")
        embed: Dict[str, Any] = {
            "title": notification.title,
            "description": notification.description,
            "color": notification.color,
            "timestamp": timestamp,
        }
        if notification.link:
            embed["fields"] = [{"name": "Quick Link", "value": notification.link}]
        return {"embeds": [embed]}

    async def send(self, notification: Notification) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._url, json=self.build_payload(notification)
                )
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NotificationError(
                f"Discord webhook delivery failed: {type(exc).__name__}"
            ) from exc


__all__ = ["DiscordWebhookClient"]

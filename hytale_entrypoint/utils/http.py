"""HTTP utilities providing retry/backoff semantics."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

import httpx

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 1.0) -> None:
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """Call ``func`` until it yields a response, retrying transport failures.

    Any response, whatever its status code, is returned to the caller: OAuth
    endpoints report pending and rejected grants through 4xx bodies.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: Exception | None = None

    while attempt < config.attempts:
        try:
            return await func(*args, **kwargs)
        except httpx.TransportError as exc:
            last_exception = exc
            attempt += 1
            if attempt >= config.attempts:
                break
            logger.warning(
                "Request failed (%s), retrying (%d/%d)",
                type(exc).__name__,
                attempt,
                config.attempts - 1,
            )
            await asyncio.sleep(config.backoff_seconds * attempt)

    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


def json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    """Decode a JSON object body, treating anything else as an empty payload."""
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def provider_message(payload: Dict[str, Any], *keys: str) -> str:
    """Return the first non-empty message field the provider sent."""
    for key in keys or ("error_description", "error"):
        value = payload.get(key)
        if value:
            return str(value)
    return "Unknown error"


__all__ = ["RetryConfig", "json_or_empty", "provider_message", "request_with_retry"]

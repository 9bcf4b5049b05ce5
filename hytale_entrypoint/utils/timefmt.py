"""Human-readable rendering of epoch timestamps for log lines."""

from __future__ import annotations

from datetime import datetime


def format_epoch(timestamp: int) -> str:
    """Render epoch seconds in local time, falling back to the raw number."""
    try:
        return datetime.fromtimestamp(timestamp).astimezone().strftime(
            "%Y-%m-%d %H:%M:%S %Z"
        )
    except (OverflowError, OSError, ValueError):
        return str(timestamp)


__all__ = ["format_epoch"]

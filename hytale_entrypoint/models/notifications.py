"""Notification payloads sent to the operator channel."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

COLOR_INFO = 3447003
COLOR_ACTION_REQUIRED = 16776960
COLOR_SUCCESS = 5763719


class Notification(BaseModel):
    """A titled message with an optional call-to-action link."""

    title: str
    description: str
    color: int = Field(COLOR_INFO, description="Embed colour as a decimal RGB value.")
    link: Optional[str] = None


__all__ = [
    "COLOR_ACTION_REQUIRED",
    "COLOR_INFO",
    "COLOR_SUCCESS",
    "Notification",
]

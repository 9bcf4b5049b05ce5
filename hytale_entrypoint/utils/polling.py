"""Deadline-bounded polling with injectable time sources."""

from __future__ import annotations

import asyncio
import time
from typing import AsyncIterator, Awaitable, Callable, Optional

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class TimedRetry:
    """Drive a poll loop until a wall-clock deadline passes.

    Each iteration first waits ``interval`` seconds and then yields the
    attempt number. The interval can be widened between attempts. When a
    ``stop_event`` is supplied the wait returns early once it is set, and
    iteration ends without issuing another attempt.
    """

    def __init__(
        self,
        *,
        interval: float,
        timeout: float,
        clock: Clock = time.time,
        sleep: Optional[Sleeper] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._sleep = sleep or self._wait
        self._stop_event = stop_event
        self.deadline = clock() + timeout
        self.attempts = 0

    @property
    def stopped(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    @property
    def expired(self) -> bool:
        return self._clock() >= self.deadline

    def slow_down(self, step: float) -> float:
        self.interval += step
        return self.interval

    async def _wait(self, seconds: float) -> None:
        if self._stop_event is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def __aiter__(self) -> AsyncIterator[int]:
        while not self.expired and not self.stopped:
            await self._sleep(self.interval)
            if self.stopped:
                return
            self.attempts += 1
            yield self.attempts


__all__ = ["Clock", "Sleeper", "TimedRetry"]

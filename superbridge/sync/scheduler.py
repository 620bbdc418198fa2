"""Self-rescheduling refetch timer."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger


class SchedulerState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    FETCHING = "fetching"


class RefetchScheduler:
    """
    Runs ``on_refetch`` every ``interval_s`` seconds.

    Invariants: at most one armed timer handle and at most one in-flight fetch.
    Every (re)arm cancels the previous handle first. ``trigger_now`` during an
    in-flight fetch does not stack a second fetch; it queues one follow-up run
    on the same flight. The next tick is always armed a full interval after a
    fetch completes, whether it failed or not.
    """

    def __init__(self, interval_s: float, on_refetch: Callable[[], Awaitable[object]]):
        if interval_s <= 0:
            raise ValueError("interval_s must be greater than 0")
        self.interval_s = interval_s
        self._on_refetch = on_refetch
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: asyncio.Task[None] | None = None
        self._rerun = False
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def state(self) -> SchedulerState:
        if self._inflight is not None and not self._inflight.done():
            return SchedulerState.FETCHING
        if self._timer is not None:
            return SchedulerState.SCHEDULED
        return SchedulerState.IDLE

    def start(self) -> None:
        self.stop()
        self._running = True
        self._arm()

    def stop(self) -> None:
        """Cancel the pending tick. An in-flight fetch is left to finish."""
        self._running = False
        self._cancel_timer()

    def trigger_now(self) -> asyncio.Task[None]:
        """Fetch immediately; the timer restarts a full interval after the fetch."""
        self._cancel_timer()
        if self._inflight is not None and not self._inflight.done():
            self._rerun = True
            return self._inflight
        self._inflight = asyncio.ensure_future(self._run())
        return self._inflight

    def delay_next(self) -> None:
        """Push the next tick a full interval out without fetching."""
        if self.state is not SchedulerState.FETCHING:
            self._arm()

    async def wait_idle(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            await asyncio.shield(self._inflight)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _arm(self) -> None:
        self._cancel_timer()
        if not self._running:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.interval_s, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._inflight is not None and not self._inflight.done():
            return
        self._inflight = asyncio.ensure_future(self._run())

    async def _run(self) -> None:
        try:
            while True:
                self._rerun = False
                try:
                    await self._on_refetch()
                except Exception as e:
                    logger.warning("Scheduled refetch failed: {}", e)
                if not self._rerun:
                    break
        finally:
            self._arm()

#Purpose: Timer abstraction for tracking sessions.
#A Scheduler hands out repeating timers; each TrackingSession owns exactly one
#TimerHandle and cancels it on arrival, cancellation or teardown.
#AsyncioScheduler is the production implementation: single-threaded, driven by
#the running event loop, re-armed at a fixed nominal cadence.

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def schedule_repeating(self, interval_s: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class RepeatingTimer:
    """
    Single-shot loop handles re-armed on every fire.

    Deadlines are anchored to the first fire time (start + n * interval) so slow
    callbacks do not make the cadence drift. cancel() is idempotent and takes
    effect immediately, even when called from inside the callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, interval_s: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval_s = interval_s
        self._callback = callback
        self._next_deadline = loop.time() + interval_s
        self._handle: Optional[asyncio.TimerHandle] = loop.call_at(self._next_deadline, self._fire)
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _fire(self) -> None:
        if self._cancelled:
            return
        # re-arm before running the callback so a cancel() inside it disarms the new handle
        self._next_deadline += self._interval_s
        now = self._loop.time()
        if self._next_deadline < now:
            # skip missed beats instead of firing a burst
            missed = int((now - self._next_deadline) // self._interval_s) + 1
            self._next_deadline += missed * self._interval_s
        self._handle = self._loop.call_at(self._next_deadline, self._fire)
        self._callback()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler:
    """
    Scheduler backed by an asyncio event loop.
    Must be used from the loop's thread; pass the loop explicitly or create
    the scheduler while the loop is running.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule_repeating(self, interval_s: float, callback: Callable[[], None]) -> RepeatingTimer:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        logger.debug(f"Arming repeating timer every {interval_s:.3f}s")
        return RepeatingTimer(self.loop, interval_s, callback)

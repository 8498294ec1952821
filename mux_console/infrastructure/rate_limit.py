"""
Interval rate limiter for outbound Mux calls.

A single ``IntervalRateLimiter`` instance is shared by every concurrent caller
in the process. It permits at most ``capacity`` dispatches within any
``interval``-long window; callers beyond that wait in a FIFO queue and are
released as permits from the oldest dispatches expire. Nothing is ever
dropped: back-pressure is queueing delay, not rejection, unless a
``max_pending`` bound is configured.

The limiter is per process. Several instances behind a load balancer each
enforce their own ceiling.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TypeVar

from mux_console.domain.exceptions import RateLimitQueueFullError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IntervalRateLimiter:
    """
    FIFO rate limiter bounding dispatches per rolling time window.

    Each permit is stamped with its dispatch time. A new permit is available
    once fewer than ``capacity`` stamps fall inside the last ``interval``
    seconds, so the ceiling holds for every window position, not only for
    aligned ones.

    Cancellation: a waiter cancelled before its permit is granted leaves the
    queue and never dispatches. A permit granted to a waiter that is then
    cancelled stays consumed.

    Attributes:
        capacity: Dispatches permitted per interval
        interval: Window length in seconds
        max_pending: Optional bound on queued waiters
    """

    def __init__(
        self,
        capacity: int = 20,
        interval: float = 1.0,
        max_pending: int | None = None,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            capacity: Dispatches permitted per interval (default: 20)
            interval: Window length in seconds (default: 1.0)
            max_pending: Reject with RateLimitQueueFullError beyond this many waiters
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if interval <= 0:
            raise ValueError("interval must be positive")
        if max_pending is not None and max_pending < 1:
            raise ValueError("max_pending must be at least 1")

        self.capacity = capacity
        self.interval = interval
        self.max_pending = max_pending
        self._stamps: deque[float] = deque()
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._wakeup: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> int:
        """Number of callers waiting for a permit."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def in_window(self) -> int:
        """Number of dispatches inside the current window."""
        self._expire(self._now())
        return len(self._stamps)

    async def acquire(self) -> None:
        """Wait for a permit.

        Raises:
            RateLimitQueueFullError: If the bounded queue is already full
        """
        now = self._now()
        self._expire(now)

        if not self._waiters and len(self._stamps) < self.capacity:
            self._stamps.append(now)
            return

        if self.max_pending is not None and self.pending >= self.max_pending:
            logger.warning(f"Rate limit queue full: {self.pending} pending calls")
            raise RateLimitQueueFullError(self.max_pending)

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        self._waiters.append(waiter)
        logger.debug(f"Rate limit saturated, queued call (pending={len(self._waiters)})")
        self._schedule_wakeup(loop)

        try:
            await waiter
        except asyncio.CancelledError:
            if not waiter.done() or waiter.cancelled():
                self._discard(waiter)
            raise

    async def run(self, func: Callable[[], Awaitable[T]]) -> T:
        """Acquire a permit, then run ``func``.

        Failures raised by ``func`` propagate unchanged.
        """
        await self.acquire()
        return await func()

    def _now(self) -> float:
        return asyncio.get_running_loop().time()

    def _expire(self, now: float) -> None:
        while self._stamps and now - self._stamps[0] >= self.interval:
            self._stamps.popleft()

    def _discard(self, waiter: asyncio.Future[None]) -> None:
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass

    def _schedule_wakeup(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._wakeup is not None or not self._waiters:
            return
        delay = 0.0
        if self._stamps:
            delay = max(0.0, self._stamps[0] + self.interval - self._now())
        self._wakeup = loop.call_later(delay, self._release_waiters)

    def _release_waiters(self) -> None:
        self._wakeup = None
        now = self._now()
        self._expire(now)

        while self._waiters and len(self._stamps) < self.capacity:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            waiter.set_result(None)
            self._stamps.append(now)

        # Drop cancelled heads so they do not hold up the next wakeup
        while self._waiters and self._waiters[0].done():
            self._waiters.popleft()

        if self._waiters:
            self._schedule_wakeup(asyncio.get_running_loop())

"""Unit tests for IntervalRateLimiter.

Tests cover:
- Immediate dispatch below capacity
- Ceiling per window under concurrent load
- FIFO release order
- Bounded queue rejection
- Cancellation of queued callers
- Failures of the wrapped call
"""

import asyncio

import pytest

from mux_console.domain.exceptions import RateLimitQueueFullError
from mux_console.infrastructure.rate_limit import IntervalRateLimiter

# Slack for timer callbacks scheduled within the loop's clock resolution
TOLERANCE = 0.02


async def dispatch_times(limiter: IntervalRateLimiter, count: int) -> list[float]:
    loop = asyncio.get_running_loop()
    times: list[float] = []

    async def call() -> None:
        times.append(loop.time())

    await asyncio.gather(*(limiter.run(call) for _ in range(count)))
    return times


class TestConstruction:
    """Argument validation."""

    def test_defaults(self) -> None:
        limiter = IntervalRateLimiter()
        assert limiter.capacity == 20
        assert limiter.interval == 1.0
        assert limiter.max_pending is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"capacity": 0}, {"interval": 0}, {"interval": -1.0}, {"max_pending": 0}],
    )
    def test_rejects_invalid_arguments(self, kwargs) -> None:
        with pytest.raises(ValueError):
            IntervalRateLimiter(**kwargs)


class TestCeiling:
    """At most ``capacity`` dispatches in any window."""

    @pytest.mark.asyncio
    async def test_below_capacity_dispatches_immediately(self) -> None:
        limiter = IntervalRateLimiter(capacity=5, interval=10.0)

        times = await dispatch_times(limiter, 5)

        assert max(times) - min(times) < 0.05
        assert limiter.in_window == 5
        assert limiter.pending == 0

    @pytest.mark.asyncio
    async def test_overflow_waits_for_next_window(self) -> None:
        limiter = IntervalRateLimiter(capacity=20, interval=0.3)

        times = sorted(await dispatch_times(limiter, 25))

        assert len(times) == 25  # nothing dropped
        assert times[19] - times[0] < 0.3
        assert times[20] - times[0] >= 0.3 - TOLERANCE

    @pytest.mark.asyncio
    async def test_no_window_exceeds_capacity(self) -> None:
        limiter = IntervalRateLimiter(capacity=3, interval=0.1)

        times = sorted(await dispatch_times(limiter, 10))

        for i in range(len(times) - 3):
            assert times[i + 3] - times[i] >= 0.1 - TOLERANCE

    @pytest.mark.asyncio
    async def test_permits_expire(self) -> None:
        limiter = IntervalRateLimiter(capacity=2, interval=0.05)
        await limiter.acquire()
        await limiter.acquire()
        assert limiter.in_window == 2

        await asyncio.sleep(0.06)

        assert limiter.in_window == 0


class TestFairness:
    """Queued callers are released in arrival order."""

    @pytest.mark.asyncio
    async def test_fifo_order(self) -> None:
        limiter = IntervalRateLimiter(capacity=2, interval=0.05)
        order: list[int] = []

        def make_call(index: int):
            async def call() -> int:
                order.append(index)
                return index

            return call

        results = await asyncio.gather(*(limiter.run(make_call(i)) for i in range(8)))

        assert order == list(range(8))
        assert results == list(range(8))

    @pytest.mark.asyncio
    async def test_newcomer_does_not_overtake_queue(self) -> None:
        """A caller arriving while others wait joins the back of the queue."""
        limiter = IntervalRateLimiter(capacity=1, interval=0.05)
        order: list[str] = []

        async def tagged(tag: str) -> None:
            await limiter.acquire()
            order.append(tag)

        await limiter.acquire()
        first = asyncio.create_task(tagged("first"))
        await asyncio.sleep(0)
        second = asyncio.create_task(tagged("second"))
        await asyncio.gather(first, second)

        assert order == ["first", "second"]


class TestBoundedQueue:
    """Optional max_pending bound."""

    @pytest.mark.asyncio
    async def test_rejects_when_queue_full(self) -> None:
        limiter = IntervalRateLimiter(capacity=1, interval=0.1, max_pending=1)
        await limiter.acquire()
        queued = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0)
        assert limiter.pending == 1

        with pytest.raises(RateLimitQueueFullError) as exc_info:
            await limiter.acquire()

        assert exc_info.value.max_pending == 1
        await queued

    @pytest.mark.asyncio
    async def test_unbounded_by_default(self) -> None:
        limiter = IntervalRateLimiter(capacity=1, interval=0.02)

        times = await dispatch_times(limiter, 6)

        assert len(times) == 6


class TestCancellation:
    """Cancelled waiters leave the queue."""

    @pytest.mark.asyncio
    async def test_cancelled_waiter_never_dispatches(self) -> None:
        limiter = IntervalRateLimiter(capacity=1, interval=0.05)
        dispatched: list[str] = []

        async def call(tag: str) -> None:
            dispatched.append(tag)

        await limiter.acquire()
        cancelled = asyncio.create_task(limiter.run(lambda: call("cancelled")))
        survivor = asyncio.create_task(limiter.run(lambda: call("survivor")))
        await asyncio.sleep(0)
        assert limiter.pending == 2

        cancelled.cancel()
        with pytest.raises(asyncio.CancelledError):
            await cancelled
        await survivor

        assert dispatched == ["survivor"]
        assert limiter.pending == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_frees_its_place(self) -> None:
        """The next waiter takes the permit the cancelled one would have had."""
        limiter = IntervalRateLimiter(capacity=1, interval=0.1)
        loop = asyncio.get_running_loop()

        await limiter.acquire()
        start = loop.time()
        cancelled = asyncio.create_task(limiter.acquire())
        survivor = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0)
        cancelled.cancel()

        await survivor

        assert loop.time() - start < 0.2 - TOLERANCE


class TestFailures:
    """Failures of the wrapped call propagate unchanged."""

    @pytest.mark.asyncio
    async def test_exception_propagates(self) -> None:
        limiter = IntervalRateLimiter(capacity=2, interval=1.0)

        async def boom() -> None:
            raise ConnectionError("reset")

        with pytest.raises(ConnectionError, match="reset"):
            await limiter.run(boom)

        # The permit was still used
        assert limiter.in_window == 1

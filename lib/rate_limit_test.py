"""Tests for the minimum-interval rate limiter."""

import asyncio

import pytest

from lib.rate_limit import RateLimiter


class FakeClock:
    """Monotonic clock that only advances when slept on."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.no_db
class TestRateLimiter:
    """Unit tests for RateLimiter."""

    @pytest.mark.asyncio
    async def test_first_acquire_does_not_wait(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        await limiter.acquire()

        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_back_to_back_acquires_wait_full_interval(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        await limiter.acquire()
        await limiter.acquire()

        assert clock.sleeps == [pytest.approx(0.5), pytest.approx(0.5)]

    @pytest.mark.asyncio
    async def test_waits_only_remaining_interval(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        clock.now += 0.75
        await limiter.acquire()

        assert clock.sleeps == [pytest.approx(0.25)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        clock.now += 5
        await limiter.acquire()

        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_concurrent_acquires_are_serialized(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        await asyncio.gather(*(limiter.acquire() for _ in range(4)))

        assert clock.sleeps == [pytest.approx(1.0)] * 3

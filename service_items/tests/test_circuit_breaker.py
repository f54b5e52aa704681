"""
Unit tests for the circuit breaker guarding the cache.
"""

import asyncio

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from service_items.tests.fakes import ManualClock


async def _fail():
    raise ConnectionError("down")


async def _ok():
    return "ok"


class TestCircuitBreaker:
    """Test cases for CircuitBreaker."""

    @pytest.fixture
    def clock(self):
        return ManualClock()

    @pytest.fixture
    def breaker(self, clock):
        return CircuitBreaker(failure_threshold=2, recovery_timeout=10.0, name="test", clock=clock)

    async def _trip(self, breaker):
        for _ in range(breaker.failure_threshold):
            with pytest.raises(ConnectionError):
                await breaker.call(_fail)
        assert breaker.is_open()

    @pytest.mark.asyncio
    async def test_open_breaker_blocks_until_recovery_timeout(self, breaker, clock):
        """Calls are rejected without running while the breaker is open."""
        await self._trip(breaker)

        calls = []

        async def _record():
            calls.append(1)

        clock.advance(5.0)
        with pytest.raises(CircuitBreakerOpenException):
            await breaker.call(_record)
        assert calls == []

    @pytest.mark.asyncio
    async def test_half_open_admits_a_single_trial_call(self, breaker, clock):
        """Concurrent callers are rejected while the trial call is in flight."""
        await self._trip(breaker)
        clock.advance(10.0)

        release = asyncio.Event()

        async def _slow_ok():
            await release.wait()
            return "recovered"

        trial = asyncio.create_task(breaker.call(_slow_ok))
        await asyncio.sleep(0)

        for _ in range(3):
            with pytest.raises(CircuitBreakerOpenException):
                await breaker.call(_ok)

        release.set()
        assert await trial == "recovered"
        assert not breaker.is_open()
        assert await breaker.call(_ok) == "ok"

    @pytest.mark.asyncio
    async def test_failed_trial_reopens_the_breaker(self, breaker, clock):
        """A failing trial call sends the breaker back to open."""
        await self._trip(breaker)
        clock.advance(10.0)

        with pytest.raises(ConnectionError):
            await breaker.call(_fail)

        assert breaker.is_open()
        with pytest.raises(CircuitBreakerOpenException):
            await breaker.call(_ok)

        clock.advance(10.0)
        assert await breaker.call(_ok) == "ok"

    @pytest.mark.asyncio
    async def test_cancelled_trial_frees_the_slot(self, breaker, clock):
        """Cancelling the trial lets the next caller try again."""
        await self._trip(breaker)
        clock.advance(10.0)

        trial = asyncio.create_task(breaker.call(asyncio.sleep, 60))
        await asyncio.sleep(0)
        trial.cancel()
        with pytest.raises(asyncio.CancelledError):
            await trial

        assert await breaker.call(_ok) == "ok"
        assert not breaker.is_open()

import pytest
from unittest.mock import AsyncMock

from lora.exceptions import CircuitBreakerOpenException
from lora.utils.circuit_breaker import CircuitBreaker, CircuitState
from lora.utils.rate_limiter import RateLimiter, get_rate_limiter


@pytest.mark.asyncio
class TestCircuitBreaker:
    """Tests for the per-verifier circuit breaker."""

    async def test_success_passes_through(self):
        breaker = CircuitBreaker(name="test")
        assert await breaker.call(AsyncMock(return_value={"verdict": "true"})) == {"verdict": "true"}
        assert breaker.state == CircuitState.CLOSED

    async def test_opens_after_threshold(self):
        breaker = CircuitBreaker(failure_threshold=3, name="test")
        failing = AsyncMock(side_effect=RuntimeError("down"))
        for _ in range(3):
            with pytest.raises(RuntimeError):
                await breaker.call(failing)

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerOpenException):
            await breaker.call(failing)
        assert failing.await_count == 3

    async def test_success_resets_failure_count(self):
        breaker = CircuitBreaker(failure_threshold=2, name="test")
        with pytest.raises(RuntimeError):
            await breaker.call(AsyncMock(side_effect=RuntimeError("down")))
        await breaker.call(AsyncMock(return_value=None))
        assert breaker.failure_count == 0

    async def test_half_open_probe_closes_on_success(self):
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=0.0, name="test")
        with pytest.raises(RuntimeError):
            await breaker.call(AsyncMock(side_effect=RuntimeError("down")))
        assert breaker.state == CircuitState.OPEN

        await breaker.call(AsyncMock(return_value="ok"))
        assert breaker.state == CircuitState.CLOSED

    async def test_half_open_probe_reopens_on_failure(self):
        breaker = CircuitBreaker(failure_threshold=5, recovery_timeout=0.0, name="test")
        breaker._state = CircuitState.OPEN
        breaker._opened_at = 0.0

        with pytest.raises(RuntimeError):
            await breaker.call(AsyncMock(side_effect=RuntimeError("still down")))
        assert breaker.state == CircuitState.OPEN


@pytest.mark.asyncio
class TestRateLimiter:
    async def test_first_call_is_not_delayed(self):
        limiter = RateLimiter(calls_per_second=1.0)
        with pytest.MonkeyPatch.context() as mp:
            sleep = AsyncMock()
            mp.setattr("lora.utils.rate_limiter.asyncio.sleep", sleep)
            await limiter.acquire()
        sleep.assert_not_awaited()

    async def test_back_to_back_calls_are_spaced(self):
        limiter = RateLimiter(calls_per_second=2.0)
        with pytest.MonkeyPatch.context() as mp:
            sleep = AsyncMock()
            mp.setattr("lora.utils.rate_limiter.asyncio.sleep", sleep)
            await limiter.acquire()
            await limiter.acquire()
        sleep.assert_awaited_once()
        assert 0 < sleep.await_args.args[0] <= 0.5

    async def test_limiters_are_shared_per_provider(self):
        assert get_rate_limiter("unit-test-provider") is get_rate_limiter("unit-test-provider")

"""Unit tests for the circuit breaker."""

import pytest

from mindful.core.resilience import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpen,
    CircuitState,
)


class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(
        CircuitBreakerConfig(failure_threshold=2, recovery_timeout=30.0, success_threshold=1, name="test"),
        clock=clock,
    )


async def failing():
    raise RuntimeError("boom")


async def succeeding():
    return "ok"


async def test_passes_through_results(breaker):
    assert await breaker.call_async(succeeding) == "ok"
    assert breaker.state == CircuitState.CLOSED


async def test_opens_after_threshold(breaker):
    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call_async(failing)

    assert breaker.state == CircuitState.OPEN
    with pytest.raises(CircuitBreakerOpen):
        await breaker.call_async(succeeding)


async def test_success_resets_failure_count(breaker):
    with pytest.raises(RuntimeError):
        await breaker.call_async(failing)
    await breaker.call_async(succeeding)
    with pytest.raises(RuntimeError):
        await breaker.call_async(failing)

    assert breaker.state == CircuitState.CLOSED


async def test_half_open_after_recovery_timeout(breaker, clock):
    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call_async(failing)

    clock.now += 31.0
    assert breaker.state == CircuitState.HALF_OPEN

    assert await breaker.call_async(succeeding) == "ok"
    assert breaker.state == CircuitState.CLOSED


async def test_failure_while_half_open_reopens(breaker, clock):
    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call_async(failing)

    clock.now += 31.0
    with pytest.raises(RuntimeError):
        await breaker.call_async(failing)

    assert breaker.state == CircuitState.OPEN


def test_reset(breaker):
    breaker.record_failure()
    breaker.record_failure()
    assert breaker.state == CircuitState.OPEN

    breaker.reset()
    assert breaker.state == CircuitState.CLOSED

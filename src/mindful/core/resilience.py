"""
Resilience patterns for external service calls.

Implements a circuit breaker so an optional collaborator that keeps failing
stops being called and its fallback answers immediately.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar('T')


class CircuitState(str, Enum):
    """
    Circuit breaker states.

    State transitions:
        CLOSED -> OPEN (after failure_threshold failures)
        OPEN -> HALF_OPEN (after recovery_timeout)
        HALF_OPEN -> CLOSED (after success_threshold successes)
        HALF_OPEN -> OPEN (on any failure)
    """
    CLOSED = "closed"        # Normal operation, requests allowed
    OPEN = "open"           # Failing, reject requests immediately
    HALF_OPEN = "half_open" # Testing recovery, limited requests


@dataclass
class CircuitBreakerConfig:
    """Circuit breaker configuration."""
    failure_threshold: int = 5      # Failures before opening
    recovery_timeout: float = 60.0  # Seconds before attempting recovery
    success_threshold: int = 2      # Successes to close from half-open
    name: str = "circuit"           # For logging


class CircuitBreakerOpen(Exception):
    """Raised when circuit breaker is open."""

    def __init__(self, circuit_name: str, retry_after: float):
        self.circuit_name = circuit_name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker '{circuit_name}' is OPEN. "
            f"Retry after {retry_after:.1f}s"
        )


class CircuitBreaker:
    """
    Circuit breaker pattern implementation.

    Thread Safety:
        All state access protected by threading.Lock; no lock is held
        across an await.

    Example:
        >>> breaker = CircuitBreaker(CircuitBreakerConfig(name="classifier"))
        >>> try:
        ...     mode = await breaker.call_async(llm_classify, text)
        ... except CircuitBreakerOpen:
        ...     mode = keyword_classify(text)
    """

    def __init__(
        self,
        config: CircuitBreakerConfig,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            config: Circuit breaker configuration
            clock: Monotonic time source in seconds
        """
        self.config = config
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: float | None = None
        self._lock = threading.Lock()

        logger.info(
            f"[{config.name}] Circuit breaker initialized: "
            f"failure_threshold={config.failure_threshold}, "
            f"recovery_timeout={config.recovery_timeout}s"
        )

    @property
    def state(self) -> CircuitState:
        """Current state, moving OPEN -> HALF_OPEN once the recovery timeout passed."""
        with self._lock:
            if self._state == CircuitState.OPEN and self._last_failure_time is not None:
                if self._clock() - self._last_failure_time >= self.config.recovery_timeout:
                    logger.info(f"[{self.config.name}] Circuit transitioning to HALF_OPEN")
                    self._state = CircuitState.HALF_OPEN
                    self._success_count = 0

            return self._state

    def _retry_after(self) -> float:
        with self._lock:
            if self._last_failure_time is None:
                return 0.0
            elapsed = self._clock() - self._last_failure_time
            return max(0.0, self.config.recovery_timeout - elapsed)

    async def call_async(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """
        Await func with circuit breaker protection.

        Raises:
            CircuitBreakerOpen: If circuit is open
            Exception: Any exception from func (after recording)
        """
        if self.state == CircuitState.OPEN:
            raise CircuitBreakerOpen(self.config.name, self._retry_after())

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise

        self.record_success()
        return result

    def record_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.config.success_threshold:
                    logger.info(f"[{self.config.name}] Circuit CLOSED after recovery")
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    self._success_count = 0
            else:
                self._failure_count = 0

    def record_failure(self) -> None:
        with self._lock:
            self._last_failure_time = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(f"[{self.config.name}] Failure while HALF_OPEN, reopening circuit")
                self._state = CircuitState.OPEN
                self._success_count = 0
                return

            self._failure_count += 1
            if self._failure_count >= self.config.failure_threshold:
                logger.warning(
                    f"[{self.config.name}] Circuit OPEN after "
                    f"{self._failure_count} consecutive failures"
                )
                self._state = CircuitState.OPEN

    def reset(self) -> None:
        """Force the circuit back to CLOSED."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._success_count = 0
            self._last_failure_time = None

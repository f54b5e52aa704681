"""
Circuit breaker for best-effort dependencies.
"""

import time
from enum import Enum
from typing import Any, Callable, Awaitable

from shared.logging import get_logger


class CircuitBreakerState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Failing, requests blocked
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreakerOpenException(Exception):
    """Exception raised when circuit breaker is open."""
    pass


class CircuitBreaker:
    """Circuit breaker implementation.

    While half-open exactly one trial call is let through; concurrent
    callers are rejected until that trial settles the state.
    """

    def __init__(self,
                 failure_threshold: int = 5,
                 recovery_timeout: float = 60.0,
                 name: str = "default",
                 clock: Callable[[], float] = time.monotonic):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.name = name
        self.logger = get_logger(f"items.circuit_breaker.{name}")
        self._clock = clock

        self._state = CircuitBreakerState.CLOSED
        self._failure_count = 0
        self._last_failure_time = 0.0
        self._trial_in_flight = False

    def _can_attempt_reset(self) -> bool:
        return (self._clock() - self._last_failure_time) >= self.recovery_timeout

    def _should_attempt_call(self) -> bool:
        if self._state == CircuitBreakerState.OPEN:
            if not self._can_attempt_reset():
                return False
            self._state = CircuitBreakerState.HALF_OPEN
            self.logger.info("Circuit breaker transitioning to half-open")

        if self._state == CircuitBreakerState.HALF_OPEN:
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
        return True

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Execute function with circuit breaker protection."""
        if not self._should_attempt_call():
            raise CircuitBreakerOpenException(
                f"Circuit breaker '{self.name}' is OPEN - blocking call"
            )
        is_trial = self._state == CircuitBreakerState.HALF_OPEN

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._record_failure()
            raise
        finally:
            if is_trial:
                self._trial_in_flight = False

        if self._state == CircuitBreakerState.HALF_OPEN:
            self.logger.info("Circuit breaker reset to CLOSED after successful call")
        self._state = CircuitBreakerState.CLOSED
        self._failure_count = 0
        return result

    def _record_failure(self):
        """Record a failure and update state."""
        self._failure_count += 1
        self._last_failure_time = self._clock()

        if self._state == CircuitBreakerState.HALF_OPEN or self._failure_count >= self.failure_threshold:
            if self._state != CircuitBreakerState.OPEN:
                self.logger.warning(
                    "Circuit breaker opened due to failures",
                    failure_count=self._failure_count,
                    threshold=self.failure_threshold
                )
            self._state = CircuitBreakerState.OPEN

    def is_open(self) -> bool:
        """Check if circuit breaker is in OPEN state."""
        return self._state == CircuitBreakerState.OPEN

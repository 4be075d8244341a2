"""Circuit breaker guarding calls to the AI service.

State machine: CLOSED → OPEN → HALF_OPEN → CLOSED.

- CLOSED: Calls pass through. Consecutive failures tracked.
- OPEN: Calls rejected with CircuitOpenError until recovery_timeout elapses,
  then the breaker moves to HALF_OPEN.
- HALF_OPEN: Trial calls allowed. Success → CLOSED, failure → OPEN.

The breaker never retries anything; it only fails fast while the upstream
is known to be down.

Usage:
    breaker = AICircuitBreaker(failure_threshold=5, recovery_timeout=60.0)
    breaker.before_call()          # raises CircuitOpenError when OPEN
    try:
        result = await upstream()
    except Exception:
        breaker.record_failure()
        raise
    breaker.record_success()
"""

import enum
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class CircuitState(enum.Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""


class AICircuitBreaker:
    """Fail-fast protection for a flaky upstream.

    Args:
        failure_threshold: Consecutive failures before opening circuit.
        recovery_timeout: Seconds before letting a trial call through.
        name: Name used in log lines.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        name: str = "ai",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._name = name
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: float = 0.0

    @property
    def state(self) -> CircuitState:
        """Current circuit state."""
        return self._state

    @property
    def consecutive_failures(self) -> int:
        """Number of consecutive failures."""
        return self._consecutive_failures

    def before_call(self) -> None:
        """Admit a call or reject it.

        Raises:
            CircuitOpenError: If the circuit is OPEN and the recovery
                timeout has not elapsed.
        """
        if self._state != CircuitState.OPEN:
            return
        if self._clock() - self._opened_at >= self._recovery_timeout:
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit breaker %s: OPEN → HALF_OPEN (trial call)", self._name)
            return
        raise CircuitOpenError(f"Circuit breaker {self._name} is OPEN")

    def record_success(self) -> None:
        """Close the circuit and reset the failure count."""
        if self._state == CircuitState.HALF_OPEN:
            logger.info("Circuit breaker %s: HALF_OPEN → CLOSED (trial call succeeded)", self._name)
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0

    def record_failure(self) -> None:
        """Record a failure and potentially open the circuit."""
        self._consecutive_failures += 1

        if self._state == CircuitState.HALF_OPEN:
            self._open()
            logger.warning("Circuit breaker %s: HALF_OPEN → OPEN (trial call failed)", self._name)
        elif (
            self._state == CircuitState.CLOSED
            and self._consecutive_failures >= self._failure_threshold
        ):
            self._open()
            logger.warning(
                "Circuit breaker %s: CLOSED → OPEN after %d failures",
                self._name,
                self._consecutive_failures,
            )

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()

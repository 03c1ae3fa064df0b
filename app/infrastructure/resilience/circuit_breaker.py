"""Circuit breaker implementation for outbound dependency protection.

The circuit breaker pattern prevents cascading failures by:
1. CLOSED state: Normal operation, calls pass through, failures are counted
2. OPEN state: Fast-fail calls without touching the dependency
3. HALF_OPEN state: Admit a limited number of probe calls to test recovery

State transitions:
- CLOSED -> OPEN: After failure_threshold consecutive failures
- OPEN -> HALF_OPEN: After recovery_timeout has elapsed since the last failure
- HALF_OPEN -> CLOSED: After half_open_max_calls probe successes
- HALF_OPEN -> OPEN: If any probe fails (recovery timer restarts)
"""

import threading
import time
from enum import Enum
from typing import Callable, Any, Optional, Dict

from infrastructure.logging import get_module_logger
from infrastructure.operations.errors import ChannelError

logger = get_module_logger()


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls immediately
    HALF_OPEN = "half_open"  # Testing recovery


class CircuitBreakerOpenError(ChannelError):
    """Raised when the circuit is open and the call is rejected.

    Classified as channel-specific so callers fall through to the next
    channel instead of retrying against a dependency known to be down.
    """

    default_code = "CIRCUIT_OPEN"

    def __init__(self, name: str, message: str):
        super().__init__(name, message, code=self.default_code)
        self.breaker_name = name


class CircuitBreaker:
    """Circuit breaker guarding calls to one dependency.

    Args:
        name: Dependency key, e.g. ``"push:sns"``
        failure_threshold: Consecutive failures before opening
        recovery_timeout: Seconds to wait after the last failure before probing
        half_open_max_calls: Probes admitted in HALF_OPEN; this many successes
            close the circuit
        clock: Time source in seconds; injectable for tests
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        half_open_max_calls: int = 3,
        clock: Callable[[], float] = time.time,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if half_open_max_calls < 1:
            raise ValueError("half_open_max_calls must be at least 1")

        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.half_open_max_calls = half_open_max_calls
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: Optional[float] = None
        self._half_open_calls = 0

        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Current circuit state, applying a due OPEN -> HALF_OPEN transition."""
        with self._lock:
            if self._state == CircuitState.OPEN and self._should_attempt_reset():
                self._transition_to_half_open()
            return self._state

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """Execute function through circuit breaker.

        Args:
            func: Function to call
            *args, **kwargs: Arguments to pass to function

        Returns:
            Result from function, unchanged

        Raises:
            CircuitBreakerOpenError: If the circuit rejects the call
            Exception: Any exception raised by func, unchanged
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    self._transition_to_half_open()
                else:
                    remaining = self.recovery_timeout - (
                        self._clock() - (self._last_failure_time or 0.0)
                    )
                    logger.warning(
                        "circuit_breaker_rejected",
                        name=self.name,
                        failure_count=self._failure_count,
                        retry_in_seconds=max(0, int(remaining)),
                    )
                    raise CircuitBreakerOpenError(
                        self.name,
                        f"Circuit breaker '{self.name}' is OPEN. "
                        f"Retry in {max(0, int(remaining))} seconds.",
                    )

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self.half_open_max_calls:
                    logger.debug(
                        "circuit_breaker_half_open_limit",
                        name=self.name,
                        calls=self._half_open_calls,
                    )
                    raise CircuitBreakerOpenError(
                        self.name,
                        f"Circuit breaker '{self.name}' is HALF_OPEN "
                        f"(probe limit reached).",
                    )
                self._half_open_calls += 1

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def execute(self, operation: Callable[[], Any]) -> Any:
        """Run a zero-argument operation through the breaker."""
        return self.call(operation)

    def _on_success(self):
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                logger.info(
                    "circuit_breaker_probe_succeeded",
                    name=self.name,
                    success_count=self._success_count,
                    required=self.half_open_max_calls,
                )
                if self._success_count >= self.half_open_max_calls:
                    self._transition_to_closed()
            elif self._state == CircuitState.CLOSED and self._failure_count > 0:
                logger.debug(
                    "circuit_breaker_failure_count_reset",
                    name=self.name,
                    previous_failures=self._failure_count,
                )
                self._failure_count = 0

    def _on_failure(self, exception: Exception):
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(
                    "circuit_breaker_recovery_failed",
                    name=self.name,
                    error=str(exception),
                )
                self._transition_to_open()
            elif self._state == CircuitState.CLOSED:
                if self._failure_count >= self.failure_threshold:
                    logger.error(
                        "circuit_breaker_threshold_exceeded",
                        name=self.name,
                        failure_count=self._failure_count,
                        threshold=self.failure_threshold,
                        error=str(exception),
                    )
                    self._transition_to_open()
                else:
                    logger.warning(
                        "circuit_breaker_failure",
                        name=self.name,
                        failure_count=self._failure_count,
                        threshold=self.failure_threshold,
                        error=str(exception),
                    )

    def _should_attempt_reset(self) -> bool:
        if self._last_failure_time is None:
            return True
        return self._clock() - self._last_failure_time >= self.recovery_timeout

    def _transition_to_closed(self):
        logger.info("circuit_breaker_closed", name=self.name)
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._half_open_calls = 0

    def _transition_to_open(self):
        logger.error(
            "circuit_breaker_opened",
            name=self.name,
            recovery_timeout=self.recovery_timeout,
        )
        self._state = CircuitState.OPEN
        self._success_count = 0
        self._half_open_calls = 0

    def _transition_to_half_open(self):
        logger.info("circuit_breaker_half_open", name=self.name)
        self._state = CircuitState.HALF_OPEN
        self._success_count = 0
        self._half_open_calls = 0

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "success_count": self._success_count,
            "last_failure_time": self._last_failure_time,
            "half_open_calls": self._half_open_calls,
        }

    def get_stats(self) -> dict:
        """Get circuit breaker statistics."""
        with self._lock:
            stats = self._snapshot()
            stats["seconds_since_last_failure"] = (
                self._clock() - self._last_failure_time
                if self._last_failure_time is not None
                else None
            )
            return stats

    def reset(self):
        """Force CLOSED with zeroed counters (administrative override)."""
        with self._lock:
            logger.info("circuit_breaker_manual_reset", name=self.name)
            self._last_failure_time = None
            self._transition_to_closed()

"""Resilience service.

Owns the process-wide circuit breaker registry and the shared retry
executor, and is passed by reference to the components that make
outbound calls.
"""

import time
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

import structlog
from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
)
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy

if TYPE_CHECKING:
    from infrastructure.configuration.infrastructure.resilience import (
        ResilienceSettings,
    )

logger = structlog.get_logger()


class ResilienceService:
    """Registry of circuit breakers keyed by dependency name.

    Breakers are created lazily on first use and live for the lifetime of
    the service. State is held in memory only; a new service (a new Lambda
    container) starts with every breaker closed.

    Usage:
        resilience = ResilienceService.from_settings(settings.resilience)

        breaker = resilience.get_or_create_circuit_breaker("email:sns")
        message_id = resilience.retry_executor.execute(
            lambda: breaker.call(channel.send, notification, config),
            policy=RetryPolicy(max_attempts=3),
            operation_name="notification.email",
        )
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        half_open_max_calls: int = 3,
        retry_executor: Optional[RetryExecutor] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.half_open_max_calls = half_open_max_calls
        self.retry_executor = retry_executor or RetryExecutor()
        self._clock = clock
        self._circuit_breakers: Dict[str, CircuitBreaker] = {}

    @classmethod
    def from_settings(
        cls,
        resilience_settings: "ResilienceSettings",
    ) -> "ResilienceService":
        return cls(
            failure_threshold=resilience_settings.circuit_breaker_failure_threshold,
            recovery_timeout=resilience_settings.circuit_breaker_recovery_timeout_seconds,
            half_open_max_calls=resilience_settings.circuit_breaker_half_open_max_calls,
            retry_executor=RetryExecutor(
                default_policy=RetryPolicy.from_settings(resilience_settings)
            ),
        )

    def create_circuit_breaker(
        self,
        name: str,
        failure_threshold: Optional[int] = None,
        recovery_timeout: Optional[float] = None,
        half_open_max_calls: Optional[int] = None,
    ) -> CircuitBreaker:
        """Create and register a new circuit breaker.

        Raises:
            ValueError: If circuit breaker with this name already exists
        """
        if name in self._circuit_breakers:
            raise ValueError(f"Circuit breaker '{name}' already exists")

        cb = CircuitBreaker(
            name=name,
            failure_threshold=failure_threshold or self.failure_threshold,
            recovery_timeout=(
                recovery_timeout
                if recovery_timeout is not None
                else self.recovery_timeout
            ),
            half_open_max_calls=half_open_max_calls or self.half_open_max_calls,
            clock=self._clock,
        )
        self._circuit_breakers[name] = cb

        logger.info(
            "circuit_breaker_created",
            name=name,
            failure_threshold=cb.failure_threshold,
            recovery_timeout=cb.recovery_timeout,
        )

        return cb

    def get_circuit_breaker(self, name: str) -> Optional[CircuitBreaker]:
        return self._circuit_breakers.get(name)

    def get_or_create_circuit_breaker(self, name: str, **overrides) -> CircuitBreaker:
        """Get existing circuit breaker or create it with the service defaults."""
        existing = self.get_circuit_breaker(name)
        if existing:
            return existing
        return self.create_circuit_breaker(name, **overrides)

    def call_with_circuit_breaker(
        self,
        name: str,
        func: Callable,
        *args,
        **kwargs,
    ) -> Any:
        """Execute function through the named circuit breaker."""
        cb = self.get_or_create_circuit_breaker(name)
        return cb.call(func, *args, **kwargs)

    def get_all_circuit_breaker_stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: cb.get_stats() for name, cb in self._circuit_breakers.items()}

    def get_open_circuit_breakers(self) -> list[str]:
        return [
            name
            for name, cb in self._circuit_breakers.items()
            if cb.state == CircuitState.OPEN
        ]

    def reset_circuit_breaker(self, name: str) -> None:
        """Manually reset a circuit breaker.

        Raises:
            KeyError: If circuit breaker not found
        """
        cb = self._circuit_breakers.get(name)
        if not cb:
            raise KeyError(f"Circuit breaker '{name}' not found")
        cb.reset()

    def list_circuit_breakers(self) -> list[str]:
        return list(self._circuit_breakers.keys())

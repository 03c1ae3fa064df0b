"""Resilience patterns.

Circuit breakers, the breaker registry, retry policies and the retry
executor that protect every outbound call.
"""

from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitState,
)
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from infrastructure.resilience.service import ResilienceService

__all__ = [
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "ResilienceService",
    # Retry
    "RetryPolicy",
    "RetryExecutor",
]

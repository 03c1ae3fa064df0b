"""Fixtures for infrastructure resilience tests."""

import pytest

from infrastructure.resilience.circuit_breaker import CircuitBreaker

@pytest.fixture
def breaker_factory(fake_clock):
    """Factory for CircuitBreaker instances sharing the manual clock.

    Example:
        breaker = breaker_factory(failure_threshold=2)
        fake_clock.advance(61)
    """

    def _factory(name: str = "push:sns", **kwargs) -> CircuitBreaker:
        kwargs.setdefault("failure_threshold", 3)
        kwargs.setdefault("recovery_timeout", 60)
        kwargs.setdefault("half_open_max_calls", 2)
        return CircuitBreaker(name, clock=fake_clock, **kwargs)

    return _factory

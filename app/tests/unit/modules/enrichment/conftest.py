"""Fixtures for enrichment tests."""

from unittest.mock import MagicMock

import pytest

from modules.enrichment import CostAwareRateLimiter
from modules.spend_monitor import CostSnapshot

MODEL_ID = "amazon.titan-text-express-v1"


@pytest.fixture
def model_provider():
    """EnrichmentProvider mock answering every prompt with 400 characters."""
    provider = MagicMock()
    provider.invoke.return_value = "x" * 400
    return provider


@pytest.fixture
def limiter_factory(model_provider, fake_clock):
    """Factory for CostAwareRateLimiter on the fake clock.

    Example:
        limiter = limiter_factory(monthly_ceiling=1.0, store=memory_store)
    """

    def _factory(**kwargs) -> CostAwareRateLimiter:
        kwargs.setdefault("clock", fake_clock)
        return CostAwareRateLimiter(model_provider, MODEL_ID, **kwargs)

    return _factory


@pytest.fixture
def snapshot():
    return CostSnapshot(
        total_cost=15.50,
        service_breakdown={"Amazon EC2": 8.25, "Amazon S3": 4.10, "Tax": 3.15},
        period_start="2024-03-01",
        period_end="2024-03-15",
        projected_monthly=32.03,
    )

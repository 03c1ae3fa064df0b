"""Fixtures for spend monitor tests."""

import pytest

from modules.spend_monitor import CostSnapshot


@pytest.fixture
def snapshot_factory():
    """Factory for CostSnapshot instances.

    Example:
        snapshot = snapshot_factory(total_cost=15.50)
    """

    def _factory(total_cost=15.50, service_breakdown=None, **kwargs) -> CostSnapshot:
        if service_breakdown is None:
            service_breakdown = {"Amazon EC2": 8.25, "Amazon S3": 4.10, "Tax": 3.15}
        kwargs.setdefault("period_start", "2024-03-01")
        kwargs.setdefault("period_end", "2024-03-15")
        kwargs.setdefault("projected_monthly", 32.03)
        return CostSnapshot(
            total_cost=total_cost, service_breakdown=service_breakdown, **kwargs
        )

    return _factory

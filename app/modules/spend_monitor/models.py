"""Spend monitor data models."""

from datetime import datetime, timezone
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class CostSnapshot(BaseModel):
    """Month-to-date spend as reported by a metric source.

    Attributes:
        total_cost: Month-to-date total
        service_breakdown: Cost per service name (only services with cost > 0)
        period_start: First day of the period (ISO date)
        period_end: Last day covered (ISO date)
        projected_monthly: Linear projection to the end of the month
        currency: Currency unit of every amount
    """

    model_config = ConfigDict(frozen=True)

    total_cost: float = 0.0
    service_breakdown: Dict[str, float] = Field(default_factory=dict)
    period_start: str
    period_end: str
    projected_monthly: float = 0.0
    currency: str = "USD"
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(
        cls, period_start: str, period_end: str, currency: str = "USD"
    ) -> "CostSnapshot":
        return cls(period_start=period_start, period_end=period_end, currency=currency)

"""Enrichment data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from infrastructure.notifications.models import AIAnalysis


@dataclass
class BudgetTracker:
    """Cumulative enrichment spend for the current month.

    Mutated only under the rate limiter's lock. ``monthly_cost`` never
    decreases within a period; ``window_calls`` counts invocations in the
    current one-minute window.
    """

    ceiling: float
    period: str
    monthly_cost: float = 0.0
    window_calls: int = 0
    window_start: float = 0.0

    @property
    def utilization(self) -> float:
        return self.monthly_cost / self.ceiling if self.ceiling > 0 else 1.0

    @property
    def remaining(self) -> float:
        return max(0.0, self.ceiling - self.monthly_cost)

    def to_item(self) -> Dict[str, Any]:
        return {
            "ceiling": self.ceiling,
            "period": self.period,
            "monthly_cost": self.monthly_cost,
        }


class EnrichmentResult(BaseModel):
    """Outcome of one enrichment request.

    Attributes:
        text: Model output, empty when fallback
        cost: Estimated cost charged to the budget (0 for cache hits)
        cached: Served from the result cache
        fallback: No model output; the caller should degrade
        fallback_reason: Error code explaining the fallback
    """

    text: str = ""
    cost: float = 0.0
    cached: bool = False
    fallback: bool = False
    fallback_reason: Optional[str] = None

    @classmethod
    def degraded(cls, reason: str) -> "EnrichmentResult":
        return cls(fallback=True, fallback_reason=reason)


class CostAnalysis(BaseModel):
    """AI (or fallback) analysis of a cost snapshot."""

    summary: str
    key_insights: List[str] = Field(default_factory=list)
    confidence_score: float = 0.0
    model_used: str
    fallback: bool = False
    analysis_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @field_validator("confidence_score")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        return max(0.0, min(1.0, v))

    def to_alert_analysis(self) -> AIAnalysis:
        return AIAnalysis(
            summary=self.summary,
            key_insights=tuple(self.key_insights),
            confidence_score=self.confidence_score,
            fallback=self.fallback,
        )

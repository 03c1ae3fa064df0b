"""AI enrichment of spend alerts.

Optional and non-blocking: every failure path degrades to a deterministic
fallback analysis so alert delivery is never held up.
"""

from modules.enrichment.analysis import (
    CostInsightsAnalyzer,
    build_analysis_prompt,
    fallback_analysis,
    parse_analysis,
)
from modules.enrichment.errors import (
    BudgetExceededError,
    EnrichmentError,
    MalformedResponseError,
    RateLimitExceededError,
)
from modules.enrichment.models import BudgetTracker, CostAnalysis, EnrichmentResult
from modules.enrichment.provider import BedrockEnrichmentProvider
from modules.enrichment.rate_limiter import (
    CostAwareRateLimiter,
    EnrichmentProvider,
    estimate_cost,
    estimate_tokens,
)

__all__ = [
    "BedrockEnrichmentProvider",
    "BudgetExceededError",
    "BudgetTracker",
    "CostAnalysis",
    "CostAwareRateLimiter",
    "CostInsightsAnalyzer",
    "EnrichmentError",
    "EnrichmentProvider",
    "EnrichmentResult",
    "MalformedResponseError",
    "RateLimitExceededError",
    "build_analysis_prompt",
    "estimate_cost",
    "estimate_tokens",
    "fallback_analysis",
    "parse_analysis",
]

"""Spend analysis built on the enrichment rate limiter."""

import json
import re
from typing import Any, Dict, Optional, TYPE_CHECKING

from infrastructure.logging import get_module_logger
from modules.enrichment.models import CostAnalysis
from modules.enrichment.rate_limiter import CostAwareRateLimiter

if TYPE_CHECKING:
    from modules.spend_monitor.models import CostSnapshot

logger = get_module_logger()

FALLBACK_MODEL = "fallback"
FALLBACK_CONFIDENCE = 0.3
PROMPT_TOP_SERVICES = 10

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def build_analysis_prompt(snapshot: "CostSnapshot") -> str:
    """Prompt asking for ``{summary, keyInsights, confidenceScore}`` JSON."""
    services = sorted(
        snapshot.service_breakdown.items(), key=lambda item: item[1], reverse=True
    )[:PROMPT_TOP_SERVICES]
    service_lines = "\n".join(f"{name}: ${cost:.2f}" for name, cost in services)

    return f"""Analyze the following AWS cost data and provide insights:

Current Month-to-Date Cost: ${snapshot.total_cost:.2f}
Projected Monthly Cost: ${snapshot.projected_monthly:.2f}
Period: {snapshot.period_start} to {snapshot.period_end}

Top Services by Cost:
{service_lines}

Please provide:
1. A concise summary of spending patterns (2-3 sentences)
2. Key insights about cost drivers and trends (3-5 bullet points)
3. Confidence score (0.0 to 1.0) for this analysis

Format your response as JSON:
{{
  "summary": "Brief summary of spending patterns",
  "keyInsights": ["Insight 1", "Insight 2", "Insight 3"],
  "confidenceScore": 0.85
}}

Ensure the response is valid JSON and confidence score is between 0.0 and 1.0."""


def parse_analysis(text: str) -> Optional[Dict[str, Any]]:
    """Extract and validate the JSON object in a model response."""
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        return None
    if (
        not isinstance(parsed, dict)
        or not parsed.get("summary")
        or not isinstance(parsed.get("keyInsights"), list)
        or not isinstance(parsed.get("confidenceScore"), (int, float))
    ):
        return None
    return parsed


def fallback_analysis(snapshot: "CostSnapshot") -> CostAnalysis:
    """Deterministic analysis from the cost breakdown alone."""
    top = max(snapshot.service_breakdown.items(), key=lambda item: item[1], default=None)
    top_text = f"{top[0]} (${top[1]:.2f})" if top else "Unknown ($0.00)"
    return CostAnalysis(
        summary=(
            f"Current AWS spending is ${snapshot.total_cost:.2f} with projected "
            f"monthly cost of ${snapshot.projected_monthly:.2f}."
        ),
        key_insights=[
            f"Top cost driver: {top_text}",
            "AI analysis unavailable - using basic cost breakdown",
            "Consider reviewing high-cost services for optimization opportunities",
        ],
        confidence_score=FALLBACK_CONFIDENCE,
        model_used=FALLBACK_MODEL,
        fallback=True,
    )


class CostInsightsAnalyzer:
    """Produces a CostAnalysis for a snapshot, degrading when AI is unavailable."""

    def __init__(self, limiter: CostAwareRateLimiter):
        self._limiter = limiter

    def analyze(self, snapshot: "CostSnapshot", override: bool = False) -> CostAnalysis:
        result = self._limiter.enrich(build_analysis_prompt(snapshot), override=override)
        if result.fallback:
            logger.info("cost_analysis_fallback", reason=result.fallback_reason)
            return fallback_analysis(snapshot)

        parsed = parse_analysis(result.text)
        if parsed is None:
            logger.warning("cost_analysis_unparsable", cached=result.cached)
            return fallback_analysis(snapshot)

        return CostAnalysis(
            summary=str(parsed["summary"]),
            key_insights=[str(item) for item in parsed["keyInsights"]],
            confidence_score=float(parsed["confidenceScore"]),
            model_used=self._limiter.model_id,
        )

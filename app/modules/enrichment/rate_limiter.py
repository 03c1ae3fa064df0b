"""Cost-aware rate limiting for AI enrichment calls.

Every enrichment call is checked against two limits before it is made:

- a monthly spend ceiling, tracked from estimated per-call cost
- a per-minute call allowance that shrinks as the budget is consumed

Allowance by budget utilization ``u``:

- ``u < 0.8``: the nominal rate
- ``0.8 <= u < 1``: ``max(1, floor(nominal * (1 - u) / 0.2))``
- ``u >= 1``: zero; calls are refused until the month changes

Successful responses are cached by ``sha256(model_id + prompt)``; a cache
hit costs nothing and makes no call.
"""

import hashlib
import math
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.persistence.store import KeyValueStore
from modules.enrichment.errors import (
    BudgetExceededError,
    MalformedResponseError,
    RateLimitExceededError,
)
from modules.enrichment.models import BudgetTracker, EnrichmentResult

logger = get_module_logger()

WINDOW_SECONDS = 60
WARNING_UTILIZATION = 0.8
INPUT_COST_PER_1K_TOKENS = 0.0008
OUTPUT_COST_PER_1K_TOKENS = 0.0016
BUDGET_STORE_KEY = "enrichment_budget"


class EnrichmentProvider(Protocol):
    def invoke(self, prompt: str) -> str: ...


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters."""
    return math.ceil(len(text) / 4)


def estimate_cost(prompt: str, output_tokens: int) -> float:
    """Estimated invocation cost in USD, rounded to 5 decimals."""
    input_cost = estimate_tokens(prompt) / 1000 * INPUT_COST_PER_1K_TOKENS
    output_cost = output_tokens / 1000 * OUTPUT_COST_PER_1K_TOKENS
    return round(input_cost + output_cost, 5)


class CostAwareRateLimiter:
    """Budget- and rate-limited gateway in front of an EnrichmentProvider.

    Args:
        provider: Model invocation backend
        model_id: Model identifier, part of the cache key
        monthly_ceiling: Monthly budget in USD
        rate_limit_per_minute: Nominal calls per minute
        cache_ttl_minutes: Result cache lifetime
        fallback_on_error: ``enrich`` degrades instead of raising
        max_output_tokens: Output tokens assumed by the pre-call estimate
        store: Optional store persisting the monthly spend across invocations
        clock: Epoch seconds; injectable for tests

    Example:
        limiter = CostAwareRateLimiter(provider, "amazon.titan-text-express-v1")
        result = limiter.enrich(prompt)
        if not result.fallback:
            use(result.text)
    """

    def __init__(
        self,
        provider: EnrichmentProvider,
        model_id: str,
        monthly_ceiling: float = 10.0,
        rate_limit_per_minute: int = 10,
        cache_ttl_minutes: int = 60,
        fallback_on_error: bool = True,
        max_output_tokens: int = 1000,
        store: Optional[KeyValueStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        if monthly_ceiling <= 0:
            raise ValueError("monthly_ceiling must be positive")
        if rate_limit_per_minute < 1:
            raise ValueError("rate_limit_per_minute must be at least 1")

        self._provider = provider
        self.model_id = model_id
        self.rate_limit_per_minute = rate_limit_per_minute
        self.cache_ttl_seconds = cache_ttl_minutes * 60
        self.fallback_on_error = fallback_on_error
        self.max_output_tokens = max_output_tokens
        self._store = store
        self._clock = clock
        self._lock = threading.Lock()
        self._cache: Dict[str, Tuple[str, float]] = {}

        self._tracker = BudgetTracker(
            ceiling=monthly_ceiling,
            period=self._current_period(),
            window_start=clock(),
        )
        self._restore_budget()

    @classmethod
    def from_settings(
        cls,
        enrichment_settings,
        provider: EnrichmentProvider,
        store: Optional[KeyValueStore] = None,
    ) -> "CostAwareRateLimiter":
        return cls(
            provider,
            enrichment_settings.model_id,
            monthly_ceiling=enrichment_settings.monthly_spend_limit,
            rate_limit_per_minute=enrichment_settings.rate_limit_per_minute,
            cache_ttl_minutes=enrichment_settings.cache_ttl_minutes,
            fallback_on_error=enrichment_settings.fallback_on_error,
            max_output_tokens=enrichment_settings.max_tokens,
            store=store,
        )

    @property
    def tracker(self) -> BudgetTracker:
        return self._tracker

    def _current_period(self) -> str:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc).strftime("%Y-%m")

    def _roll_period(self) -> None:
        period = self._current_period()
        if period != self._tracker.period:
            logger.info(
                "enrichment_budget_period_rollover",
                previous_period=self._tracker.period,
                period=period,
                previous_cost=round(self._tracker.monthly_cost, 5),
            )
            self._tracker.period = period
            self._tracker.monthly_cost = 0.0
            self._persist_budget()

    def _roll_window(self) -> None:
        now = self._clock()
        if now - self._tracker.window_start >= WINDOW_SECONDS:
            self._tracker.window_calls = 0
            self._tracker.window_start = now

    def _cache_key(self, prompt: str) -> str:
        return hashlib.sha256((self.model_id + prompt).encode("utf-8")).hexdigest()

    def _cached(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        text, expires_at = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return None
        return text

    def effective_rate_limit(self) -> int:
        """Calls allowed per minute at the current budget utilization."""
        utilization = self._tracker.utilization
        if utilization >= 1.0:
            return 0
        if utilization < WARNING_UTILIZATION:
            return self.rate_limit_per_minute
        return max(
            1,
            math.floor(
                self.rate_limit_per_minute
                * (1 - utilization)
                / (1 - WARNING_UTILIZATION)
            ),
        )

    def invoke(self, prompt: str, override: bool = False) -> EnrichmentResult:
        """Call the provider if budget and rate allow.

        Args:
            prompt: Model prompt
            override: Skip the projected-spend check. The exhausted-budget
                stop still applies.

        Raises:
            BudgetExceededError: Budget exhausted, or the call would exceed it
            RateLimitExceededError: Allowance for this minute is used up
            MalformedResponseError: Empty model output
            Exception: Provider failures, unchanged
        """
        key = self._cache_key(prompt)
        with self._lock:
            self._roll_period()
            self._roll_window()

            cached = self._cached(key)
            if cached is not None:
                logger.debug("enrichment_cache_hit", model_id=self.model_id)
                return EnrichmentResult(text=cached, cost=0.0, cached=True)

            if self._tracker.utilization >= 1.0:
                raise BudgetExceededError(
                    f"Monthly enrichment budget of ${self._tracker.ceiling:.2f} is exhausted"
                )

            projected = estimate_cost(prompt, self.max_output_tokens)
            if not override and projected > self._tracker.remaining:
                raise BudgetExceededError(
                    f"Projected cost ${projected:.5f} exceeds remaining budget "
                    f"${self._tracker.remaining:.5f}"
                )

            allowance = self.effective_rate_limit()
            if self._tracker.window_calls >= allowance:
                raise RateLimitExceededError(
                    f"Enrichment rate limit of {allowance}/min reached"
                )
            self._tracker.window_calls += 1

        text = self._provider.invoke(prompt)
        if not text or not text.strip():
            raise MalformedResponseError("Model returned an empty response")

        cost = estimate_cost(prompt, estimate_tokens(text))
        with self._lock:
            self._tracker.monthly_cost += cost
            self._cache[key] = (text, self._clock() + self.cache_ttl_seconds)
            self._persist_budget()
            utilization = self._tracker.utilization

        logger.info(
            "enrichment_invoked",
            model_id=self.model_id,
            cost=cost,
            monthly_cost=round(self._tracker.monthly_cost, 5),
            utilization=round(utilization, 4),
        )
        if utilization >= WARNING_UTILIZATION:
            logger.warning(
                "enrichment_budget_warning",
                utilization=round(utilization, 4),
                ceiling=self._tracker.ceiling,
            )
        return EnrichmentResult(text=text, cost=cost)

    def enrich(self, prompt: str, override: bool = False) -> EnrichmentResult:
        """``invoke`` that degrades to a fallback result on any failure.

        With ``fallback_on_error`` disabled, failures propagate.
        """
        try:
            return self.invoke(prompt, override=override)
        except Exception as e:  # pylint: disable=broad-except
            if not self.fallback_on_error:
                raise
            reason = getattr(e, "code", None) or type(e).__name__
            logger.warning(
                "enrichment_fallback",
                model_id=self.model_id,
                reason=reason,
                error=str(e),
            )
            return EnrichmentResult.degraded(reason)

    def get_budget_status(self) -> Dict[str, Any]:
        with self._lock:
            self._roll_period()
            self._roll_window()
            return {
                "period": self._tracker.period,
                "monthly_cost": round(self._tracker.monthly_cost, 5),
                "ceiling": self._tracker.ceiling,
                "utilization": round(self._tracker.utilization, 4),
                "effective_rate_limit": self.effective_rate_limit(),
                "window_calls": self._tracker.window_calls,
            }

    def _persist_budget(self) -> None:
        if self._store is None:
            return
        try:
            self._store.put(BUDGET_STORE_KEY, self._tracker.to_item())
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("enrichment_budget_save_failed", error=str(e))

    def _restore_budget(self) -> None:
        if self._store is None:
            return
        try:
            item = self._store.get(BUDGET_STORE_KEY)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("enrichment_budget_load_failed", error=str(e))
            return
        if item and item.get("period") == self._tracker.period:
            self._tracker.monthly_cost = float(item.get("monthly_cost", 0.0))
            logger.info(
                "enrichment_budget_restored",
                period=self._tracker.period,
                monthly_cost=self._tracker.monthly_cost,
            )

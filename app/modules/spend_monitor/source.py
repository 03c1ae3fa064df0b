"""Metric sources for month-to-date spend.

The alert cycle only depends on the narrow ``MetricSource`` protocol; the
Cost Explorer implementation groups month-to-date BlendedCost by service
and projects it linearly to the end of the month.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Protocol

import structlog

from infrastructure.clients.aws.cost_explorer import CostExplorerClient
from infrastructure.operations.errors import ProviderError
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from modules.spend_monitor.models import CostSnapshot

logger = structlog.get_logger()

COST_METRIC = "BlendedCost"


class MetricSource(Protocol):
    def get_current_snapshot(self) -> CostSnapshot: ...


def project_monthly_cost(current_cost: float, today: date) -> float:
    """Linear projection of month-to-date cost to the end of the month."""
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return round(current_cost / today.day * days_in_month, 2)


def parse_cost_response(response: Dict[str, Any]) -> tuple[float, Dict[str, float], str]:
    """Sum grouped BlendedCost amounts from a get_cost_and_usage response.

    Returns:
        (total, per-service breakdown, currency unit)
    """
    breakdown: Dict[str, float] = {}
    total = 0.0
    currency = "USD"

    for result in response.get("ResultsByTime", []):
        for group in result.get("Groups", []):
            keys = group.get("Keys") or ["Unknown Service"]
            metric = group.get("Metrics", {}).get(COST_METRIC, {})
            cost = float(metric.get("Amount", "0") or 0)
            currency = metric.get("Unit", currency)
            if cost > 0:
                breakdown[keys[0]] = breakdown.get(keys[0], 0.0) + cost
                total += cost

        # Ungrouped total can exceed the grouped sum (e.g. tax, credits)
        api_total = result.get("Total", {}).get(COST_METRIC, {}).get("Amount")
        if api_total is not None and float(api_total) > total:
            total = float(api_total)

    return total, breakdown, currency


class CostExplorerMetricSource:
    """MetricSource backed by AWS Cost Explorer.

    Args:
        cost_explorer: Cost Explorer client wrapper
        retry_executor: Executor applied to the API call
        policy: Retry policy for the API call
        clock: Returns the current UTC datetime; injectable for tests
    """

    def __init__(
        self,
        cost_explorer: CostExplorerClient,
        retry_executor: Optional[RetryExecutor] = None,
        policy: Optional[RetryPolicy] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._cost_explorer = cost_explorer
        self._retry_executor = retry_executor or RetryExecutor()
        self._policy = policy
        self._clock = clock

    def get_current_snapshot(self) -> CostSnapshot:
        today = self._clock().date()
        start = today.replace(day=1).isoformat()
        # Cost Explorer treats End as exclusive
        end = (today + timedelta(days=1)).isoformat()

        response = self._retry_executor.execute(
            lambda: self._fetch(start, end),
            policy=self._policy,
            operation_name="cost_explorer.get_cost_and_usage",
        )
        total, breakdown, currency = parse_cost_response(response)

        if not breakdown and total == 0:
            logger.info("cost_snapshot_empty", period_start=start)
            return CostSnapshot.empty(start, today.isoformat(), currency=currency)

        snapshot = CostSnapshot(
            total_cost=round(total, 2),
            service_breakdown=breakdown,
            period_start=start,
            period_end=today.isoformat(),
            projected_monthly=project_monthly_cost(total, today),
            currency=currency,
        )
        logger.info(
            "cost_snapshot_retrieved",
            total_cost=snapshot.total_cost,
            projected_monthly=snapshot.projected_monthly,
            service_count=len(breakdown),
        )
        return snapshot

    def _fetch(self, start: str, end: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "GroupBy": [{"Type": "DIMENSION", "Key": "SERVICE"}],
        }
        merged: Dict[str, Any] = {"ResultsByTime": []}
        while True:
            result = self._cost_explorer.get_cost_and_usage(
                {"Start": start, "End": end}, [COST_METRIC], "MONTHLY", **params
            )
            if not result.is_success:
                raise ProviderError.from_result("ce.get_cost_and_usage", result)
            data = result.data or {}
            merged["ResultsByTime"].extend(data.get("ResultsByTime", []))
            next_token = data.get("NextPageToken")
            if not next_token:
                return merged
            params["NextPageToken"] = next_token

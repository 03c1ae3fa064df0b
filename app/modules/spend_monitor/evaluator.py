"""Alert evaluation: snapshot in, AlertContext (or nothing) out."""

from typing import Optional

from infrastructure.notifications.models import AlertContext, ServiceCost
from modules.spend_monitor.models import CostSnapshot


def rank_top_services(
    snapshot: CostSnapshot, min_service_cost: float = 1.0, top_n: int = 5
) -> tuple[ServiceCost, ...]:
    """Highest-cost services first, filtered by minimum cost and capped at top_n.

    Percentages are of the snapshot total, rounded to 2 decimals.
    """
    total = snapshot.total_cost
    eligible = [
        (name, cost)
        for name, cost in snapshot.service_breakdown.items()
        if cost >= min_service_cost
    ]
    eligible.sort(key=lambda item: item[1], reverse=True)
    return tuple(
        ServiceCost(
            service_name=name,
            cost=cost,
            percentage=round(cost / total * 100, 2) if total > 0 else 0.0,
        )
        for name, cost in eligible[:top_n]
    )


def evaluate_spend(
    snapshot: CostSnapshot,
    threshold: float,
    min_service_cost: float = 1.0,
    top_n: int = 5,
) -> Optional[AlertContext]:
    """Build the alert for a snapshot, or None when spend is within threshold.

    Example:
        context = evaluate_spend(snapshot, threshold=10.0)
        if context is not None:
            dispatcher.dispatch(context, channel_config)
    """
    if threshold <= 0:
        raise ValueError("threshold must be positive")
    if snapshot.total_cost <= threshold:
        return None

    return AlertContext.from_spend(
        total_spend=snapshot.total_cost,
        threshold=threshold,
        top_services=rank_top_services(snapshot, min_service_cost, top_n),
        period_start=snapshot.period_start,
        period_end=snapshot.period_end,
        projected_spend=snapshot.projected_monthly,
        currency=snapshot.currency,
    )

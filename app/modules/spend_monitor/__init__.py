"""Spend monitoring: month-to-date cost retrieval, evaluation and alerting."""

from modules.spend_monitor.evaluator import evaluate_spend, rank_top_services
from modules.spend_monitor.models import CostSnapshot
from modules.spend_monitor.source import (
    CostExplorerMetricSource,
    MetricSource,
    parse_cost_response,
    project_monthly_cost,
)
from modules.spend_monitor.task import (
    SpendCheckResult,
    build_channel_config,
    run_spend_check,
)

__all__ = [
    "CostExplorerMetricSource",
    "CostSnapshot",
    "MetricSource",
    "SpendCheckResult",
    "build_channel_config",
    "evaluate_spend",
    "parse_cost_response",
    "project_monthly_cost",
    "rank_top_services",
    "run_spend_check",
]

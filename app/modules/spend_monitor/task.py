"""Scheduled spend check.

One cycle: snapshot, evaluate, optional enrichment, dispatch. The cycle
fails loudly (``AggregateDeliveryError``) when an alert was due and no
channel delivered it; enrichment failures never block delivery.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from infrastructure.configuration import Settings
from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.notifications import (
    AlertContext,
    ChannelConfig,
    DispatchResult,
    EmailChannel,
    NotificationChannel,
    NotificationDispatcher,
    PushChannel,
    SMSChannel,
)
from infrastructure.observability import MetricsRecorder
from infrastructure.services import (
    get_aws_clients,
    get_enrichment_store,
    get_metrics_recorder,
    get_push_provider,
    get_resilience_service,
    get_settings,
    get_topic_publisher,
)
from modules.devices import get_certificate_monitor, get_device_registry
from modules.enrichment import (
    BedrockEnrichmentProvider,
    CostAwareRateLimiter,
    CostInsightsAnalyzer,
)
from modules.spend_monitor.evaluator import evaluate_spend
from modules.spend_monitor.models import CostSnapshot
from modules.spend_monitor.source import CostExplorerMetricSource, MetricSource

logger = get_module_logger()


class SpendCheckResult(BaseModel):
    """Outcome of one spend check cycle."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    alert_sent: bool
    snapshot: CostSnapshot
    context: Optional[AlertContext] = None
    dispatch_result: Optional[DispatchResult] = None

    def summary(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "alert_sent": self.alert_sent,
            "total_cost": self.snapshot.total_cost,
            "projected_monthly": self.snapshot.projected_monthly,
        }
        if self.context is not None:
            data.update(
                {
                    "alert_id": self.context.alert_id,
                    "alert_level": self.context.alert_level.value,
                    "exceed_amount": self.context.exceed_amount,
                    "percentage_over": round(self.context.percentage_over, 2),
                }
            )
        if self.dispatch_result is not None:
            data["dispatch"] = self.dispatch_result.summary()
        return data


@lru_cache
def get_metric_source() -> CostExplorerMetricSource:
    return CostExplorerMetricSource(
        get_aws_clients().cost_explorer,
        retry_executor=get_resilience_service().retry_executor,
    )


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    settings = get_settings()
    channels: List[NotificationChannel] = []
    push_health = None
    if settings.notifications.push_enabled:
        channels.append(PushChannel(get_push_provider()))
        push_health = get_certificate_monitor()
    channels.append(EmailChannel(get_topic_publisher()))
    channels.append(SMSChannel(get_topic_publisher()))
    return NotificationDispatcher(
        channels,
        resilience=get_resilience_service(),
        push_health=push_health,
        use_circuit_breakers=settings.resilience.circuit_breaker_enabled,
    )


@lru_cache
def get_cost_analyzer() -> CostInsightsAnalyzer:
    settings = get_settings()
    provider = BedrockEnrichmentProvider.from_settings(
        settings.enrichment,
        get_aws_clients().bedrock,
        retry_executor=get_resilience_service().retry_executor,
    )
    return CostInsightsAnalyzer(
        CostAwareRateLimiter.from_settings(
            settings.enrichment, provider, store=get_enrichment_store()
        )
    )


def build_channel_config(settings: Settings) -> ChannelConfig:
    """Delivery targets from settings and the registered devices."""
    endpoint_arns: List[str] = []
    if settings.notifications.push_enabled:
        endpoint_arns = get_device_registry().endpoint_arns()
    return ChannelConfig(
        push_endpoint_arns=endpoint_arns,
        email_topic_arn=settings.notifications.email_topic or None,
        sms_topic_arn=settings.notifications.sms_topic or None,
    )


def run_spend_check(
    settings: Optional[Settings] = None,
    metric_source: Optional[MetricSource] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    channel_config: Optional[ChannelConfig] = None,
    analyzer: Optional[CostInsightsAnalyzer] = None,
    correlation_id: Optional[str] = None,
    metrics: Optional[MetricsRecorder] = None,
) -> SpendCheckResult:
    """Run one spend check cycle.

    Collaborators default to the process-wide instances built from settings.
    Spend, breach and delivery metrics are published along the way; a
    metrics failure never affects the cycle.

    Raises:
        AggregateDeliveryError: An alert was due and every channel failed
        RetryExhaustedError: The metric source kept failing transiently
    """
    settings = settings or get_settings()
    monitor_settings = settings.spend_monitor
    if metrics is None:
        metrics = get_metrics_recorder()

    with bind_request_context(
        correlation_id=correlation_id, cycle="spend_check"
    ), metrics.timer("spend_check"):
        snapshot = (metric_source or get_metric_source()).get_current_snapshot()
        metrics.record_cost_analysis(
            snapshot.total_cost,
            snapshot.projected_monthly,
            len(snapshot.service_breakdown),
        )
        context = evaluate_spend(
            snapshot,
            monitor_settings.spend_threshold,
            min_service_cost=monitor_settings.min_service_cost,
            top_n=monitor_settings.top_services_limit,
        )

        if context is None:
            logger.info(
                "spend_within_threshold",
                total_cost=snapshot.total_cost,
                threshold=monitor_settings.spend_threshold,
            )
            return SpendCheckResult(alert_sent=False, snapshot=snapshot)

        logger.warning(
            "spend_threshold_exceeded",
            total_cost=snapshot.total_cost,
            threshold=monitor_settings.spend_threshold,
            alert_level=context.alert_level.value,
            alert_id=context.alert_id,
        )
        metrics.record_threshold_breach(
            snapshot.total_cost, monitor_settings.spend_threshold
        )

        if settings.enrichment.enabled or analyzer is not None:
            context = _enrich(context, snapshot, analyzer)

        result = (dispatcher or get_dispatcher()).dispatch(
            context, channel_config or build_channel_config(settings)
        )
        metrics.record_alert_delivery(result)
        result.raise_for_failure()

        return SpendCheckResult(
            alert_sent=True,
            snapshot=snapshot,
            context=context,
            dispatch_result=result,
        )


def _enrich(
    context: AlertContext,
    snapshot: CostSnapshot,
    analyzer: Optional[CostInsightsAnalyzer],
) -> AlertContext:
    try:
        analysis = (analyzer or get_cost_analyzer()).analyze(snapshot)
    except Exception as e:  # pylint: disable=broad-except
        logger.warning("alert_enrichment_failed", error=str(e))
        return context
    return context.with_analysis(analysis.to_alert_analysis())

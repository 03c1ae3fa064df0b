"""CloudWatch custom metrics for the spend alert agent.

Metrics are a side channel: a failed PutMetricData call is logged and the
cycle carries on. Every datum is stamped with the recorder's clock.

Usage:
    metrics = MetricsRecorder(aws.cloudwatch)

    with metrics.timer("spend_check"):
        ...
    metrics.record_threshold_breach(current_spend=15.0, threshold=10.0)
"""

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from infrastructure.clients.aws.cloudwatch import CloudWatchClient
from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import DispatchResult

logger = get_module_logger()

DEFAULT_NAMESPACE = "SpendMonitor/Agent"


def _status(success: bool) -> str:
    return "Success" if success else "Failure"


class MetricsRecorder:
    """Builds metric datums and publishes them in one request per event.

    Args:
        cloudwatch: CloudWatch client; None disables publishing
        namespace: Custom metric namespace
        enabled: Master switch, from ``METRICS_ENABLED``
        clock: Returns the current UTC datetime; injectable for tests
    """

    def __init__(
        self,
        cloudwatch: Optional[CloudWatchClient],
        namespace: str = DEFAULT_NAMESPACE,
        enabled: bool = True,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._cloudwatch = cloudwatch
        self.namespace = namespace
        self.enabled = enabled and cloudwatch is not None
        self._clock = clock

    def _datum(
        self,
        name: str,
        value: float,
        unit: str = "Count",
        **dimensions: str,
    ) -> Dict[str, Any]:
        datum: Dict[str, Any] = {
            "MetricName": name,
            "Value": value,
            "Unit": unit,
            "Timestamp": self._clock(),
        }
        if dimensions:
            datum["Dimensions"] = [
                {"Name": key, "Value": val} for key, val in dimensions.items()
            ]
        return datum

    def _put(self, metric_data: List[Dict[str, Any]]) -> bool:
        if not self.enabled or not metric_data:
            return False
        try:
            result = self._cloudwatch.put_metric_data(self.namespace, metric_data)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "metrics_publish_failed", namespace=self.namespace, error=str(e)
            )
            return False
        if not result.is_success:
            logger.warning(
                "metrics_publish_failed",
                namespace=self.namespace,
                error_code=result.error_code,
                error=result.message,
            )
            return False
        logger.debug(
            "metrics_published",
            namespace=self.namespace,
            metrics=[d["MetricName"] for d in metric_data],
        )
        return True

    def record_execution(self, operation: str, duration_ms: float, success: bool) -> bool:
        status = _status(success)
        return self._put(
            [
                self._datum(
                    "ExecutionDuration",
                    duration_ms,
                    "Milliseconds",
                    Operation=operation,
                    Status=status,
                ),
                self._datum("ExecutionCount", 1, Operation=operation, Status=status),
                self._datum(
                    "SuccessRate" if success else "ErrorRate", 1, Operation=operation
                ),
            ]
        )

    @contextmanager
    def timer(self, operation: str) -> Iterator[None]:
        """Record duration and outcome of the block; exceptions propagate."""
        start = time.perf_counter()
        success = False
        try:
            yield
            success = True
        finally:
            self.record_execution(
                operation, (time.perf_counter() - start) * 1000, success
            )

    def record_cost_analysis(
        self, total_cost: float, projected_cost: float, service_count: int
    ) -> bool:
        return self._put(
            [
                self._datum("CurrentSpend", total_cost, "None"),
                self._datum("ProjectedMonthlySpend", projected_cost, "None"),
                self._datum("ServiceCount", service_count),
            ]
        )

    def record_threshold_breach(self, current_spend: float, threshold: float) -> bool:
        exceed_amount = current_spend - threshold
        percentage = round(exceed_amount * 100 / threshold, 2) if threshold > 0 else 0.0
        return self._put(
            [
                self._datum("ThresholdBreach", 1),
                self._datum("ThresholdExceedAmount", exceed_amount, "None"),
                self._datum("ThresholdExceedPercentage", percentage, "Percent"),
            ]
        )

    def record_alert_delivery(self, result: DispatchResult) -> bool:
        """Overall outcome plus one ChannelDelivery datum per channel tried."""
        metric_data = [
            self._datum("AlertDeliveryCount", 1, Status=_status(result.success)),
            self._datum("AlertChannelCount", len(result.channels_attempted)),
        ]
        retries = sum(max(a.attempts - 1, 0) for a in result.channels_attempted)
        if retries:
            metric_data.append(self._datum("AlertRetryCount", retries))
        for attempt in result.channels_attempted:
            metric_data.append(
                self._datum(
                    "ChannelDelivery",
                    1 if attempt.is_success else 0,
                    Channel=attempt.channel,
                    Status=_status(attempt.is_success),
                )
            )
        return self._put(metric_data)

    def record_device_reconciliation(self, removed_count: int, error_count: int) -> bool:
        return self._put(
            [
                self._datum("InvalidDeviceTokensRemoved", removed_count),
                self._datum("DeviceReconciliationErrors", error_count),
            ]
        )

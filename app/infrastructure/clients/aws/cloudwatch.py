"""AWS CloudWatch client implementation.

Publishes custom metrics with consistent error handling via OperationResult.
"""

from typing import Any, Dict, List

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult


logger = structlog.get_logger()

# PutMetricData accepts at most this many datums per request
MAX_METRIC_DATA_PER_REQUEST = 1000


class CloudWatchClient:
    """Client for CloudWatch custom metric operations."""

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self.service_name = "cloudwatch"

    def put_metric_data(
        self, namespace: str, metric_data: List[Dict[str, Any]]
    ) -> OperationResult:
        """Publish metric datums to a namespace.

        Args:
            namespace: Custom namespace, e.g. "SpendMonitor/Agent"
            metric_data: PutMetricData ``MetricData`` entries

        Returns:
            OperationResult; ``data`` is the raw response on success
        """
        if len(metric_data) > MAX_METRIC_DATA_PER_REQUEST:
            return OperationResult.permanent_error(
                f"At most {MAX_METRIC_DATA_PER_REQUEST} metric datums per request",
                error_code="TooManyMetricData",
            )

        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self.service_name
        )
        return execute_aws_api_call(
            "cloudwatch",
            "put_metric_data",
            **client_kwargs,
            Namespace=namespace,
            MetricData=metric_data,
        )

"""AWS Cost Explorer client implementation.

Retrieves cost and usage data with consistent error handling via
OperationResult.
"""

from typing import Any, Dict, List

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult


logger = structlog.get_logger()


class CostExplorerClient:
    """Client for AWS Cost Explorer service operations.

    Cost Explorer is a global service served from us-east-1, so the region
    is pinned regardless of the provider's default.
    """

    REGION = "us-east-1"

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self.service_name = "ce"

    def get_cost_and_usage(
        self,
        time_period: Dict[str, str],
        metrics: List[str],
        granularity: str = "MONTHLY",
        **kwargs,
    ) -> OperationResult:
        """Get cost and usage data.

        Args:
            time_period: {"Start": "YYYY-MM-DD", "End": "YYYY-MM-DD"}
            metrics: Cost metrics, e.g. ["BlendedCost"]
            granularity: DAILY, MONTHLY or HOURLY
            **kwargs: Additional parameters (GroupBy, Filter, NextPageToken)

        Returns:
            OperationResult whose ``data`` is the raw response
        """
        params: Dict[str, Any] = {
            "TimePeriod": time_period,
            "Metrics": metrics,
            "Granularity": granularity,
            **kwargs,
        }

        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self.service_name, region=self.REGION
        )
        return execute_aws_api_call(
            "ce",
            "get_cost_and_usage",
            **client_kwargs,
            **params,
        )

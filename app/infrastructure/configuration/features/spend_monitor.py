"""Spend monitor feature settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings


class SpendMonitorSettings(FeatureSettings):
    """Alert evaluation configuration.

    Environment Variables:
        SPEND_THRESHOLD: Monthly spend (USD) above which an alert is sent
        MIN_SERVICE_COST_THRESHOLD: Services cheaper than this are omitted
            from the top-services list
        TOP_SERVICES_LIMIT: Maximum services listed in an alert
        METRICS_ENABLED: Publish CloudWatch custom metrics (default: True)
        METRICS_NAMESPACE: CloudWatch namespace (default: SpendMonitor/Agent)
    """

    spend_threshold: float = Field(default=10.0, alias="SPEND_THRESHOLD")
    min_service_cost: float = Field(default=1.0, alias="MIN_SERVICE_COST_THRESHOLD")
    top_services_limit: int = Field(default=5, alias="TOP_SERVICES_LIMIT", gt=0)
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")
    metrics_namespace: str = Field(
        default="SpendMonitor/Agent", alias="METRICS_NAMESPACE", min_length=1
    )

    @field_validator("spend_threshold")
    @classmethod
    def validate_threshold(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("SPEND_THRESHOLD must be positive")
        return value

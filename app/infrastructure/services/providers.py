"""
Factory functions for dependency injection.

Provides process-scoped singleton providers for core infrastructure services.
Each provider is cached with @lru_cache so every caller in the process
shares one instance; tests call ``cache_clear()`` to rebuild them.
"""

from functools import lru_cache

from infrastructure.clients.aws import AWSClients
from infrastructure.configuration import Settings
from infrastructure.notifications.providers import SNSPushProvider, SNSTopicPublisher
from infrastructure.observability import MetricsRecorder
from infrastructure.persistence import DynamoDBKeyValueStore
from infrastructure.resilience import ResilienceService


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_aws_clients() -> AWSClients:
    """Provider for AWS clients facade with all service operations.

    Credentials are resolved per API call, so caching this facade is safe;
    it doesn't hold stale credentials.

    Returns:
        AWSClients: Configured facade for SNS, DynamoDB, Cost Explorer,
        Bedrock Runtime and CloudWatch calls
    """
    settings = get_settings()
    return AWSClients(
        aws_settings=settings.aws, bedrock_region=settings.enrichment.region
    )


@lru_cache
def get_resilience_service() -> ResilienceService:
    """Process-wide circuit breaker registry and retry executor."""
    return ResilienceService.from_settings(get_settings().resilience)


@lru_cache
def get_topic_publisher() -> SNSTopicPublisher:
    return SNSTopicPublisher(get_aws_clients().sns)


@lru_cache
def get_push_provider() -> SNSPushProvider:
    """SNS push provider for the configured APNS platform application.

    Raises:
        ValueError: If IOS_PLATFORM_APP_ARN is not configured
    """
    notifications = get_settings().notifications
    if not notifications.IOS_PLATFORM_APP_ARN:
        raise ValueError("IOS_PLATFORM_APP_ARN is not configured")
    return SNSPushProvider(
        get_aws_clients().sns,
        notifications.IOS_PLATFORM_APP_ARN,
        credential_issued_at=notifications.PUSH_CREDENTIAL_ISSUED_AT,
    )


@lru_cache
def get_device_store() -> DynamoDBKeyValueStore:
    """Device registration store backed by DEVICE_TOKEN_TABLE_NAME."""
    return DynamoDBKeyValueStore(
        get_aws_clients().dynamodb,
        get_settings().notifications.DEVICE_TOKEN_TABLE_NAME,
    )


@lru_cache
def get_enrichment_store() -> DynamoDBKeyValueStore:
    """Store for the enrichment spend tally.

    Uses BEDROCK_BUDGET_TABLE_NAME when set. Otherwise the tally shares the
    device registration table under a key that is never a device token.
    """
    table_name = get_settings().enrichment.budget_table_name
    if not table_name:
        return get_device_store()
    return DynamoDBKeyValueStore(get_aws_clients().dynamodb, table_name)


@lru_cache
def get_metrics_recorder() -> MetricsRecorder:
    """CloudWatch metrics recorder; publishing is off when METRICS_ENABLED is false."""
    monitor = get_settings().spend_monitor
    return MetricsRecorder(
        get_aws_clients().cloudwatch,
        namespace=monitor.metrics_namespace,
        enabled=monitor.metrics_enabled,
    )

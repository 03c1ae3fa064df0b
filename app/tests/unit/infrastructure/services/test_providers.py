"""
Unit tests for dependency injection providers.

Tests cover:
- get_settings() caching behavior
- Providers built from settings
- Push provider requires a platform application
"""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import Settings
from infrastructure.services import providers

CACHED_PROVIDERS = (
    providers.get_settings,
    providers.get_aws_clients,
    providers.get_resilience_service,
    providers.get_topic_publisher,
    providers.get_push_provider,
    providers.get_device_store,
    providers.get_enrichment_store,
    providers.get_metrics_recorder,
)

PLATFORM_ARN = "arn:aws:sns:us-east-1:123456789012:app/APNS/spend-monitor"


@pytest.fixture(autouse=True)
def _clear_provider_caches():
    for provider in CACHED_PROVIDERS:
        provider.cache_clear()
    yield
    for provider in CACHED_PROVIDERS:
        provider.cache_clear()


@pytest.fixture
def use_settings(monkeypatch, settings_factory):
    """Point the providers at explicit settings and a mock AWS facade."""

    def _use(**values):
        settings = settings_factory(**values)
        aws_clients = MagicMock()
        monkeypatch.setattr(providers, "get_settings", lambda: settings)
        monkeypatch.setattr(providers, "get_aws_clients", lambda: aws_clients)
        return settings, aws_clients

    return _use


class TestGetSettings:
    """Tests for get_settings() provider function."""

    def test_get_settings_returns_settings_instance(self):
        """get_settings() returns a Settings instance."""
        assert isinstance(providers.get_settings(), Settings)

    def test_get_settings_returns_cached_instance(self):
        """get_settings() returns the same instance (caching)."""
        assert providers.get_settings() is providers.get_settings()

    def test_get_settings_cache_can_be_cleared(self):
        """get_settings() cache can be cleared for testing."""
        instance1 = providers.get_settings()
        providers.get_settings.cache_clear()
        assert providers.get_settings() is not instance1


class TestServiceProviders:
    def test_resilience_service_from_settings(self, use_settings):
        use_settings(RETRY_ATTEMPTS=4, CIRCUIT_BREAKER_FAILURE_THRESHOLD=2)

        service = providers.get_resilience_service()

        assert service.retry_executor.default_policy.max_attempts == 4
        assert service.failure_threshold == 2
        assert providers.get_resilience_service() is service

    def test_push_provider_requires_platform_arn(self, use_settings):
        use_settings()

        with pytest.raises(ValueError, match="IOS_PLATFORM_APP_ARN"):
            providers.get_push_provider()

    def test_push_provider_uses_platform_arn(self, use_settings):
        _, aws_clients = use_settings(IOS_PLATFORM_APP_ARN=PLATFORM_ARN)

        push = providers.get_push_provider()

        assert push.platform_application_arn == PLATFORM_ARN
        assert push._sns is aws_clients.sns

    def test_device_store_uses_table_name(self, use_settings):
        use_settings(DEVICE_TOKEN_TABLE_NAME="devices-test")

        assert providers.get_device_store().table_name == "devices-test"

    def test_enrichment_store_shares_device_table_by_default(self, use_settings):
        use_settings(DEVICE_TOKEN_TABLE_NAME="devices-test")

        assert providers.get_enrichment_store() is providers.get_device_store()

    def test_enrichment_store_uses_budget_table(self, use_settings):
        _, aws_clients = use_settings(
            DEVICE_TOKEN_TABLE_NAME="devices-test",
            BEDROCK_BUDGET_TABLE_NAME="enrichment-budget-test",
        )

        store = providers.get_enrichment_store()

        assert store.table_name == "enrichment-budget-test"
        assert store._client is aws_clients.dynamodb

    def test_metrics_recorder_from_settings(self, use_settings):
        _, aws_clients = use_settings(METRICS_NAMESPACE="SpendMonitor/Staging")

        recorder = providers.get_metrics_recorder()

        assert recorder.namespace == "SpendMonitor/Staging"
        assert recorder.enabled is True
        assert recorder._cloudwatch is aws_clients.cloudwatch
        assert providers.get_metrics_recorder() is recorder

    def test_metrics_recorder_can_be_disabled(self, use_settings):
        use_settings(METRICS_ENABLED=False)

        assert providers.get_metrics_recorder().enabled is False

    def test_aws_clients_use_bedrock_region(self, monkeypatch, settings_factory):
        settings = settings_factory(AWS_REGION="ca-central-1", BEDROCK_REGION="us-east-1")
        monkeypatch.setattr(providers, "get_settings", lambda: settings)

        clients = providers.get_aws_clients()

        assert clients.bedrock._region == "us-east-1"
        assert clients.sns is not None

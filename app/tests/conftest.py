"""Shared fixtures for the spend alert agent test suite.

Factories live in ``tests.factories``; these fixtures expose them with the
defaults most tests need.
"""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import Settings
from infrastructure.configuration.features import SpendMonitorSettings
from infrastructure.configuration.infrastructure import ResilienceSettings
from infrastructure.configuration.integrations import (
    AwsSettings,
    EnrichmentSettings,
    NotificationSettings,
)
from infrastructure.logging import clear_request_context
from infrastructure.observability import MetricsRecorder
from infrastructure.persistence import InMemoryKeyValueStore
from infrastructure.resilience import ResilienceService, RetryExecutor
from tests.factories import (
    FakeClock,
    FakeCloudWatchClient,
    FakePushProvider,
    FakeTopicPublisher,
    make_alert_context,
    make_channel_config,
    make_device_token,
)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep structlog contextvars from leaking between tests."""
    yield
    clear_request_context()


@pytest.fixture
def no_sleep():
    """Sleep replacement recording requested delays."""
    return MagicMock(name="sleep")


@pytest.fixture
def retry_executor(no_sleep):
    """RetryExecutor that never sleeps and jitters to the midpoint (no change)."""
    return RetryExecutor(sleep=no_sleep, rng=lambda: 0.5)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def resilience_service(retry_executor, fake_clock):
    """ResilienceService with a manual clock and a non-sleeping executor."""
    return ResilienceService(
        failure_threshold=5,
        recovery_timeout=60,
        half_open_max_calls=3,
        retry_executor=retry_executor,
        clock=fake_clock,
    )


@pytest.fixture
def push_provider():
    return FakePushProvider()


@pytest.fixture
def topic_publisher():
    return FakeTopicPublisher()


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def cloudwatch():
    return FakeCloudWatchClient()


@pytest.fixture
def metrics_recorder(cloudwatch):
    """MetricsRecorder publishing to the in-memory CloudWatch client."""
    return MetricsRecorder(cloudwatch)


@pytest.fixture
def alert_context_factory():
    """Factory for AlertContext instances.

    Example:
        context = alert_context_factory(total_spend=12.0, threshold=10.0)
    """
    return make_alert_context


@pytest.fixture
def channel_config_factory():
    return make_channel_config


@pytest.fixture
def device_token_factory():
    return make_device_token


@pytest.fixture
def settings_factory():
    """Factory for Settings built from explicit values, never the environment file.

    Keyword arguments are environment variable names, routed to the section
    that owns them.

    Example:
        settings = settings_factory(SPEND_THRESHOLD=10.0, BEDROCK_ENABLED=True)
    """

    sections = {
        "aws": AwsSettings,
        "notifications": NotificationSettings,
        "enrichment": EnrichmentSettings,
        "spend_monitor": SpendMonitorSettings,
        "resilience": ResilienceSettings,
    }

    def _factory(**values) -> Settings:
        built = {}
        for section, settings_class in sections.items():
            aliases = {
                field.alias or name for name, field in settings_class.model_fields.items()
            }
            section_values = {k: v for k, v in values.items() if k in aliases}
            built[section] = settings_class(_env_file=None, **section_values)
        return Settings(_env_file=None, **built)

    return _factory

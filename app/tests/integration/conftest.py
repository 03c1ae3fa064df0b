"""Fixtures for end-to-end spend alert flows.

Real modules are wired together; only the AWS boundary (Cost Explorer
client, SNS adapters) is replaced with in-memory fakes.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from infrastructure.clients.aws.cost_explorer import CostExplorerClient
from infrastructure.notifications import (
    AlertFormatter,
    ChannelConfig,
    EmailChannel,
    NotificationDispatcher,
    PushChannel,
    SMSChannel,
)
from infrastructure.operations.result import OperationResult
from modules.devices import CertificateHealthMonitor, DeviceRegistry
from modules.spend_monitor import CostExplorerMetricSource
from tests.factories import FakeTopicPublisher, make_cost_response
from tests.factories.notifications import EMAIL_TOPIC_ARN, SMS_TOPIC_ARN

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def cost_explorer():
    client = MagicMock(spec=CostExplorerClient)
    client.get_cost_and_usage.return_value = OperationResult.success(
        data=make_cost_response(
            {"Amazon EC2": 8.25, "Amazon S3": 4.10, "Tax": 3.15},
            start="2024-03-01",
            end="2024-03-16",
        )
    )
    return client


@pytest.fixture
def metric_source(cost_explorer, retry_executor):
    return CostExplorerMetricSource(
        cost_explorer, retry_executor=retry_executor, clock=lambda: NOW
    )


@pytest.fixture
def email_publisher():
    return FakeTopicPublisher()


@pytest.fixture
def sms_publisher():
    return FakeTopicPublisher()


@pytest.fixture
def registry(push_provider, memory_store, retry_executor):
    return DeviceRegistry(
        push_provider, memory_store, retry_executor=retry_executor, clock=lambda: NOW
    )


@pytest.fixture
def monitor(push_provider, retry_executor):
    push_provider.created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return CertificateHealthMonitor(
        push_provider, retry_executor=retry_executor, clock=lambda: NOW
    )


@pytest.fixture
def dispatcher(
    push_provider, email_publisher, sms_publisher, resilience_service, monitor
):
    return NotificationDispatcher(
        [
            PushChannel(push_provider),
            EmailChannel(email_publisher),
            SMSChannel(sms_publisher),
        ],
        resilience=resilience_service,
        formatter=AlertFormatter(clock=lambda: NOW),
        push_health=monitor,
    )


@pytest.fixture
def channel_config_for(registry):
    """Build the channel config from currently registered devices."""

    def _config() -> ChannelConfig:
        return ChannelConfig(
            push_endpoint_arns=registry.endpoint_arns(),
            email_topic_arn=EMAIL_TOPIC_ARN,
            sms_topic_arn=SMS_TOPIC_ARN,
        )

    return _config

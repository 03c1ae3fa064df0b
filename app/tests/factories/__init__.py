"""Test data factories for deterministic test data generation."""

from tests.factories.aws import (
    FakeCloudWatchClient,
    make_client_error,
    make_cost_group,
    make_cost_response,
    make_provider_error,
)
from tests.factories.devices import FakePushProvider, make_device_token
from tests.factories.notifications import (
    FakeTopicPublisher,
    make_alert_context,
    make_channel_config,
    make_service_costs,
)
from tests.factories.resilience import FakeClock

__all__ = [
    "FakeClock",
    "FakeCloudWatchClient",
    "FakePushProvider",
    "FakeTopicPublisher",
    "make_alert_context",
    "make_channel_config",
    "make_client_error",
    "make_cost_group",
    "make_cost_response",
    "make_device_token",
    "make_provider_error",
    "make_service_costs",
]

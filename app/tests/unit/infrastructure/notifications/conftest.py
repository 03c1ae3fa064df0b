"""Test fixtures for notification infrastructure tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from infrastructure.notifications import (
    AlertFormatter,
    EmailChannel,
    NotificationDispatcher,
    PushChannel,
    SMSChannel,
)
from tests.factories import FakeTopicPublisher

GENERATED_AT = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def formatter():
    """AlertFormatter with a fixed generation time."""
    return AlertFormatter(clock=lambda: GENERATED_AT)


@pytest.fixture
def email_publisher():
    return FakeTopicPublisher()


@pytest.fixture
def sms_publisher():
    return FakeTopicPublisher()


@pytest.fixture
def push_health():
    """Push health signal reporting healthy unless a test says otherwise."""
    signal = MagicMock()
    signal.is_push_healthy.return_value = True
    return signal


@pytest.fixture
def dispatcher_factory(
    push_provider, email_publisher, sms_publisher, resilience_service, formatter
):
    """Factory for NotificationDispatcher wired to in-memory providers.

    Example:
        dispatcher = dispatcher_factory(push_health=unhealthy_signal)
    """

    def _factory(**kwargs) -> NotificationDispatcher:
        kwargs.setdefault(
            "channels",
            [
                PushChannel(push_provider),
                EmailChannel(email_publisher),
                SMSChannel(sms_publisher),
            ],
        )
        kwargs.setdefault("resilience", resilience_service)
        kwargs.setdefault("formatter", formatter)
        return NotificationDispatcher(**kwargs)

    return _factory

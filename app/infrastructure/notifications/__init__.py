"""Spend alert notification delivery.

Provides prioritized multi-channel delivery (iOS push, email, SMS) with:
- Automatic fallback (push → email → sms)
- Per-channel retry policies and circuit breakers
- Push health gating and APNS payload size enforcement

Usage:
    from infrastructure.notifications import (
        AlertContext,
        ChannelConfig,
        NotificationDispatcher,
    )

    context = AlertContext.from_spend(total_spend=15.50, threshold=10.0)
    result = dispatcher.dispatch(
        context, ChannelConfig(email_topic_arn=email_topic_arn)
    )
    result.raise_for_failure()
"""

# Models
from infrastructure.notifications.models import (
    AIAnalysis,
    AlertContext,
    AlertLevel,
    ChannelConfig,
    DeliveryAttempt,
    DeliveryOutcome,
    DispatchResult,
    Notification,
    ServiceCost,
)

# Formatting
from infrastructure.notifications.formatting import AlertFormatter

# Dispatcher
from infrastructure.notifications.dispatcher import (
    CHANNEL_PRIORITY,
    MAX_PUSH_PAYLOAD_BYTES,
    NotificationDispatcher,
    PushHealthSignal,
)

# Providers
from infrastructure.notifications.providers import (
    EndpointAttributes,
    EndpointPage,
    EndpointSummary,
    PlatformAttributes,
    PushProvider,
    SNSPushProvider,
    SNSTopicPublisher,
    TopicPublisher,
)

# Channel interface and implementations
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.channels.email import EmailChannel
from infrastructure.notifications.channels.push import PushChannel
from infrastructure.notifications.channels.sms import SMSChannel

# Export all public interfaces
__all__ = [
    # Models
    "AIAnalysis",
    "AlertContext",
    "AlertLevel",
    "ChannelConfig",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DispatchResult",
    "Notification",
    "ServiceCost",
    # Formatting
    "AlertFormatter",
    # Dispatcher
    "CHANNEL_PRIORITY",
    "MAX_PUSH_PAYLOAD_BYTES",
    "NotificationDispatcher",
    "PushHealthSignal",
    # Providers
    "EndpointAttributes",
    "EndpointPage",
    "EndpointSummary",
    "PlatformAttributes",
    "PushProvider",
    "SNSPushProvider",
    "SNSTopicPublisher",
    "TopicPublisher",
    # Channels
    "NotificationChannel",
    "PushChannel",
    "EmailChannel",
    "SMSChannel",
]

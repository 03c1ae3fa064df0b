"""Notification channel abstract base class.

All channel implementations (Push, Email, SMS) must implement this interface.
"""

from abc import ABC, abstractmethod

from infrastructure.notifications.models import ChannelConfig, Notification
from infrastructure.operations import OperationResult


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    Each channel handles delivery through a specific mechanism:
    - PushChannel: APNS through SNS platform endpoints
    - EmailChannel: SNS email topic
    - SMSChannel: SNS SMS topic

    Channels make a single delivery attempt per ``send`` call and raise on
    failure. Retry and circuit breaking are applied by the dispatcher, keyed
    by ``"<channel_name>:<provider_name>"``.

    Example Implementation:
        class EmailChannel(NotificationChannel):

            @property
            def channel_name(self) -> str:
                return "email"

            def send(self, notification, config) -> str:
                return self._publisher.publish(
                    config.email_topic_arn, notification.email_body
                )
    """

    provider_name: str = "sns"

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel identifier (push, email, sms)."""

    @abstractmethod
    def is_configured(self, config: ChannelConfig) -> bool:
        """Whether ``config`` names at least one target for this channel."""

    @abstractmethod
    def send(self, notification: Notification, config: ChannelConfig) -> str:
        """Deliver the notification once.

        Args:
            notification: Rendered alert
            config: Delivery targets

        Returns:
            Provider message id

        Raises:
            ChannelError: Failure specific to this channel
            ProviderError: Provider call failed (classified by the caller)
        """

    def health_check(self) -> OperationResult:
        """Channel-local health. Breaker state is reported by the dispatcher."""
        return OperationResult.success(
            data={"channel": self.channel_name, "provider": self.provider_name}
        )

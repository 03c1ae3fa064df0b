"""Email channel implementation using an SNS email topic."""

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import ChannelConfig, Notification
from infrastructure.notifications.providers import TopicPublisher
from infrastructure.operations.errors import ChannelError

logger = structlog.get_logger()

# SNS rejects subjects longer than 100 characters
MAX_SUBJECT_LENGTH = 100


class EmailChannel(NotificationChannel):
    """Email notification channel.

    Publishes the plain-text alert body to the email topic; SNS fans it out
    to the topic's email subscriptions.
    """

    def __init__(self, publisher: TopicPublisher):
        self._publisher = publisher
        logger.info("initialized_email_channel", backend="sns")

    @property
    def channel_name(self) -> str:
        """Channel identifier."""
        return "email"

    def is_configured(self, config: ChannelConfig) -> bool:
        return config.has_email()

    def send(self, notification: Notification, config: ChannelConfig) -> str:
        """Publish the email body with the alert subject.

        Returns:
            SNS message id
        """
        if not self.is_configured(config):
            raise ChannelError(
                self.channel_name, "No email topic configured", ChannelError.NO_TARGETS
            )

        message_id = self._publisher.publish(
            config.email_topic_arn,
            notification.email_body,
            subject=notification.subject[:MAX_SUBJECT_LENGTH],
        )
        logger.info(
            "email_notification_sent",
            alert_id=notification.alert_id,
            message_id=message_id,
        )
        return message_id

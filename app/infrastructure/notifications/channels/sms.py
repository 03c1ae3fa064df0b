"""SMS channel implementation using an SNS SMS topic."""

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import ChannelConfig, Notification
from infrastructure.notifications.providers import TopicPublisher
from infrastructure.operations.errors import ChannelError

logger = structlog.get_logger()

SMS_MESSAGE_ATTRIBUTES = {
    "AWS.SNS.SMS.SMSType": {"DataType": "String", "StringValue": "Transactional"},
}


class SMSChannel(NotificationChannel):
    """SMS notification channel.

    Sends the short alert text as a transactional SMS to the SMS topic's
    subscriptions.
    """

    def __init__(self, publisher: TopicPublisher):
        self._publisher = publisher
        logger.info("initialized_sms_channel", backend="sns")

    @property
    def channel_name(self) -> str:
        """Channel identifier."""
        return "sms"

    def is_configured(self, config: ChannelConfig) -> bool:
        return config.has_sms()

    def send(self, notification: Notification, config: ChannelConfig) -> str:
        if not self.is_configured(config):
            raise ChannelError(
                self.channel_name, "No SMS topic configured", ChannelError.NO_TARGETS
            )

        message_id = self._publisher.publish(
            config.sms_topic_arn,
            notification.sms_text,
            message_attributes=SMS_MESSAGE_ATTRIBUTES,
        )
        logger.info(
            "sms_notification_sent",
            alert_id=notification.alert_id,
            message_id=message_id,
        )
        return message_id

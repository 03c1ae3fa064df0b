"""Push channel implementation using APNS through SNS platform endpoints."""

from typing import Dict, Optional

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import ChannelConfig, Notification
from infrastructure.notifications.providers import PushProvider
from infrastructure.operations.errors import ChannelError, ProviderError

logger = structlog.get_logger()

# SNS error codes that mean this push target can never succeed as-is
PROVIDER_CODE_TO_CHANNEL_CODE: Dict[str, str] = {
    "EndpointDisabled": ChannelError.ENDPOINT_DISABLED,
    "EndpointDisabledException": ChannelError.ENDPOINT_DISABLED,
    "InvalidParameter": ChannelError.INVALID_DEVICE_TOKEN,
    "InvalidParameterException": ChannelError.INVALID_DEVICE_TOKEN,
    "PlatformApplicationDisabled": ChannelError.INVALID_CREDENTIAL,
    "PlatformApplicationDisabledException": ChannelError.INVALID_CREDENTIAL,
}


class PushChannel(NotificationChannel):
    """iOS push channel.

    Publishes the APNS payload to every configured platform endpoint and
    to the push topic. The send succeeds when at least one publish
    succeeds; otherwise the last error is raised.
    """

    def __init__(self, provider: PushProvider):
        self._provider = provider

    @property
    def channel_name(self) -> str:
        return "push"

    def is_configured(self, config: ChannelConfig) -> bool:
        return config.has_push()

    def send(self, notification: Notification, config: ChannelConfig) -> str:
        if not self.is_configured(config):
            raise ChannelError(
                self.channel_name, "No push targets configured", ChannelError.NO_TARGETS
            )

        message_ids = []
        last_error: Optional[Exception] = None

        targets = [(arn, False) for arn in config.push_endpoint_arns]
        if config.push_topic_arn:
            targets.append((config.push_topic_arn, True))

        for target_arn, is_topic in targets:
            try:
                if is_topic:
                    message_id = self._provider.publish_to_topic(
                        target_arn, notification.push_payload
                    )
                else:
                    message_id = self._provider.publish(
                        target_arn, notification.push_payload
                    )
            except ProviderError as e:
                last_error = self._to_channel_error(e)
                logger.warning(
                    "push_target_failed",
                    target_arn=target_arn,
                    error_code=getattr(last_error, "code", None),
                    error=str(e),
                )
                continue
            message_ids.append(message_id)

        if message_ids:
            logger.info(
                "push_notification_sent",
                alert_id=notification.alert_id,
                delivered=len(message_ids),
                targets=len(targets),
            )
            return message_ids[0]

        raise last_error

    def _to_channel_error(self, error: ProviderError) -> Exception:
        channel_code = PROVIDER_CODE_TO_CHANNEL_CODE.get(error.code)
        if channel_code is None:
            return error
        channel_error = ChannelError(self.channel_name, error.message, channel_code)
        channel_error.__cause__ = error
        return channel_error

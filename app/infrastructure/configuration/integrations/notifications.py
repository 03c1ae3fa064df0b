"""Notification channel integration settings (SNS, APNS)."""

import re
from datetime import datetime

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings

_BUNDLE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)+$")


class NotificationSettings(IntegrationSettings):
    """Delivery channel configuration.

    Email and SMS fall back to ``SNS_TOPIC_ARN`` when their dedicated topic
    is not set.

    Environment Variables:
        SNS_TOPIC_ARN: Shared alert topic (email/SMS subscriptions)
        EMAIL_TOPIC_ARN: Dedicated email topic (optional)
        SMS_TOPIC_ARN: Dedicated SMS topic (optional)
        IOS_PLATFORM_APP_ARN: SNS platform application for APNS
        IOS_BUNDLE_ID: iOS application bundle identifier
        DEVICE_TOKEN_TABLE_NAME: DynamoDB table holding device registrations
        PUSH_CREDENTIAL_ISSUED_AT: ISO date the APNS credential was issued,
            used when the platform application exposes no creation time

    Example:
        ```python
        from infrastructure.configuration import settings

        platform_arn = settings.notifications.IOS_PLATFORM_APP_ARN
        ```
    """

    SNS_TOPIC_ARN: str = Field(default="", alias="SNS_TOPIC_ARN")
    EMAIL_TOPIC_ARN: str = Field(default="", alias="EMAIL_TOPIC_ARN")
    SMS_TOPIC_ARN: str = Field(default="", alias="SMS_TOPIC_ARN")
    IOS_PLATFORM_APP_ARN: str = Field(default="", alias="IOS_PLATFORM_APP_ARN")
    IOS_BUNDLE_ID: str = Field(
        default="com.example.spendmonitor", alias="IOS_BUNDLE_ID"
    )
    DEVICE_TOKEN_TABLE_NAME: str = Field(
        default="spend-monitor-device-tokens",
        alias="DEVICE_TOKEN_TABLE_NAME",
        description="DynamoDB table for device registrations",
    )
    PUSH_CREDENTIAL_ISSUED_AT: datetime | None = Field(
        default=None,
        alias="PUSH_CREDENTIAL_ISSUED_AT",
        description="Fallback issue date for the APNS credential age estimate",
    )

    @field_validator(
        "SNS_TOPIC_ARN", "EMAIL_TOPIC_ARN", "SMS_TOPIC_ARN", "IOS_PLATFORM_APP_ARN"
    )
    @classmethod
    def validate_arn(cls, value: str) -> str:
        if value and not value.startswith("arn:"):
            raise ValueError(f"Expected an ARN, got {value!r}")
        return value

    @field_validator("IOS_BUNDLE_ID")
    @classmethod
    def validate_bundle_id(cls, value: str) -> str:
        if not _BUNDLE_ID_PATTERN.match(value):
            raise ValueError(f"Bundle id must be reverse-DNS, got {value!r}")
        return value

    @property
    def email_topic(self) -> str:
        return self.EMAIL_TOPIC_ARN or self.SNS_TOPIC_ARN

    @property
    def sms_topic(self) -> str:
        return self.SMS_TOPIC_ARN or self.SNS_TOPIC_ARN

    @property
    def push_enabled(self) -> bool:
        return bool(self.IOS_PLATFORM_APP_ARN)

"""Provider adapters used by the notification channels and device registry.

Adapters sit on top of the ``OperationResult``-returning AWS client
wrappers and raise ``ProviderError`` on failure, so that retry and circuit
breaker layers see an exception they can classify.

- ``TopicPublisher`` / ``SNSTopicPublisher``: email and SMS topics
- ``PushProvider`` / ``SNSPushProvider``: APNS platform endpoints
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from infrastructure.clients.aws.sns import SNSClient
from infrastructure.operations.errors import ProviderError


@dataclass(frozen=True)
class EndpointAttributes:
    """Provider-side view of one platform endpoint."""

    enabled: bool
    token: Optional[str] = None
    custom_user_data: Optional[str] = None


@dataclass(frozen=True)
class EndpointSummary:
    endpoint_arn: str
    attributes: EndpointAttributes


@dataclass(frozen=True)
class EndpointPage:
    """One page of platform endpoints."""

    endpoints: List[EndpointSummary] = field(default_factory=list)
    next_page_token: Optional[str] = None


@dataclass(frozen=True)
class PlatformAttributes:
    """Platform application state used by the certificate health check.

    Attributes:
        enabled: Whether the platform application accepts sends
        created_at: When the push credential was issued, if known
        attributes: Raw provider attributes
    """

    enabled: bool
    created_at: Optional[datetime] = None
    attributes: Dict[str, str] = field(default_factory=dict)


class TopicPublisher(Protocol):
    """Publishes to a fan-out topic (email and SMS subscriptions)."""

    def publish(
        self,
        topic_arn: str,
        message: str,
        subject: Optional[str] = None,
        message_attributes: Optional[Dict[str, Any]] = None,
    ) -> str: ...


class PushProvider(Protocol):
    """Push provider contract consumed by the push channel and device registry."""

    def create_endpoint(
        self, token: str, user_data: Optional[Dict[str, Any]] = None
    ) -> str: ...

    def set_endpoint_token(self, endpoint_arn: str, token: str) -> None: ...

    def delete_endpoint(self, endpoint_arn: str) -> None: ...

    def get_endpoint_attributes(self, endpoint_arn: str) -> EndpointAttributes: ...

    def list_endpoints(self, page_token: Optional[str] = None) -> EndpointPage: ...

    def publish(self, target_arn: str, payload: Dict[str, Any]) -> str: ...

    def publish_to_topic(self, topic_arn: str, payload: Dict[str, Any]) -> str: ...

    def get_platform_attributes(self) -> PlatformAttributes: ...


def _bool_attribute(value: Any) -> bool:
    return str(value).lower() == "true"


def build_apns_message(payload: Dict[str, Any], default_text: Optional[str] = None) -> str:
    """Wrap an APNS payload in the SNS per-protocol JSON envelope."""
    serialized = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    if default_text is None:
        default_text = payload.get("aps", {}).get("alert", {}).get("body", "")
    return json.dumps(
        {
            "default": default_text,
            "APNS": serialized,
            "APNS_SANDBOX": serialized,
        }
    )


class SNSTopicPublisher:
    """TopicPublisher backed by SNS topics."""

    def __init__(self, sns: SNSClient):
        self._sns = sns

    def publish(
        self,
        topic_arn: str,
        message: str,
        subject: Optional[str] = None,
        message_attributes: Optional[Dict[str, Any]] = None,
    ) -> str:
        result = self._sns.publish(
            message,
            topic_arn=topic_arn,
            subject=subject,
            message_attributes=message_attributes,
        )
        if not result.is_success:
            raise ProviderError.from_result("sns.publish", result)
        return (result.data or {}).get("MessageId", "")


class SNSPushProvider:
    """PushProvider backed by SNS platform applications (APNS).

    Args:
        sns: SNS client wrapper
        platform_application_arn: Platform application holding the endpoints
        credential_issued_at: Fallback issue date for the push credential when
            the platform attributes do not carry one
    """

    def __init__(
        self,
        sns: SNSClient,
        platform_application_arn: str,
        credential_issued_at: Optional[datetime] = None,
    ):
        self._sns = sns
        self.platform_application_arn = platform_application_arn
        self._credential_issued_at = credential_issued_at

    def create_endpoint(
        self, token: str, user_data: Optional[Dict[str, Any]] = None
    ) -> str:
        result = self._sns.create_platform_endpoint(
            self.platform_application_arn, token, custom_user_data=user_data
        )
        if not result.is_success:
            raise ProviderError.from_result("sns.create_platform_endpoint", result)
        return result.data["EndpointArn"]

    def set_endpoint_token(self, endpoint_arn: str, token: str) -> None:
        result = self._sns.set_endpoint_attributes(
            endpoint_arn, {"Token": token, "Enabled": "true"}
        )
        if not result.is_success:
            raise ProviderError.from_result("sns.set_endpoint_attributes", result)

    def delete_endpoint(self, endpoint_arn: str) -> None:
        result = self._sns.delete_endpoint(endpoint_arn)
        if not result.is_success:
            raise ProviderError.from_result("sns.delete_endpoint", result)

    def get_endpoint_attributes(self, endpoint_arn: str) -> EndpointAttributes:
        result = self._sns.get_endpoint_attributes(endpoint_arn)
        if not result.is_success:
            raise ProviderError.from_result("sns.get_endpoint_attributes", result)
        attributes = (result.data or {}).get("Attributes", {})
        return EndpointAttributes(
            enabled=_bool_attribute(attributes.get("Enabled", "false")),
            token=attributes.get("Token"),
            custom_user_data=attributes.get("CustomUserData"),
        )

    def list_endpoints(self, page_token: Optional[str] = None) -> EndpointPage:
        result = self._sns.list_endpoints_by_platform_application(
            self.platform_application_arn, next_token=page_token
        )
        if not result.is_success:
            raise ProviderError.from_result(
                "sns.list_endpoints_by_platform_application", result
            )
        data = result.data or {}
        endpoints = [
            EndpointSummary(
                endpoint_arn=item["EndpointArn"],
                attributes=EndpointAttributes(
                    enabled=_bool_attribute(
                        item.get("Attributes", {}).get("Enabled", "false")
                    ),
                    token=item.get("Attributes", {}).get("Token"),
                    custom_user_data=item.get("Attributes", {}).get("CustomUserData"),
                ),
            )
            for item in data.get("Endpoints", [])
        ]
        return EndpointPage(endpoints=endpoints, next_page_token=data.get("NextToken"))

    def publish(self, target_arn: str, payload: Dict[str, Any]) -> str:
        result = self._sns.publish(
            build_apns_message(payload),
            target_arn=target_arn,
            message_structure="json",
        )
        if not result.is_success:
            raise ProviderError.from_result("sns.publish", result)
        return (result.data or {}).get("MessageId", "")

    def publish_to_topic(self, topic_arn: str, payload: Dict[str, Any]) -> str:
        result = self._sns.publish(
            build_apns_message(payload),
            topic_arn=topic_arn,
            message_structure="json",
        )
        if not result.is_success:
            raise ProviderError.from_result("sns.publish", result)
        return (result.data or {}).get("MessageId", "")

    def get_platform_attributes(self) -> PlatformAttributes:
        result = self._sns.get_platform_application_attributes(
            self.platform_application_arn
        )
        if not result.is_success:
            raise ProviderError.from_result(
                "sns.get_platform_application_attributes", result
            )
        attributes = (result.data or {}).get("Attributes", {})
        return PlatformAttributes(
            enabled=_bool_attribute(attributes.get("Enabled", "true")),
            created_at=self._credential_issued_at,
            attributes=attributes,
        )

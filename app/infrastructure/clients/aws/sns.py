"""Amazon SNS client implementation.

Wraps the SNS operations used for delivery (publish) and for push
endpoint lifecycle management (platform endpoints and platform
applications). Every method returns an OperationResult.
"""

import json
from typing import Any, Dict, Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class SNSClient:
    """Client for Amazon SNS operations.

    Args:
        session_provider: SessionProvider instance for credential/config management
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self.service_name = "sns"

    def _call(self, method: str, **kwargs) -> OperationResult:
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self.service_name
        )
        return execute_aws_api_call(
            self.service_name, method, **client_kwargs, **kwargs
        )

    def publish(
        self,
        message: str,
        topic_arn: Optional[str] = None,
        target_arn: Optional[str] = None,
        subject: Optional[str] = None,
        message_structure: Optional[str] = None,
        message_attributes: Optional[Dict[str, Any]] = None,
    ) -> OperationResult:
        """Publish to a topic or directly to a platform endpoint.

        Args:
            message: Message body (JSON string when message_structure="json")
            topic_arn: Topic to publish to
            target_arn: Platform endpoint to publish to
            subject: Email subject line (topics only)
            message_structure: "json" for per-protocol messages
            message_attributes: SNS message attributes

        Returns:
            OperationResult whose ``data`` holds ``MessageId``
        """
        params: Dict[str, Any] = {"Message": message}
        if topic_arn:
            params["TopicArn"] = topic_arn
        if target_arn:
            params["TargetArn"] = target_arn
        if subject:
            params["Subject"] = subject
        if message_structure:
            params["MessageStructure"] = message_structure
        if message_attributes:
            params["MessageAttributes"] = message_attributes
        return self._call("publish", **params)

    def create_platform_endpoint(
        self,
        platform_application_arn: str,
        token: str,
        custom_user_data: Optional[Dict[str, Any]] = None,
    ) -> OperationResult:
        """Create a platform endpoint for a device token.

        Returns:
            OperationResult whose ``data`` holds ``EndpointArn``
        """
        params: Dict[str, Any] = {
            "PlatformApplicationArn": platform_application_arn,
            "Token": token,
        }
        if custom_user_data:
            params["CustomUserData"] = json.dumps(custom_user_data)
        return self._call("create_platform_endpoint", **params)

    def set_endpoint_attributes(
        self, endpoint_arn: str, attributes: Dict[str, str]
    ) -> OperationResult:
        return self._call(
            "set_endpoint_attributes", EndpointArn=endpoint_arn, Attributes=attributes
        )

    def get_endpoint_attributes(self, endpoint_arn: str) -> OperationResult:
        """Returns OperationResult whose ``data["Attributes"]`` has Enabled/Token."""
        return self._call("get_endpoint_attributes", EndpointArn=endpoint_arn)

    def delete_endpoint(self, endpoint_arn: str) -> OperationResult:
        return self._call("delete_endpoint", EndpointArn=endpoint_arn)

    def list_endpoints_by_platform_application(
        self, platform_application_arn: str, next_token: Optional[str] = None
    ) -> OperationResult:
        """List one page of endpoints.

        Returns:
            OperationResult whose ``data`` holds ``Endpoints`` and, when more
            pages remain, ``NextToken``
        """
        params: Dict[str, Any] = {"PlatformApplicationArn": platform_application_arn}
        if next_token:
            params["NextToken"] = next_token
        return self._call("list_endpoints_by_platform_application", **params)

    def get_platform_application_attributes(
        self, platform_application_arn: str
    ) -> OperationResult:
        return self._call(
            "get_platform_application_attributes",
            PlatformApplicationArn=platform_application_arn,
        )

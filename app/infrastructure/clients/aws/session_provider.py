"""Session provider for AWS client operations.

Centralizes boto3 session creation and client configuration: region,
endpoint override, per-call timeouts and optional role assumption.
"""

from typing import Any, Dict, Optional

import structlog

from infrastructure.clients.aws.executor import get_boto3_client

logger = structlog.get_logger()


class SessionProvider:
    """Centralized provider for AWS session configuration.

    Args:
        region: AWS region for all clients (e.g., 'us-east-1')
        endpoint_url: Custom endpoint URL (for testing/LocalStack)
        botocore_config: Keyword arguments for ``botocore.config.Config``,
            typically timeouts and a disabled botocore retry policy
        role_arn: Optional role assumed for every client
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        botocore_config: Optional[Dict[str, Any]] = None,
        role_arn: Optional[str] = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self.botocore_config = botocore_config
        self.role_arn = role_arn

    def build_client_kwargs(
        self,
        service_name: Optional[str] = None,
        region: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build session and client configuration kwargs for boto3.

        Args:
            service_name: AWS service name, used for debug logging
            region: Optional region override (Bedrock may run elsewhere)

        Returns:
            Dict with session_config, client_config, and role_arn for
            passing to execute_aws_api_call
        """
        effective_region = region or self.region

        session_config: Dict[str, Any] = {}
        client_config: Dict[str, Any] = {}

        if effective_region:
            session_config["region_name"] = effective_region
            client_config["region_name"] = effective_region

        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url

        if self.botocore_config:
            client_config["botocore_config"] = dict(self.botocore_config)

        logger.debug(
            "built_client_kwargs",
            service_name=service_name,
            region=effective_region,
            endpoint_url=self.endpoint_url,
        )
        return {
            "session_config": session_config or None,
            "client_config": client_config or None,
            "role_arn": self.role_arn,
        }

    def get_boto3_client(self, service_name: str, region: Optional[str] = None) -> Any:
        """Get a fully-configured boto3 client for the given service."""
        kw = self.build_client_kwargs(service_name, region=region)
        return get_boto3_client(
            service_name,
            session_config=kw["session_config"],
            client_config=kw["client_config"],
            role_arn=kw["role_arn"],
        )

"""AWS Clients facade for all AWS service operations.

Composes per-service clients (SNS, DynamoDB, Cost Explorer, Bedrock
Runtime, CloudWatch) behind one object sharing a SessionProvider.
"""

import structlog

from infrastructure.clients.aws.bedrock import BedrockRuntimeClient
from infrastructure.clients.aws.cloudwatch import CloudWatchClient
from infrastructure.clients.aws.cost_explorer import CostExplorerClient
from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.clients.aws.sns import SNSClient
from infrastructure.configuration.integrations.aws import AwsSettings

logger = structlog.get_logger()


class AWSClients:
    """Facade for all AWS service clients.

    Args:
        aws_settings: AWS configuration from settings.aws
        bedrock_region: Optional region override for Bedrock Runtime

    Usage:
        aws = AWSClients(settings.aws)
        result = aws.sns.publish("hello", topic_arn=topic)
        if result.is_success:
            message_id = result.data["MessageId"]
    """

    def __init__(self, aws_settings: AwsSettings, bedrock_region: str | None = None):
        self._session_provider = SessionProvider(
            region=aws_settings.AWS_REGION,
            endpoint_url=aws_settings.ENDPOINT_URL,
            botocore_config=aws_settings.client_config,
        )

        self.sns: SNSClient = SNSClient(self._session_provider)
        self.dynamodb: DynamoDBClient = DynamoDBClient(self._session_provider)
        self.cost_explorer: CostExplorerClient = CostExplorerClient(
            self._session_provider
        )
        self.bedrock: BedrockRuntimeClient = BedrockRuntimeClient(
            self._session_provider, region=bedrock_region
        )
        self.cloudwatch: CloudWatchClient = CloudWatchClient(self._session_provider)
        logger.debug("initialized_aws_clients", region=aws_settings.AWS_REGION)

    @property
    def session_provider(self) -> SessionProvider:
        return self._session_provider

"""Infrastructure AWS clients public API.

Per-service client classes returning OperationResult, composed by the
AWSClients facade:

    from infrastructure.clients.aws import AWSClients

    aws = AWSClients(settings.aws)
    result = aws.sns.get_endpoint_attributes(endpoint_arn)
    if result.is_success:
        enabled = result.data["Attributes"].get("Enabled") == "true"
"""

from infrastructure.clients.aws.bedrock import BedrockRuntimeClient
from infrastructure.clients.aws.cloudwatch import CloudWatchClient
from infrastructure.clients.aws.cost_explorer import CostExplorerClient
from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.executor import execute_aws_api_call, get_boto3_client
from infrastructure.clients.aws.facade import AWSClients
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.clients.aws.sns import SNSClient

__all__ = [
    "AWSClients",
    "SessionProvider",
    "SNSClient",
    "DynamoDBClient",
    "CostExplorerClient",
    "BedrockRuntimeClient",
    "CloudWatchClient",
    "execute_aws_api_call",
    "get_boto3_client",
]

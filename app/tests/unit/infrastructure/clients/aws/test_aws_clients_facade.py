"""Tests for AWSClients facade and SessionProvider."""

import pytest

from infrastructure.clients.aws import (
    AWSClients,
    BedrockRuntimeClient,
    CloudWatchClient,
    CostExplorerClient,
    DynamoDBClient,
    SessionProvider,
    SNSClient,
)
from infrastructure.clients.aws import session_provider as session_provider_module


@pytest.mark.unit
class TestAWSClientsFacade:
    def test_initializes_service_clients(self, aws_factory):
        assert isinstance(aws_factory.sns, SNSClient)
        assert isinstance(aws_factory.dynamodb, DynamoDBClient)
        assert isinstance(aws_factory.cost_explorer, CostExplorerClient)
        assert isinstance(aws_factory.bedrock, BedrockRuntimeClient)
        assert isinstance(aws_factory.cloudwatch, CloudWatchClient)

    def test_shares_one_session_provider(self, aws_factory):
        provider = aws_factory.session_provider
        assert provider.region == "ca-central-1"
        assert aws_factory.sns._session_provider is provider
        assert aws_factory.dynamodb._session_provider is provider

    def test_timeouts_from_settings(self, aws_factory):
        config = aws_factory.session_provider.botocore_config
        assert config["connect_timeout"] == 2.0
        assert config["read_timeout"] == 4.0
        assert config["retries"]["max_attempts"] == 1

    def test_bedrock_region_override(self, aws_settings):
        clients = AWSClients(aws_settings, bedrock_region="us-west-2")
        assert clients.bedrock._region == "us-west-2"


@pytest.mark.unit
class TestSessionProvider:
    def test_build_client_kwargs_defaults(self):
        kwargs = SessionProvider().build_client_kwargs("sns")
        assert kwargs == {"session_config": None, "client_config": None, "role_arn": None}

    def test_build_client_kwargs_full(self):
        provider = SessionProvider(
            region="ca-central-1",
            endpoint_url="http://localhost:4566",
            botocore_config={"read_timeout": 4.0},
            role_arn="arn:aws:iam::123456789012:role/Alerts",
        )

        kwargs = provider.build_client_kwargs("sns")

        assert kwargs["session_config"] == {"region_name": "ca-central-1"}
        assert kwargs["client_config"] == {
            "region_name": "ca-central-1",
            "endpoint_url": "http://localhost:4566",
            "botocore_config": {"read_timeout": 4.0},
        }
        assert kwargs["role_arn"] == "arn:aws:iam::123456789012:role/Alerts"

    def test_region_override(self):
        provider = SessionProvider(region="ca-central-1")
        kwargs = provider.build_client_kwargs("ce", region="us-east-1")
        assert kwargs["session_config"] == {"region_name": "us-east-1"}

    def test_get_boto3_client_uses_built_kwargs(self, monkeypatch):
        captured = {}

        def fake_get_boto3_client(service_name, **kwargs):
            captured["service_name"] = service_name
            captured.update(kwargs)
            return "client"

        monkeypatch.setattr(
            session_provider_module, "get_boto3_client", fake_get_boto3_client
        )

        client = SessionProvider(region="ca-central-1").get_boto3_client("sns")

        assert client == "client"
        assert captured["service_name"] == "sns"
        assert captured["session_config"] == {"region_name": "ca-central-1"}

"""Tests for SNSClient.

Validates request parameters built for publish and platform endpoint
operations, and that failures come back as classified OperationResults.
"""

import json

import pytest

from infrastructure.clients.aws.sns import SNSClient
from infrastructure.operations.status import OperationStatus
from tests.factories import make_client_error

PLATFORM_ARN = "arn:aws:sns:ca-central-1:123456789012:app/APNS/spend-monitor"
ENDPOINT_ARN = "arn:aws:sns:ca-central-1:123456789012:endpoint/APNS/spend-monitor/0001"
TOPIC_ARN = "arn:aws:sns:ca-central-1:123456789012:spend-alerts-email"


@pytest.fixture
def sns_client(session_provider):
    return SNSClient(session_provider)


@pytest.mark.unit
class TestSNSClientPublish:
    def test_publish_to_topic_with_subject(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(api_responses={"publish": {"MessageId": "m-1"}})
        calls = patch_boto3_client(client)

        result = sns_client.publish("body", topic_arn=TOPIC_ARN, subject="Spend alert")

        assert result.is_success
        assert result.data["MessageId"] == "m-1"
        assert client.calls == [
            (
                "publish",
                {"Message": "body", "TopicArn": TOPIC_ARN, "Subject": "Spend alert"},
            )
        ]
        assert calls[0]["service_name"] == "sns"
        assert calls[0]["session_config"] == {"region_name": "ca-central-1"}

    def test_publish_to_endpoint_with_json_structure(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(api_responses={"publish": {"MessageId": "m-2"}})
        patch_boto3_client(client)
        attributes = {"severity": {"DataType": "String", "StringValue": "critical"}}

        sns_client.publish(
            '{"default": "x"}',
            target_arn=ENDPOINT_ARN,
            message_structure="json",
            message_attributes=attributes,
        )

        _, kwargs = client.calls[0]
        assert kwargs["TargetArn"] == ENDPOINT_ARN
        assert kwargs["MessageStructure"] == "json"
        assert kwargs["MessageAttributes"] == attributes
        assert "TopicArn" not in kwargs
        assert "Subject" not in kwargs

    def test_publish_failure_keeps_error_code(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(
            api_responses={"publish": make_client_error("EndpointDisabled")}
        )
        patch_boto3_client(client)

        result = sns_client.publish("body", target_arn=ENDPOINT_ARN)

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "EndpointDisabled"


@pytest.mark.unit
class TestSNSClientEndpoints:
    def test_create_platform_endpoint_serializes_user_data(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(
            api_responses={"create_platform_endpoint": {"EndpointArn": ENDPOINT_ARN}}
        )
        patch_boto3_client(client)

        result = sns_client.create_platform_endpoint(
            PLATFORM_ARN, "ab" * 32, custom_user_data={"registered_at": "2024-03-01"}
        )

        assert result.data["EndpointArn"] == ENDPOINT_ARN
        _, kwargs = client.calls[0]
        assert kwargs["PlatformApplicationArn"] == PLATFORM_ARN
        assert kwargs["Token"] == "ab" * 32
        assert json.loads(kwargs["CustomUserData"]) == {"registered_at": "2024-03-01"}

    def test_create_platform_endpoint_without_user_data(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(
            api_responses={"create_platform_endpoint": {"EndpointArn": ENDPOINT_ARN}}
        )
        patch_boto3_client(client)

        sns_client.create_platform_endpoint(PLATFORM_ARN, "ab" * 32)

        _, kwargs = client.calls[0]
        assert "CustomUserData" not in kwargs

    def test_set_endpoint_attributes(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(api_responses={"set_endpoint_attributes": {}})
        patch_boto3_client(client)

        result = sns_client.set_endpoint_attributes(
            ENDPOINT_ARN, {"Token": "cd" * 32, "Enabled": "true"}
        )

        assert result.is_success
        assert client.calls == [
            (
                "set_endpoint_attributes",
                {
                    "EndpointArn": ENDPOINT_ARN,
                    "Attributes": {"Token": "cd" * 32, "Enabled": "true"},
                },
            )
        ]

    def test_get_endpoint_attributes_not_found(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(
            api_responses={
                "get_endpoint_attributes": make_client_error("NotFound", http_status=404)
            }
        )
        patch_boto3_client(client)

        result = sns_client.get_endpoint_attributes(ENDPOINT_ARN)

        assert result.status == OperationStatus.NOT_FOUND
        assert result.http_status == 404

    def test_delete_endpoint(self, sns_client, make_fake_client, patch_boto3_client):
        client = make_fake_client(api_responses={"delete_endpoint": {}})
        patch_boto3_client(client)

        assert sns_client.delete_endpoint(ENDPOINT_ARN).is_success
        assert client.calls == [("delete_endpoint", {"EndpointArn": ENDPOINT_ARN})]

    def test_list_endpoints_passes_next_token(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        page = {"Endpoints": [{"EndpointArn": ENDPOINT_ARN, "Attributes": {}}]}
        client = make_fake_client(
            api_responses={"list_endpoints_by_platform_application": page}
        )
        patch_boto3_client(client)

        first = sns_client.list_endpoints_by_platform_application(PLATFORM_ARN)
        sns_client.list_endpoints_by_platform_application(PLATFORM_ARN, next_token="t-1")

        assert first.data == page
        assert client.calls[0][1] == {"PlatformApplicationArn": PLATFORM_ARN}
        assert client.calls[1][1] == {
            "PlatformApplicationArn": PLATFORM_ARN,
            "NextToken": "t-1",
        }

    def test_get_platform_application_attributes(
        self, sns_client, make_fake_client, patch_boto3_client
    ):
        client = make_fake_client(
            api_responses={
                "get_platform_application_attributes": {
                    "Attributes": {"Enabled": "true"}
                }
            }
        )
        patch_boto3_client(client)

        result = sns_client.get_platform_application_attributes(PLATFORM_ARN)

        assert result.data["Attributes"]["Enabled"] == "true"

"""Tests for DynamoDBClient."""

import pytest

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.operations.status import OperationStatus
from tests.factories import make_client_error

TABLE = "spend-alert-state"
KEY = {"pk": {"S": "circuit_breaker:push:sns"}}


@pytest.fixture
def dynamodb_client(session_provider):
    return DynamoDBClient(session_provider)


@pytest.mark.unit
class TestDynamoDBClient:
    def test_get_item(self, dynamodb_client, make_fake_client, patch_boto3_client):
        item = {**KEY, "state": {"S": "open"}}
        fake = make_fake_client(api_responses={"get_item": {"Item": item}})
        calls = patch_boto3_client(fake)

        result = dynamodb_client.get_item(TABLE, Key=KEY)

        assert result.data["Item"] == item
        assert fake.calls == [("get_item", {"TableName": TABLE, "Key": KEY})]
        assert calls[0]["service_name"] == "dynamodb"

    def test_put_item_passes_extra_kwargs(
        self, dynamodb_client, make_fake_client, patch_boto3_client
    ):
        fake = make_fake_client(api_responses={"put_item": {}})
        patch_boto3_client(fake)

        dynamodb_client.put_item(
            TABLE, Item=KEY, ConditionExpression="attribute_not_exists(pk)"
        )

        assert fake.calls == [
            (
                "put_item",
                {
                    "TableName": TABLE,
                    "Item": KEY,
                    "ConditionExpression": "attribute_not_exists(pk)",
                },
            )
        ]

    def test_delete_item(self, dynamodb_client, make_fake_client, patch_boto3_client):
        fake = make_fake_client(api_responses={"delete_item": {}})
        patch_boto3_client(fake)

        assert dynamodb_client.delete_item(TABLE, Key=KEY).is_success

    def test_scan_follows_pagination(
        self, dynamodb_client, make_fake_client, patch_boto3_client
    ):
        fake = make_fake_client(
            paginated_pages=[
                {"Items": [{"pk": {"S": "a"}}]},
                {"Items": [{"pk": {"S": "b"}}]},
            ]
        )
        patch_boto3_client(fake)

        result = dynamodb_client.scan(TABLE)

        assert result.data == [{"pk": {"S": "a"}}, {"pk": {"S": "b"}}]
        assert fake.paginator.calls == [{"TableName": TABLE}]

    def test_missing_table(self, dynamodb_client, make_fake_client, patch_boto3_client):
        patch_boto3_client(
            make_fake_client(
                api_responses={
                    "get_item": make_client_error(
                        "ResourceNotFoundException", http_status=400, operation="GetItem"
                    )
                }
            )
        )

        result = dynamodb_client.get_item(TABLE, Key=KEY)

        assert result.status == OperationStatus.NOT_FOUND

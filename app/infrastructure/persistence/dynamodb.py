"""DynamoDB-backed KeyValueStore.

Table schema:
- Partition Key: ``pk`` (string)
- Remaining attributes: the item's fields, serialized with boto3's
  TypeSerializer (floats stored as Decimal)
"""

from decimal import Decimal
from typing import Any, Dict, Iterator, Optional, Tuple

import structlog
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.operations.errors import ProviderError

logger = structlog.get_logger()

PARTITION_KEY = "pk"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_dynamo_value(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo_value(v) for v in value]
    return value


def _from_dynamo_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo_value(v) for v in value]
    return value


def serialize_item(key: str, item: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a plain dict into DynamoDB attribute-value format."""
    record = {PARTITION_KEY: key, **_to_dynamo_value(item)}
    return {k: _serializer.serialize(v) for k, v in record.items() if v is not None}


def deserialize_item(raw: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Convert a DynamoDB item back into (key, plain dict)."""
    record = {k: _from_dynamo_value(_deserializer.deserialize(v)) for k, v in raw.items()}
    key = record.pop(PARTITION_KEY)
    return key, record


class DynamoDBKeyValueStore:
    """KeyValueStore over a single DynamoDB table.

    Args:
        client: DynamoDBClient wrapper
        table_name: Table with a string partition key named ``pk``
    """

    def __init__(self, client: DynamoDBClient, table_name: str) -> None:
        self._client = client
        self.table_name = table_name

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        result = self._client.get_item(
            self.table_name, Key={PARTITION_KEY: {"S": key}}
        )
        if not result.is_success:
            raise ProviderError.from_result("dynamodb.get_item", result)
        raw = (result.data or {}).get("Item")
        if not raw:
            return None
        return deserialize_item(raw)[1]

    def put(self, key: str, item: Dict[str, Any]) -> None:
        result = self._client.put_item(self.table_name, Item=serialize_item(key, item))
        if not result.is_success:
            raise ProviderError.from_result("dynamodb.put_item", result)

    def delete(self, key: str) -> None:
        result = self._client.delete_item(
            self.table_name, Key={PARTITION_KEY: {"S": key}}
        )
        if not result.is_success:
            raise ProviderError.from_result("dynamodb.delete_item", result)

    def scan(self) -> Iterator[Tuple[str, Dict[str, Any]]]:
        result = self._client.scan(self.table_name)
        if not result.is_success:
            raise ProviderError.from_result("dynamodb.scan", result)
        logger.debug("dynamodb_store_scanned", table=self.table_name, count=len(result.data))
        for raw in result.data or []:
            yield deserialize_item(raw)

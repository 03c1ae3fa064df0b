"""Persistence layer.

Key-value storage for device registrations and shared operational state,
with in-memory and DynamoDB implementations.
"""

from infrastructure.persistence.dynamodb import DynamoDBKeyValueStore
from infrastructure.persistence.store import InMemoryKeyValueStore, KeyValueStore

__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "DynamoDBKeyValueStore"]

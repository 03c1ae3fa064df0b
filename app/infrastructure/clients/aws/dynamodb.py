"""DynamoDB client for AWS operations.

Provides access to the DynamoDB item operations used by the key-value
persistence layer, with OperationResult return types.
"""

from typing import Any, Dict

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class DynamoDBClient:
    """Client for DynamoDB operations.

    Args:
        session_provider: SessionProvider instance for credential/config management
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self._service_name = "dynamodb"

    def _call(self, method: str, **kwargs) -> OperationResult:
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self._service_name
        )
        return execute_aws_api_call(
            self._service_name, method, **client_kwargs, **kwargs
        )

    def get_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Get an item (``data["Item"]`` is absent when not found)."""
        return self._call("get_item", TableName=table_name, Key=Key, **kwargs)

    def put_item(
        self, table_name: str, Item: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Put an item (DynamoDB attribute-value format)."""
        return self._call("put_item", TableName=table_name, Item=Item, **kwargs)

    def delete_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Delete an item by primary key."""
        return self._call("delete_item", TableName=table_name, Key=Key, **kwargs)

    def scan(self, table_name: str, **kwargs) -> OperationResult:
        """Scan the whole table, following pagination.

        Returns:
            OperationResult whose ``data`` is the list of items
        """
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self._service_name
        )
        return execute_aws_api_call(
            self._service_name,
            "scan",
            keys=["Items"],
            force_paginate=True,
            TableName=table_name,
            **client_kwargs,
            **kwargs,
        )

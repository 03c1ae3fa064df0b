"""Outcome of a single AWS API call.

The client wrappers in ``infrastructure.clients.aws`` never raise for
service errors; they return an ``OperationResult`` carrying the AWS error
code and HTTP status so ``classify_error`` can map a failure to an
``ErrorCategory`` without parsing message text.
"""

from typing import Optional, Any
from dataclasses import dataclass

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Status, payload and provider error details of one call.

    Attributes:
        status: How the call ended
        message: Log-friendly description
        data: Raw response on success (MessageId, EndpointArn, Item, ...)
        error_code: AWS error code such as "EndpointDisabled" or "Throttling"
        retry_after: Back-off hint in seconds, set for throttling only
        http_status: HTTP status from the AWS response metadata
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None
    http_status: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def is_transient(self) -> bool:
        return self.status == OperationStatus.TRANSIENT_ERROR

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        http_status: Optional[int] = None,
    ) -> "OperationResult":
        return cls(
            status=status,
            message=message,
            error_code=error_code,
            retry_after=retry_after,
            http_status=http_status,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        http_status: Optional[int] = None,
    ) -> "OperationResult":
        """Throttling, 5xx or a dropped connection; the retry executor retries it."""
        return cls.error(
            OperationStatus.TRANSIENT_ERROR,
            message,
            error_code=error_code,
            retry_after=retry_after,
            http_status=http_status,
        )

    @classmethod
    def permanent_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        http_status: Optional[int] = None,
    ) -> "OperationResult":
        """Invalid parameter, disabled endpoint or unknown failure; never retried."""
        return cls.error(
            OperationStatus.PERMANENT_ERROR,
            message,
            error_code=error_code,
            http_status=http_status,
        )

"""Operation result types, error categories and classifiers.

Standardized result types for provider calls, the closed error category
set used by the delivery core, the exception hierarchy and the single
classifier that maps any caught exception onto a category.
"""

from infrastructure.operations.classifiers import (
    ErrorClassification,
    classify_aws_error,
    classify_error,
)
from infrastructure.operations.errors import (
    AggregateDeliveryError,
    ChannelError,
    DeliveryError,
    DeviceNotFoundError,
    ProviderError,
    RetryExhaustedError,
    ValidationError,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import ErrorCategory, OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "ErrorCategory",
    "ErrorClassification",
    "classify_error",
    "classify_aws_error",
    "DeliveryError",
    "ProviderError",
    "ChannelError",
    "ValidationError",
    "DeviceNotFoundError",
    "RetryExhaustedError",
    "AggregateDeliveryError",
]

"""Delivery-core exception hierarchy.

Provider adapters turn failed ``OperationResult`` values into
``ProviderError``; channels raise ``ChannelError`` for failures that are
specific to one delivery mechanism; the retry and dispatch layers wrap
those into ``RetryExhaustedError`` and ``AggregateDeliveryError``.

Each exception either carries its own ``ErrorCategory`` or, for
``ProviderError``, the provider's error code and HTTP status so that
``classify_error`` can map it without looking at message text.
"""

from typing import Any, Optional, Sequence

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import ErrorCategory


class DeliveryError(Exception):
    """Base class for delivery-core errors.

    Attributes:
        message: human-friendly message
        code: machine error code
        category: error category, or None when it must be derived
    """

    category: Optional[ErrorCategory] = None
    default_code: str = "DELIVERY_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ProviderError(DeliveryError):
    """Raised by provider adapters when an AWS call reports an error.

    Attributes:
        response: the failed OperationResult returned by the client wrapper
    """

    default_code = "PROVIDER_ERROR"

    def __init__(self, message: str, response: Optional[OperationResult] = None):
        code = response.error_code if response and response.error_code else None
        super().__init__(message, code=code)
        self.response = response

    @property
    def http_status(self) -> Optional[int]:
        return self.response.http_status if self.response else None

    @classmethod
    def from_result(cls, operation: str, result: OperationResult) -> "ProviderError":
        return cls(f"{operation} failed: {result.message}", response=result)


class ChannelError(DeliveryError):
    """A failure specific to one delivery channel.

    Never retried on the same channel; the dispatcher moves to the next one.
    """

    category = ErrorCategory.CHANNEL_SPECIFIC

    ENDPOINT_DISABLED = "ENDPOINT_DISABLED"
    INVALID_DEVICE_TOKEN = "INVALID_DEVICE_TOKEN"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    NO_TARGETS = "NO_TARGETS"

    default_code = "CHANNEL_ERROR"

    def __init__(self, channel: str, message: str, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.channel = channel


class ValidationError(DeliveryError):
    """Malformed input (device token, configuration). Never retried."""

    category = ErrorCategory.VALIDATION
    default_code = "VALIDATION_ERROR"


class DeviceNotFoundError(ValidationError):
    """No registered device matches the given endpoint."""

    default_code = "DEVICE_NOT_FOUND"


class RetryExhaustedError(DeliveryError):
    """All attempts of a retry policy failed with retryable errors.

    Attributes:
        operation_name: name passed to the retry executor
        attempts: number of attempts made
        last_error: the error raised by the final attempt
    """

    default_code = "RETRY_EXHAUSTED"

    def __init__(self, operation_name: str, attempts: int, last_error: Exception):
        super().__init__(
            f"{operation_name} failed after {attempts} attempts: {last_error}"
        )
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error


class AggregateDeliveryError(DeliveryError):
    """Every configured channel failed to deliver an alert.

    Attributes:
        failures: per-channel DeliveryAttempt records, in attempt order
    """

    default_code = "ALL_CHANNELS_FAILED"

    def __init__(self, failures: Sequence[Any]):
        reasons = "; ".join(
            f"{failure.channel}: {failure.error_code} ({failure.error_message})"
            for failure in failures
        )
        super().__init__(
            f"All {len(failures)} notification channels failed: {reasons or 'none configured'}"
        )
        self.failures = list(failures)

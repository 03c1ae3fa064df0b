"""Error classifiers for provider exceptions.

Two entry points:

- ``classify_aws_error()`` converts a boto3/botocore exception raised by an
  AWS call into an ``OperationResult``, preserving the AWS error code and
  HTTP status.
- ``classify_error()`` maps any exception (AWS, delivery-core, builtin) to
  an ``ErrorClassification`` over the closed ``ErrorCategory`` enum. The
  retry executor and dispatcher call it once, where they catch the error.

Classification uses error codes, HTTP status codes and exception types.
Message text is never inspected.

Usage:
    from infrastructure.operations.classifiers import classify_error

    try:
        channel.send(notification, config)
    except Exception as exc:
        classification = classify_error(exc)
        if classification.retryable:
            ...
"""

from dataclasses import dataclass
from typing import Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
)

from infrastructure.operations.errors import (
    DeliveryError,
    ProviderError,
    RetryExhaustedError,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import ErrorCategory, OperationStatus

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
TERMINAL_STATUS_CODES = frozenset({400, 401, 403, 404, 409, 413, 422})

TRANSIENT_ERROR_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "Throttled",
        "TooManyRequestsException",
        "RequestLimitExceeded",
        "ProvisionedThroughputExceededException",
        "ServiceUnavailable",
        "ServiceUnavailableException",
        "InternalError",
        "InternalErrorException",
        "InternalFailure",
        "InternalServerError",
        "InternalServerErrorException",
        "RequestTimeout",
        "RequestTimeoutException",
        "ModelTimeoutException",
        "ModelNotReadyException",
        "TimeoutError",
        "NetworkingError",
        "EndpointConnectionError",
        "ConnectTimeoutError",
        "ReadTimeoutError",
        "ConnectionClosedError",
        "ECONNRESET",
        "ECONNREFUSED",
        "ENOTFOUND",
        "ETIMEDOUT",
    }
)

THROTTLING_ERROR_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "Throttled",
        "TooManyRequestsException",
        "RequestLimitExceeded",
    }
)

CHANNEL_ERROR_CODES = frozenset(
    {
        "EndpointDisabled",
        "EndpointDisabledException",
        "PlatformApplicationDisabled",
        "PlatformApplicationDisabledException",
        "KMSDisabled",
        "KMSDisabledException",
    }
)

VALIDATION_ERROR_CODES = frozenset(
    {
        "ValidationException",
        "ValidationError",
        "InvalidParameter",
        "InvalidParameterException",
        "InvalidParameterValue",
        "InvalidParameterValueException",
        "BadRequestException",
        "AccessDenied",
        "AccessDeniedException",
        "AuthorizationError",
        "AuthorizationErrorException",
        "UnauthorizedOperation",
        "UnrecognizedClientException",
        "NotFound",
        "NotFoundException",
        "ResourceNotFoundException",
    }
)

UNAUTHORIZED_ERROR_CODES = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "AuthorizationError",
        "AuthorizationErrorException",
        "UnauthorizedOperation",
        "UnrecognizedClientException",
    }
)

NOT_FOUND_ERROR_CODES = frozenset(
    {"NotFound", "NotFoundException", "ResourceNotFoundException"}
)


@dataclass(frozen=True)
class ErrorClassification:
    """Result of classifying a caught error.

    Attributes:
        category: ErrorCategory the error belongs to
        code: machine error code (provider code or delivery-core code)
        http_status: HTTP status when the provider reported one
    """

    category: ErrorCategory
    code: str
    http_status: Optional[int] = None

    @property
    def retryable(self) -> bool:
        return self.category == ErrorCategory.TRANSIENT


def _classify_code(
    code: Optional[str], http_status: Optional[int]
) -> Optional[ErrorCategory]:
    if code in TRANSIENT_ERROR_CODES:
        return ErrorCategory.TRANSIENT
    if code in CHANNEL_ERROR_CODES:
        return ErrorCategory.CHANNEL_SPECIFIC
    if code in VALIDATION_ERROR_CODES:
        return ErrorCategory.VALIDATION
    if http_status in RETRYABLE_STATUS_CODES:
        return ErrorCategory.TRANSIENT
    if http_status in TERMINAL_STATUS_CODES:
        return ErrorCategory.VALIDATION
    return None


def _client_error_details(exc: ClientError) -> tuple[str, Optional[int], str]:
    response = exc.response or {}
    error_info = response.get("Error", {})
    code = error_info.get("Code", "Unknown")
    message = error_info.get("Message", str(exc))
    http_status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code, http_status, message


def classify_error(exc: BaseException) -> ErrorClassification:
    """Map any exception onto the closed ErrorCategory set.

    Rules, in order:
    - RetryExhaustedError: classification of its last error
    - Delivery-core errors with a fixed category (ChannelError, ValidationError)
    - ProviderError and botocore ClientError: error code, then HTTP status
    - botocore connection/timeout errors and builtin TimeoutError or
      ConnectionError: TRANSIENT
    - any other exception exposing an integer ``status_code``: HTTP status
    - everything else: UNKNOWN (terminal)

    Args:
        exc: The caught exception

    Returns:
        ErrorClassification for the exception
    """
    if isinstance(exc, RetryExhaustedError):
        return classify_error(exc.last_error)

    if isinstance(exc, DeliveryError) and exc.category is not None:
        return ErrorClassification(exc.category, exc.code)

    if isinstance(exc, ProviderError):
        http_status = exc.http_status
        category = _classify_code(exc.code, http_status)
        if category is None and exc.response is not None and exc.response.is_transient:
            category = ErrorCategory.TRANSIENT
        return ErrorClassification(
            category or ErrorCategory.UNKNOWN, exc.code, http_status
        )

    if isinstance(exc, ClientError):
        code, http_status, _ = _client_error_details(exc)
        category = _classify_code(code, http_status)
        return ErrorClassification(category or ErrorCategory.UNKNOWN, code, http_status)

    if isinstance(exc, (BotoConnectionError, HTTPClientError)):
        return ErrorClassification(ErrorCategory.TRANSIENT, type(exc).__name__)

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return ErrorClassification(ErrorCategory.TRANSIENT, type(exc).__name__)

    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        category = _classify_code(None, status_code)
        return ErrorClassification(
            category or ErrorCategory.UNKNOWN, f"HTTP_{status_code}", status_code
        )

    return ErrorClassification(ErrorCategory.UNKNOWN, type(exc).__name__)


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors into OperationResult.

    The AWS error code is kept verbatim in ``error_code`` and the HTTP status
    in ``http_status`` so callers can re-classify the failure later.

    Status Mapping:
    - Throttling, timeouts, 5xx, connection errors: TRANSIENT_ERROR
    - AccessDenied/AuthorizationError: UNAUTHORIZED
    - NotFound/ResourceNotFoundException: NOT_FOUND
    - Everything else: PERMANENT_ERROR

    Args:
        exc: Exception raised by boto3/botocore

    Returns:
        OperationResult describing the failure

    Example:
        try:
            response = client.publish(TargetArn=arn, Message=message)
        except (ClientError, BotoCoreError) as e:
            return classify_aws_error(e)
    """
    if isinstance(exc, ClientError):
        code, http_status, message = _client_error_details(exc)

        if code in UNAUTHORIZED_ERROR_CODES:
            return OperationResult.error(
                OperationStatus.UNAUTHORIZED,
                message,
                error_code=code,
                http_status=http_status,
            )
        if code in NOT_FOUND_ERROR_CODES:
            return OperationResult.error(
                OperationStatus.NOT_FOUND,
                message,
                error_code=code,
                http_status=http_status,
            )
        if _classify_code(code, http_status) == ErrorCategory.TRANSIENT:
            retry_after = (
                60 if http_status == 429 or code in THROTTLING_ERROR_CODES else None
            )
            return OperationResult.transient_error(
                message,
                error_code=code,
                retry_after=retry_after,
                http_status=http_status,
            )
        return OperationResult.permanent_error(
            message, error_code=code, http_status=http_status
        )

    if isinstance(exc, (BotoConnectionError, HTTPClientError)):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {exc}",
            error_code=type(exc).__name__,
        )

    if isinstance(exc, BotoCoreError):
        return OperationResult.permanent_error(
            f"AWS client error: {type(exc).__name__}: {exc}",
            error_code=type(exc).__name__,
        )

    return OperationResult.permanent_error(
        f"Unexpected error: {type(exc).__name__}: {exc}",
        error_code="UNKNOWN_ERROR",
    )

"""Operation status and error category enumerations.

``OperationStatus`` describes how a single provider call ended.
``ErrorCategory`` is the closed set of error kinds the delivery core
reasons about; every caught exception is mapped onto it exactly once by
``infrastructure.operations.classifiers.classify_error``.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, throttling, 5xx)
        PERMANENT_ERROR: Non-retryable error (validation, bad request)
        UNAUTHORIZED: Authentication or authorization failure
        NOT_FOUND: Resource not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"


class ErrorCategory(Enum):
    """How an error propagates through the delivery core.

    Attributes:
        TRANSIENT: Timeouts, throttling, 5xx, connection resets. Retried.
        CHANNEL_SPECIFIC: Bad device token, disabled endpoint, oversize
            payload, rejected credential, open circuit. Terminal for the
            channel; the dispatcher falls back immediately.
        VALIDATION: Malformed input, authorization, not found. Terminal.
        UNKNOWN: Anything unrecognised. Treated as terminal.
    """

    TRANSIENT = "transient"
    CHANNEL_SPECIFIC = "channel_specific"
    VALIDATION = "validation"
    UNKNOWN = "unknown"

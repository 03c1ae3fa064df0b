"""Enrichment error hierarchy.

Kept apart from the delivery-core errors: enrichment failures never affect
alert delivery and are converted to fallback results by the rate limiter.
"""


class EnrichmentError(Exception):
    """Base class for enrichment failures.

    Attributes:
        message: human-friendly message
        code: machine error code
    """

    default_code = "ENRICHMENT_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class BudgetExceededError(EnrichmentError):
    """The call would exceed (or the period has exhausted) the monthly budget."""

    default_code = "BUDGET_EXCEEDED"


class RateLimitExceededError(EnrichmentError):
    """The per-minute allowance for the current window is used up."""

    default_code = "RATE_LIMIT_EXCEEDED"


class MalformedResponseError(EnrichmentError):
    """The model returned an empty or unparsable response."""

    default_code = "MALFORMED_RESPONSE"

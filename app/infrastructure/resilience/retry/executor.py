"""Retry executor for outbound calls.

Runs an operation under a RetryPolicy, classifying each failure once with
``classify_error``:

- terminal (validation, channel-specific, unknown): re-raised unchanged
  after the first failure
- transient: retried with backoff until the policy is exhausted, then
  surfaced as RetryExhaustedError chained from the last error

The executor has no side effects beyond calling the operation and
sleeping between attempts.
"""

import random
import time
from typing import Callable, Optional, TypeVar

from infrastructure.logging import get_module_logger
from infrastructure.operations.classifiers import classify_error
from infrastructure.operations.errors import RetryExhaustedError
from infrastructure.resilience.retry.config import RetryPolicy

logger = get_module_logger()

T = TypeVar("T")


class RetryExecutor:
    """Executes operations with classified exponential-backoff retry.

    Args:
        default_policy: Policy used when ``execute`` gets none
        sleep: Blocking sleep function; injectable for tests
        rng: Uniform [0, 1) source for jitter; injectable for tests
    """

    def __init__(
        self,
        default_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self.default_policy = default_policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng

    def execute(
        self,
        operation: Callable[[], T],
        policy: Optional[RetryPolicy] = None,
        operation_name: str = "operation",
    ) -> T:
        """Run ``operation`` until it succeeds, fails terminally or exhausts.

        Args:
            operation: Zero-argument callable
            policy: Retry policy; defaults to the executor's default policy
            operation_name: Name used in logs and in RetryExhaustedError

        Returns:
            The operation's return value

        Raises:
            RetryExhaustedError: Every attempt failed with a retryable error
            Exception: The first terminal error, unchanged
        """
        policy = policy or self.default_policy

        for attempt in range(1, policy.max_attempts + 1):
            try:
                return operation()
            except Exception as exc:
                classification = classify_error(exc)

                if not classification.retryable:
                    logger.info(
                        "retry_terminal_error",
                        operation=operation_name,
                        attempt=attempt,
                        category=classification.category.value,
                        error_code=classification.code,
                    )
                    raise

                if attempt >= policy.max_attempts:
                    logger.warning(
                        "retry_exhausted",
                        operation=operation_name,
                        attempts=attempt,
                        error_code=classification.code,
                        error=str(exc),
                    )
                    raise RetryExhaustedError(operation_name, attempt, exc) from exc

                delay = policy.compute_delay(attempt, self._rng)
                logger.warning(
                    "retry_attempt_failed",
                    operation=operation_name,
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    error_code=classification.code,
                    delay_seconds=round(delay, 3),
                )
                self._sleep(delay)

        # max_attempts >= 1 guarantees the loop returns or raises
        raise AssertionError("unreachable")

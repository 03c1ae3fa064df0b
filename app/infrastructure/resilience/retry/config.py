"""Retry policy configuration.

Defines the backoff parameters applied by the RetryExecutor to one kind of
outbound call.
"""

import random
from dataclasses import dataclass
from typing import Callable

JITTER_RATIO = 0.25


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded, jittered exponential backoff.

    All times are in seconds.

    Attributes:
        max_attempts: Total attempts including the first call (>= 1)
        base_delay: Delay before the second attempt
        max_delay: Cap applied to every delay
        backoff_multiplier: Growth factor between consecutive delays
        jitter: Randomize each delay by up to +/-25%

    Example:
        # Defaults: 3 attempts, 1s then 2s between them
        policy = RetryPolicy()

        # Push gets one quick retry before falling back to email
        policy = RetryPolicy(max_attempts=2, base_delay=0.5)
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    jitter: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be at least 1")

    def compute_delay(
        self, attempt: int, rng: Callable[[], float] = random.random
    ) -> float:
        """Delay to wait after the given (1-based) failed attempt.

        delay(n) = min(max_delay, base_delay * backoff_multiplier ** (n - 1)),
        then jittered uniformly within +/-25% and floored at zero.

        Args:
            attempt: Number of the attempt that just failed
            rng: Uniform [0, 1) source

        Returns:
            Delay in seconds
        """
        delay = min(
            self.max_delay, self.base_delay * self.backoff_multiplier ** (attempt - 1)
        )
        if self.jitter:
            delay += (rng() - 0.5) * 2 * JITTER_RATIO * delay
        return max(0.0, delay)

    @classmethod
    def from_settings(cls, resilience_settings, **overrides) -> "RetryPolicy":
        """Build a policy from ResilienceSettings, with per-call overrides."""
        values = {
            "max_attempts": resilience_settings.retry_attempts,
            "base_delay": resilience_settings.retry_base_delay_seconds,
            "max_delay": resilience_settings.retry_max_delay_seconds,
            "jitter": resilience_settings.retry_jitter,
        }
        values.update(overrides)
        return cls(**values)

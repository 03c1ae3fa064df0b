"""Retry and circuit breaker infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ResilienceSettings(InfrastructureSettings):
    """Defaults for outbound call protection.

    Exponential Backoff:
        Delay for attempt n: min(base_delay * 2 ^ (n - 1), max_delay),
        jittered by up to +/-25% when RETRY_JITTER is set.

        Example with defaults (base=1s, max=30s):
            Attempt 1 -> 2: 1s
            Attempt 2 -> 3: 2s

    Environment Variables:
        RETRY_ATTEMPTS: Attempts per outbound call (default: 3)
        RETRY_BASE_DELAY_SECONDS: Base backoff delay (default: 1.0)
        RETRY_MAX_DELAY_SECONDS: Backoff ceiling (default: 30.0)
        RETRY_JITTER: Randomize delays (default: True)
        CIRCUIT_BREAKER_FAILURE_THRESHOLD: Consecutive failures before opening
        CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SECONDS: Time before half-open probes
        CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS: Probe successes needed to close
    """

    retry_attempts: int = Field(default=3, alias="RETRY_ATTEMPTS", ge=1)
    retry_base_delay_seconds: float = Field(
        default=1.0, alias="RETRY_BASE_DELAY_SECONDS", ge=0
    )
    retry_max_delay_seconds: float = Field(
        default=30.0, alias="RETRY_MAX_DELAY_SECONDS", ge=0
    )
    retry_jitter: bool = Field(default=True, alias="RETRY_JITTER")
    circuit_breaker_enabled: bool = Field(
        default=True,
        alias="CIRCUIT_BREAKER_ENABLED",
        description="Wrap channel sends in circuit breakers",
    )
    circuit_breaker_failure_threshold: int = Field(
        default=5, alias="CIRCUIT_BREAKER_FAILURE_THRESHOLD", ge=1
    )
    circuit_breaker_recovery_timeout_seconds: int = Field(
        default=60, alias="CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SECONDS", ge=0
    )
    circuit_breaker_half_open_max_calls: int = Field(
        default=3, alias="CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS", ge=1
    )

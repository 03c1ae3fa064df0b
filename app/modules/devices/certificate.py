"""APNS credential health monitoring.

The provider does not expose the push credential's expiry, so health is
estimated from three signals:

1. the platform application is readable and enabled
2. a throwaway endpoint can be created with a test token and deleted
3. the credential age, compared against a nominal validity window

The result's ``estimated_days_remaining`` is an estimate only.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar

from infrastructure.logging import get_module_logger
from infrastructure.notifications.providers import PushProvider
from infrastructure.operations.classifiers import classify_error
from infrastructure.operations.status import ErrorCategory
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from modules.devices.models import CertificateHealth

logger = get_module_logger()

CREDENTIAL_CHECK_TOKEN = "0" * 64
CREDENTIAL_VALIDITY_DAYS = 365
WARNING_DAYS_REMAINING = 30
CRITICAL_DAYS_REMAINING = 5

# Failures that mean the provider rejected the request; others only warn
REJECTED_CATEGORIES = (ErrorCategory.VALIDATION, ErrorCategory.CHANNEL_SPECIFIC)

T = TypeVar("T")


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class CertificateHealthMonitor:
    """Estimates APNS credential health and acts as the push health signal.

    Args:
        provider: Push provider for the platform application
        credential_issued_at: Issue date used when the provider reports none
        validity_days: Nominal credential lifetime
        retry_executor: Executor applied to the platform read and the
            credential check
        policy: Retry policy for those calls
        clock: Returns the current UTC datetime; injectable for tests
    """

    def __init__(
        self,
        provider: PushProvider,
        credential_issued_at: Optional[datetime] = None,
        validity_days: int = CREDENTIAL_VALIDITY_DAYS,
        retry_executor: Optional[RetryExecutor] = None,
        policy: Optional[RetryPolicy] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._provider = provider
        self.credential_issued_at = credential_issued_at
        self.validity_days = validity_days
        self._retry_executor = retry_executor or RetryExecutor()
        self._policy = policy
        self._clock = clock
        self._last_result: Optional[CertificateHealth] = None

    @property
    def last_result(self) -> Optional[CertificateHealth]:
        return self._last_result

    def is_push_healthy(self) -> bool:
        """Last check's validity; True until a check has run."""
        if self._last_result is None:
            return True
        return self._last_result.is_valid

    def check(self) -> CertificateHealth:
        warnings: List[str] = []
        errors: List[str] = []

        issued_at = self._check_platform(warnings, errors)
        self._check_credential(warnings, errors)

        issued_at = issued_at or self.credential_issued_at
        days_remaining: Optional[int] = None
        if issued_at is None:
            warnings.append(
                "Credential issue date unknown; expiry cannot be estimated"
            )
        else:
            age_days = (self._clock() - _as_utc(issued_at)).days
            days_remaining = self.validity_days - age_days
            if days_remaining <= CRITICAL_DAYS_REMAINING:
                errors.append(
                    f"APNS credential expires in about {days_remaining} days"
                )
            elif days_remaining <= WARNING_DAYS_REMAINING:
                warnings.append(
                    f"APNS credential expires in about {days_remaining} days"
                )

        result = CertificateHealth(
            is_valid=not errors,
            warnings=warnings,
            errors=errors,
            estimated_days_remaining=days_remaining,
            checked_at=self._clock(),
        )
        self._last_result = result

        log = logger.info if result.is_valid else logger.error
        log(
            "certificate_health_checked",
            is_valid=result.is_valid,
            estimated_days_remaining=days_remaining,
            warning_count=len(warnings),
            error_count=len(errors),
        )
        return result

    def _call(self, operation: Callable[[], T], name: str) -> T:
        return self._retry_executor.execute(
            operation, policy=self._policy, operation_name=f"certificate.{name}"
        )

    def _check_platform(
        self, warnings: List[str], errors: List[str]
    ) -> Optional[datetime]:
        try:
            attributes = self._call(
                self._provider.get_platform_attributes, "get_platform_attributes"
            )
        except Exception as e:  # pylint: disable=broad-except
            classification = classify_error(e)
            if classification.category in REJECTED_CATEGORIES:
                errors.append(
                    f"Unable to read platform application attributes: {e}"
                )
            else:
                warnings.append(
                    f"Platform application check inconclusive ({classification.code})"
                )
            logger.warning(
                "certificate_platform_check_failed",
                category=classification.category.value,
                code=classification.code,
                error=str(e),
            )
            return None
        if not attributes.enabled:
            errors.append("Platform application is disabled")
        return attributes.created_at

    def _check_credential(self, warnings: List[str], errors: List[str]) -> None:
        try:
            endpoint_arn = self._call(
                lambda: self._provider.create_endpoint(CREDENTIAL_CHECK_TOKEN),
                "create_endpoint",
            )
        except Exception as e:  # pylint: disable=broad-except
            classification = classify_error(e)
            if classification.category in REJECTED_CATEGORIES:
                errors.append(f"APNS credential rejected ({classification.code})")
            else:
                warnings.append(
                    f"Credential check inconclusive ({classification.code})"
                )
            return

        try:
            self._provider.delete_endpoint(endpoint_arn)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "certificate_check_cleanup_failed",
                endpoint_arn=endpoint_arn,
                error=str(e),
            )

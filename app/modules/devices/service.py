"""Service boundary for device management.

Module-level entry points used by the device registration handler and the
maintenance schedule. Each accepts an explicit registry or monitor for
tests; otherwise the process-wide instance built from settings is used.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.observability import MetricsRecorder
from infrastructure.services import (
    get_device_store,
    get_metrics_recorder,
    get_push_provider,
    get_resilience_service,
    get_settings,
)
from modules.devices.certificate import CertificateHealthMonitor
from modules.devices.models import DeviceEndpoint
from modules.devices.registry import DeviceRegistry

logger = get_module_logger()


@lru_cache
def get_device_registry() -> DeviceRegistry:
    return DeviceRegistry(
        get_push_provider(),
        get_device_store(),
        retry_executor=get_resilience_service().retry_executor,
    )


@lru_cache
def get_certificate_monitor() -> CertificateHealthMonitor:
    return CertificateHealthMonitor(
        get_push_provider(),
        credential_issued_at=get_settings().notifications.PUSH_CREDENTIAL_ISSUED_AT,
        retry_executor=get_resilience_service().retry_executor,
    )


def register_device(
    token: str, user_id: Optional[str] = None, registry: Optional[DeviceRegistry] = None
) -> DeviceEndpoint:
    return (registry or get_device_registry()).register(token, user_id=user_id)


def rotate_device_token(
    endpoint_arn: str, new_token: str, registry: Optional[DeviceRegistry] = None
) -> DeviceEndpoint:
    return (registry or get_device_registry()).rotate_token(endpoint_arn, new_token)


def deregister_device(
    endpoint_arn: str, registry: Optional[DeviceRegistry] = None
) -> Optional[DeviceEndpoint]:
    return (registry or get_device_registry()).deregister(endpoint_arn)


def reconcile_devices(registry: Optional[DeviceRegistry] = None) -> Dict[str, Any]:
    """Run one reconciliation pass.

    Returns:
        {"removed_count": int, "removed": [device_token], "errors": [str]}
    """
    return (registry or get_device_registry()).reconcile().to_dict()


def check_certificate_health(
    monitor: Optional[CertificateHealthMonitor] = None,
) -> Dict[str, Any]:
    """Run the push credential check.

    Returns:
        {"is_valid", "warnings", "errors", "estimated_days_remaining"}
    """
    return (monitor or get_certificate_monitor()).check().to_dict()


def run_device_maintenance(
    registry: Optional[DeviceRegistry] = None,
    monitor: Optional[CertificateHealthMonitor] = None,
    correlation_id: Optional[str] = None,
    metrics: Optional[MetricsRecorder] = None,
) -> Dict[str, Any]:
    """Scheduled maintenance: endpoint reconciliation and credential check.

    The two steps are independent; a reconciliation failure does not skip
    the certificate check.
    """
    with bind_request_context(correlation_id=correlation_id, cycle="device_maintenance"):
        reconciliation = reconcile_devices(registry)
        certificate = check_certificate_health(monitor)
        (metrics or get_metrics_recorder()).record_device_reconciliation(
            reconciliation["removed_count"], len(reconciliation["errors"])
        )
        logger.info(
            "device_maintenance_completed",
            removed_count=reconciliation["removed_count"],
            reconciliation_errors=len(reconciliation["errors"]),
            certificate_valid=certificate["is_valid"],
        )
        return {"reconciliation": reconciliation, "certificate": certificate}

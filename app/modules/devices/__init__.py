"""iOS device registration and push credential health.

Manages the lifecycle of APNS platform endpoints (register, rotate,
deregister, reconcile) and estimates push credential health for the
notification dispatcher.
"""

from modules.devices.certificate import CertificateHealthMonitor
from modules.devices.models import (
    CertificateHealth,
    DeviceEndpoint,
    ReconciliationResult,
)
from modules.devices.registry import DeviceRegistry, validate_device_token
from modules.devices.service import (
    check_certificate_health,
    deregister_device,
    get_certificate_monitor,
    get_device_registry,
    reconcile_devices,
    register_device,
    rotate_device_token,
    run_device_maintenance,
)
from modules.devices.api import DeviceRegistrationApi, handle_device_request

__all__ = [
    "CertificateHealth",
    "CertificateHealthMonitor",
    "DeviceEndpoint",
    "DeviceRegistrationApi",
    "DeviceRegistry",
    "ReconciliationResult",
    "validate_device_token",
    "check_certificate_health",
    "deregister_device",
    "get_certificate_monitor",
    "get_device_registry",
    "handle_device_request",
    "reconcile_devices",
    "register_device",
    "rotate_device_token",
    "run_device_maintenance",
]

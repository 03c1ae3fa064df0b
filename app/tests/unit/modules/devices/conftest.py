"""Fixtures for device registry and certificate health tests."""

from datetime import datetime, timezone

import pytest

from modules.devices import CertificateHealthMonitor, DeviceRegistry

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def registry(push_provider, memory_store, retry_executor):
    """DeviceRegistry over the in-memory provider and store."""
    return DeviceRegistry(
        push_provider, memory_store, retry_executor=retry_executor, clock=lambda: NOW
    )


@pytest.fixture
def monitor_factory(push_provider, retry_executor):
    """Factory for CertificateHealthMonitor with a fixed clock and no retry sleeps.

    Example:
        monitor = monitor_factory(credential_issued_at=datetime(2023, 4, 1))
    """

    def _factory(**kwargs) -> CertificateHealthMonitor:
        kwargs.setdefault("clock", lambda: NOW)
        kwargs.setdefault("retry_executor", retry_executor)
        return CertificateHealthMonitor(push_provider, **kwargs)

    return _factory

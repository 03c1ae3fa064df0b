"""Device registration models."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

DEVICE_TOKEN_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def is_valid_device_token(token: Optional[str]) -> bool:
    """True for a 64-character hex APNS device token."""
    return bool(token) and DEVICE_TOKEN_PATTERN.match(token) is not None


class DeviceEndpoint(BaseModel):
    """One registered push destination.

    Records are keyed by ``device_token``; rotation re-keys the record while
    the ``endpoint_arn`` stays the same.
    """

    device_token: str
    endpoint_arn: str
    user_id: Optional[str] = None
    registered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("device_token")
    @classmethod
    def validate_device_token(cls, v: str) -> str:
        if not is_valid_device_token(v):
            raise ValueError("Device token must be 64 hexadecimal characters")
        return v

    def to_item(self) -> Dict[str, Any]:
        """Store representation (JSON-compatible values only)."""
        return self.model_dump(mode="json")

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "DeviceEndpoint":
        return cls.model_validate(item)


class ReconciliationResult(BaseModel):
    """Outcome of one reconciliation pass.

    Attributes:
        removed: Device tokens of endpoints deleted because the provider
            reported them invalid (the endpoint ARN when no token is known)
        errors: One message per endpoint (or page) that could not be processed
        scanned: Endpoints inspected
    """

    removed: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    scanned: int = 0

    @property
    def removed_count(self) -> int:
        return len(self.removed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "removed_count": self.removed_count,
            "removed": list(self.removed),
            "errors": list(self.errors),
        }


class CertificateHealth(BaseModel):
    """Result of a push credential health check.

    ``estimated_days_remaining`` is an estimate derived from the credential's
    issue date and a nominal validity window, not the provider's own expiry.
    """

    is_valid: bool
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    estimated_days_remaining: Optional[int] = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "estimated_days_remaining": self.estimated_days_remaining,
        }

"""Request and response bodies of the device registration API.

Field names on the wire are camelCase, as sent by the iOS app; the models
accept either form.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from modules.devices.models import DeviceEndpoint

API_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterDeviceRequest(BaseModel):
    """Body of ``POST /devices``."""

    model_config = API_CONFIG

    device_token: Annotated[
        str,
        Field(
            ...,
            description="64-character hexadecimal APNS device token",
            json_schema_extra={"example": "a1b2" * 16},
        ),
    ]
    user_id: Optional[str] = None
    bundle_id: Optional[str] = None


class UpdateDeviceRequest(BaseModel):
    """Body of ``PUT /devices``.

    The device is identified by ``endpointArn`` or, as older app builds
    send it, by ``currentToken``.
    """

    model_config = API_CONFIG

    new_token: str
    endpoint_arn: Optional[str] = None
    current_token: Optional[str] = None
    user_id: Optional[str] = None

    @model_validator(mode="after")
    def require_device_reference(self) -> "UpdateDeviceRequest":
        if not self.endpoint_arn and not self.current_token:
            raise ValueError("endpointArn or currentToken is required")
        return self


class ListDevicesRequest(BaseModel):
    """Query string of ``GET /devices``."""

    model_config = API_CONFIG

    user_id: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=100)
    next_token: Optional[str] = None


class DeviceResponse(BaseModel):
    model_config = API_CONFIG

    success: bool = True
    platform_endpoint_arn: str
    registration_date: Optional[datetime] = None
    last_updated: Optional[datetime] = None


class DeviceSummary(BaseModel):
    model_config = API_CONFIG

    device_token: str
    platform_endpoint_arn: str
    user_id: Optional[str] = None
    registration_date: datetime
    last_updated: datetime

    @classmethod
    def from_device(cls, device: DeviceEndpoint) -> "DeviceSummary":
        return cls(
            device_token=device.device_token,
            platform_endpoint_arn=device.endpoint_arn,
            user_id=device.user_id,
            registration_date=device.registered_at,
            last_updated=device.last_updated,
        )


class DeviceListResponse(BaseModel):
    model_config = API_CONFIG

    success: bool = True
    devices: List[DeviceSummary] = Field(default_factory=list)
    next_token: Optional[str] = None


class DeviceDeleteResponse(BaseModel):
    model_config = API_CONFIG

    success: bool = True
    deleted_at: datetime


class ErrorResponse(BaseModel):
    model_config = API_CONFIG

    success: bool = False
    error: str
    code: Optional[str] = None

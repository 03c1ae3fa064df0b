"""API Gateway handler for device registration.

Routes (REST API, Lambda proxy integration):

    POST   /devices                  register a device token
    PUT    /devices                  move an endpoint to a new token
    GET    /devices?userId=...       list a user's devices
    DELETE /devices/{deviceToken}    deregister a device

Malformed input maps to 400, an unknown device to 404 and push provider
failures to 502. Every response carries the CORS headers the iOS app and
the web console expect.
"""

import base64
import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from urllib.parse import unquote

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from infrastructure.logging import (
    bind_request_context,
    get_module_logger,
    mask_device_token,
)
from infrastructure.operations.errors import (
    DeliveryError,
    DeviceNotFoundError,
    ValidationError,
)
from infrastructure.services import get_settings
from modules.devices.registry import DeviceRegistry, validate_device_token
from modules.devices.schemas import (
    DeviceDeleteResponse,
    DeviceListResponse,
    DeviceResponse,
    DeviceSummary,
    ErrorResponse,
    ListDevicesRequest,
    RegisterDeviceRequest,
    UpdateDeviceRequest,
)
from modules.devices.service import get_device_registry

logger = get_module_logger()

DEVICES_PATH = "/devices"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token"
    ),
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Content-Type": "application/json",
}

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]


def _response(status_code: int, body: Optional[BaseModel] = None) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": (
            body.model_dump_json(by_alias=True, exclude_none=True) if body else ""
        ),
    }


def _error(status_code: int, message: str, code: Optional[str] = None) -> Dict[str, Any]:
    return _response(status_code, ErrorResponse(error=message, code=code))


def _json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    body = event.get("body")
    if not body:
        raise ValidationError("Request body is required", code="MISSING_BODY")
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValidationError(
            "Request body must be valid JSON", code="INVALID_JSON"
        ) from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", code="INVALID_JSON")
    return payload


def _page_offset(next_token: Optional[str]) -> int:
    if not next_token:
        return 0
    if not next_token.isdigit():
        raise ValidationError("nextToken is invalid", code="INVALID_NEXT_TOKEN")
    return int(next_token)


class DeviceRegistrationApi:
    """Routes API Gateway proxy events to the device registry.

    Args:
        registry: Device registry the routes operate on
        bundle_id: Expected iOS bundle ID; a registration naming another
            bundle is rejected
        clock: Returns the current UTC datetime; injectable for tests
    """

    def __init__(
        self,
        registry: DeviceRegistry,
        bundle_id: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._registry = registry
        self.bundle_id = bundle_id
        self._clock = clock

    def handle(self, event: Dict[str, Any]) -> Dict[str, Any]:
        method = (event.get("httpMethod") or "").upper()
        path = (event.get("path") or "").rstrip("/")

        if method == "OPTIONS":
            return _response(200)

        route = self._route(method, path)
        if route is None:
            logger.warning("device_api_route_not_found", method=method, path=path)
            return _error(404, "Not Found", "NOT_FOUND")

        try:
            response = route(event)
        except DeviceNotFoundError as e:
            response = _error(404, e.message, e.code)
        except ValidationError as e:
            response = _error(400, e.message, e.code)
        except SchemaValidationError as e:
            message = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
                for err in e.errors()
            )
            response = _error(400, message, "INVALID_REQUEST")
        except DeliveryError as e:
            logger.error("device_api_provider_failed", method=method, error=str(e))
            response = _error(502, "Push provider request failed", e.code)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("device_api_failed", method=method, error=str(e))
            response = _error(500, "Internal Server Error", "INTERNAL_ERROR")

        log = logger.info if response["statusCode"] < 400 else logger.warning
        log(
            "device_api_request_completed",
            method=method,
            path=path,
            status_code=response["statusCode"],
        )
        return response

    def _route(self, method: str, path: str) -> Optional[Handler]:
        if path == DEVICES_PATH:
            return {
                "POST": self.register,
                "PUT": self.update,
                "GET": self.list_devices,
            }.get(method)
        if path.startswith(DEVICES_PATH + "/") and method == "DELETE":
            return self.delete
        return None

    def register(self, event: Dict[str, Any]) -> Dict[str, Any]:
        request = RegisterDeviceRequest.model_validate(_json_body(event))
        if request.bundle_id and self.bundle_id and request.bundle_id != self.bundle_id:
            raise ValidationError(
                f"Invalid bundle ID. Expected: {self.bundle_id}",
                code="INVALID_BUNDLE_ID",
            )
        token = validate_device_token(request.device_token)
        existed = self._registry.get_device(token) is not None

        device = self._registry.register(token, user_id=request.user_id)
        return _response(
            200 if existed else 201,
            DeviceResponse(
                platform_endpoint_arn=device.endpoint_arn,
                registration_date=device.registered_at,
                last_updated=device.last_updated,
            ),
        )

    def update(self, event: Dict[str, Any]) -> Dict[str, Any]:
        request = UpdateDeviceRequest.model_validate(_json_body(event))
        endpoint_arn = request.endpoint_arn
        if not endpoint_arn:
            current = self._registry.get_device(
                validate_device_token(request.current_token)
            )
            if current is None:
                raise DeviceNotFoundError("Device not found")
            endpoint_arn = current.endpoint_arn

        device = self._registry.rotate_token(endpoint_arn, request.new_token)
        return _response(
            200,
            DeviceResponse(
                platform_endpoint_arn=device.endpoint_arn,
                last_updated=device.last_updated,
            ),
        )

    def list_devices(self, event: Dict[str, Any]) -> Dict[str, Any]:
        request = ListDevicesRequest.model_validate(
            event.get("queryStringParameters") or {}
        )
        offset = _page_offset(request.next_token)
        devices = sorted(
            (d for d in self._registry.list_devices() if d.user_id == request.user_id),
            key=lambda d: (d.registered_at, d.device_token),
        )
        end = offset + request.limit
        return _response(
            200,
            DeviceListResponse(
                devices=[DeviceSummary.from_device(d) for d in devices[offset:end]],
                next_token=str(end) if end < len(devices) else None,
            ),
        )

    def delete(self, event: Dict[str, Any]) -> Dict[str, Any]:
        path_parameters = event.get("pathParameters") or {}
        raw_token = path_parameters.get("deviceToken") or event["path"].rstrip(
            "/"
        ).rsplit("/", 1)[-1]
        token = validate_device_token(unquote(raw_token))

        device = self._registry.get_device(token)
        if device is None:
            raise DeviceNotFoundError("Device not found")

        self._registry.deregister(device.endpoint_arn)
        logger.info("device_api_device_deleted", token=mask_device_token(token))
        return _response(200, DeviceDeleteResponse(deleted_at=self._clock()))


def handle_device_request(
    event: Dict[str, Any],
    correlation_id: Optional[str] = None,
    api: Optional[DeviceRegistrationApi] = None,
) -> Dict[str, Any]:
    """Handle one API Gateway proxy event for the device routes."""
    with bind_request_context(correlation_id=correlation_id, cycle="device_api"):
        if api is None:
            api = DeviceRegistrationApi(
                get_device_registry(),
                bundle_id=get_settings().notifications.IOS_BUNDLE_ID,
            )
        return api.handle(event)

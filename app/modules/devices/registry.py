"""Device registry: push endpoint lifecycle.

Keeps local device records (keyed by device token) in step with the push
provider's platform endpoints:

- register: create an endpoint, or update the existing one in place
- rotate_token: move an endpoint to a new token without duplicating it
- deregister: best-effort provider delete, local record always removed
- reconcile: remove endpoints the provider reports as disabled or invalid

Every provider call goes through the RetryExecutor. Token validation
happens before any provider call and is never retried.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from infrastructure.logging import get_module_logger, mask_device_token
from infrastructure.notifications.providers import PushProvider
from infrastructure.operations.errors import DeviceNotFoundError, ValidationError
from infrastructure.persistence.store import KeyValueStore
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from modules.devices.models import (
    DeviceEndpoint,
    ReconciliationResult,
    is_valid_device_token,
)

logger = get_module_logger()

T = TypeVar("T")


def validate_device_token(token: Optional[str]) -> str:
    """Return the token or raise ValidationError if it is not 64 hex chars."""
    if not isinstance(token, str) or not is_valid_device_token(token):
        raise ValidationError(
            "Device token must be a 64-character hexadecimal string",
            code="INVALID_DEVICE_TOKEN",
        )
    return token


class DeviceRegistry:
    """Registry of iOS devices backed by a KeyValueStore and a PushProvider.

    Args:
        provider: Push provider managing platform endpoints
        store: Device record store, keyed by device token. Keys that are not
            device tokens (such as shared enrichment state) are ignored.
        retry_executor: Executor applied to provider calls
        policy: Retry policy for provider calls
        clock: Returns the current UTC datetime; injectable for tests

    Example:
        registry = DeviceRegistry(push_provider, store)
        device = registry.register("a1b2...", user_id="user-123")
        registry.rotate_token(device.endpoint_arn, new_token)
    """

    def __init__(
        self,
        provider: PushProvider,
        store: KeyValueStore,
        retry_executor: Optional[RetryExecutor] = None,
        policy: Optional[RetryPolicy] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._provider = provider
        self._store = store
        self._retry_executor = retry_executor or RetryExecutor()
        self._policy = policy
        self._clock = clock

    def _call(self, operation: Callable[[], T], name: str) -> T:
        return self._retry_executor.execute(
            operation, policy=self._policy, operation_name=f"devices.{name}"
        )

    def _save(self, device: DeviceEndpoint) -> None:
        self._store.put(device.device_token, device.to_item())

    def _device_items(self) -> Iterator[Dict[str, Any]]:
        for key, item in self._store.scan():
            if is_valid_device_token(key):
                yield item

    def get_device(self, token: str) -> Optional[DeviceEndpoint]:
        item = self._store.get(token)
        return DeviceEndpoint.from_item(item) if item else None

    def list_devices(self) -> List[DeviceEndpoint]:
        return [DeviceEndpoint.from_item(item) for item in self._device_items()]

    def endpoint_arns(self) -> List[str]:
        """Endpoint ARNs of all registered devices, for push delivery."""
        return [device.endpoint_arn for device in self.list_devices()]

    def find_by_endpoint(self, endpoint_arn: str) -> Optional[DeviceEndpoint]:
        for item in self._device_items():
            if item.get("endpoint_arn") == endpoint_arn:
                return DeviceEndpoint.from_item(item)
        return None

    def register(self, token: str, user_id: Optional[str] = None) -> DeviceEndpoint:
        """Register a device token, updating the existing record if present.

        Raises:
            ValidationError: Malformed token (no provider call is made)
        """
        validate_device_token(token)
        now = self._clock()
        existing = self.get_device(token)

        if existing is not None:
            self._call(
                lambda: self._provider.set_endpoint_token(existing.endpoint_arn, token),
                "set_endpoint_token",
            )
            device = existing.model_copy(
                update={
                    "user_id": user_id if user_id is not None else existing.user_id,
                    "last_updated": now,
                }
            )
            self._save(device)
            logger.info(
                "device_registration_updated",
                token=mask_device_token(token),
                endpoint_arn=device.endpoint_arn,
            )
            return device

        user_data: Dict[str, Any] = {
            "userId": user_id,
            "registrationDate": now.isoformat(),
        }
        endpoint_arn = self._call(
            lambda: self._provider.create_endpoint(token, user_data=user_data),
            "create_endpoint",
        )
        device = DeviceEndpoint(
            device_token=token,
            endpoint_arn=endpoint_arn,
            user_id=user_id,
            registered_at=now,
            last_updated=now,
        )
        self._save(device)
        logger.info(
            "device_registered",
            token=mask_device_token(token),
            endpoint_arn=endpoint_arn,
            user_id=user_id,
        )
        return device

    def rotate_token(self, endpoint_arn: str, new_token: str) -> DeviceEndpoint:
        """Point an existing endpoint at a new device token.

        Raises:
            ValidationError: Malformed token, or token owned by another endpoint
            DeviceNotFoundError: No device registered for endpoint_arn
        """
        validate_device_token(new_token)

        owner = self.get_device(new_token)
        if owner is not None and owner.endpoint_arn != endpoint_arn:
            raise ValidationError(
                "Device token is already registered to another endpoint",
                code="TOKEN_IN_USE",
            )

        device = self.find_by_endpoint(endpoint_arn)
        if device is None:
            raise DeviceNotFoundError(f"No device registered for {endpoint_arn}")

        self._call(
            lambda: self._provider.set_endpoint_token(endpoint_arn, new_token),
            "set_endpoint_token",
        )
        rotated = device.model_copy(
            update={"device_token": new_token, "last_updated": self._clock()}
        )
        if device.device_token != new_token:
            self._store.delete(device.device_token)
        self._save(rotated)
        logger.info(
            "device_token_rotated",
            endpoint_arn=endpoint_arn,
            old_token=mask_device_token(device.device_token),
            new_token=mask_device_token(new_token),
        )
        return rotated

    def deregister(self, endpoint_arn: str) -> Optional[DeviceEndpoint]:
        """Remove a device. Provider deletion is best-effort.

        Returns:
            The removed device, or None if it was not registered locally
        """
        try:
            self._call(
                lambda: self._provider.delete_endpoint(endpoint_arn), "delete_endpoint"
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "device_provider_delete_failed",
                endpoint_arn=endpoint_arn,
                error=str(e),
            )

        device = self.find_by_endpoint(endpoint_arn)
        if device is not None:
            self._store.delete(device.device_token)
        logger.info(
            "device_deregistered", endpoint_arn=endpoint_arn, found=device is not None
        )
        return device

    def reconcile(self) -> ReconciliationResult:
        """Remove endpoints the provider reports disabled or with a bad token.

        ``removed`` lists the device token of each deleted endpoint, or its
        ARN when the provider no longer reports a token. Endpoints whose
        attributes cannot be read, or whose deletion fails, are reported in
        ``errors`` and left in place; the pass always continues.
        """
        result = ReconciliationResult()
        page_token: Optional[str] = None

        while True:
            try:
                page = self._call(
                    lambda: self._provider.list_endpoints(page_token=page_token),
                    "list_endpoints",
                )
            except Exception as e:  # pylint: disable=broad-except
                result.errors.append(f"list_endpoints: {e}")
                logger.error("device_reconciliation_list_failed", error=str(e))
                break

            for summary in page.endpoints:
                result.scanned += 1
                self._reconcile_endpoint(summary.endpoint_arn, result)

            page_token = page.next_page_token
            if not page_token:
                break

        logger.info(
            "device_reconciliation_completed",
            scanned=result.scanned,
            removed_count=result.removed_count,
            error_count=len(result.errors),
        )
        return result

    def _reconcile_endpoint(self, endpoint_arn: str, result: ReconciliationResult) -> None:
        try:
            attributes = self._call(
                lambda: self._provider.get_endpoint_attributes(endpoint_arn),
                "get_endpoint_attributes",
            )
            if attributes.enabled and is_valid_device_token(attributes.token):
                return

            self._call(
                lambda: self._provider.delete_endpoint(endpoint_arn), "delete_endpoint"
            )
        except Exception as e:  # pylint: disable=broad-except
            result.errors.append(f"{endpoint_arn}: {e}")
            logger.warning(
                "device_reconciliation_endpoint_failed",
                endpoint_arn=endpoint_arn,
                error=str(e),
            )
            return

        result.removed.append(attributes.token or endpoint_arn)
        logger.info(
            "device_endpoint_removed",
            endpoint_arn=endpoint_arn,
            enabled=attributes.enabled,
            token=mask_device_token(attributes.token) if attributes.token else None,
        )

        # The provider endpoint is already deleted here
        try:
            device = self.find_by_endpoint(endpoint_arn)
            if device is not None:
                self._store.delete(device.device_token)
        except Exception as e:  # pylint: disable=broad-except
            result.errors.append(f"{endpoint_arn}: local record cleanup failed: {e}")
            logger.warning(
                "device_record_cleanup_failed",
                endpoint_arn=endpoint_arn,
                error=str(e),
            )

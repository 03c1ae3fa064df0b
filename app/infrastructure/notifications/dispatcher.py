"""Notification dispatcher with prioritized channel fallback.

Delivers one alert through the first channel that succeeds, in the fixed
order push → email → SMS:
- Each channel send runs under the channel's RetryPolicy and a circuit
  breaker keyed ``"<channel>:<provider>"``
- Channel-specific, validation and unknown errors fall through to the next
  channel immediately; transient errors exhaust the policy first
- Push is skipped when the push health signal reports unhealthy
- Oversize APNS payloads are rejected before any provider call

Usage Example:
    from infrastructure.notifications import (
        NotificationDispatcher,
        ChannelConfig,
        EmailChannel,
        PushChannel,
    )

    dispatcher = NotificationDispatcher(
        channels=[PushChannel(push_provider), EmailChannel(publisher)],
        resilience=ResilienceService(),
        push_health=certificate_monitor,
    )

    result = dispatcher.dispatch(
        alert_context,
        ChannelConfig(
            push_endpoint_arns=[endpoint_arn],
            email_topic_arn=email_topic_arn,
        ),
    )
    result.raise_for_failure()
"""

import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.formatting import AlertFormatter
from infrastructure.notifications.models import (
    AlertContext,
    ChannelConfig,
    DeliveryAttempt,
    DeliveryOutcome,
    DispatchResult,
    Notification,
)
from infrastructure.operations.classifiers import classify_error
from infrastructure.operations.errors import ChannelError, RetryExhaustedError
from infrastructure.resilience.retry import RetryPolicy
from infrastructure.resilience.service import ResilienceService

logger = structlog.get_logger()

CHANNEL_PRIORITY = ("push", "email", "sms")

# APNS rejects payloads above 4 KB
MAX_PUSH_PAYLOAD_BYTES = 4096

DEFAULT_CHANNEL_POLICIES: Dict[str, RetryPolicy] = {
    "push": RetryPolicy(max_attempts=2, base_delay=0.5, max_delay=2.0),
    "email": RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=30.0),
    "sms": RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=30.0),
}


class PushHealthSignal(Protocol):
    """Anything that can tell the dispatcher whether push is usable."""

    def is_push_healthy(self) -> bool: ...


class NotificationDispatcher:
    """Prioritized multi-channel alert dispatcher.

    Attributes:
        channels: Channels by name; only names in CHANNEL_PRIORITY are used
        resilience: Breaker registry and shared retry executor
        formatter: Renders AlertContext into a Notification
        policies: Retry policy per channel name
        push_health: Optional push health signal
        use_circuit_breakers: Wrap sends in breakers (default: True)

    Example:
        dispatcher = NotificationDispatcher(
            channels=[PushChannel(provider), EmailChannel(publisher)],
            resilience=ResilienceService(),
        )
        result = dispatcher.dispatch(context, config)
    """

    def __init__(
        self,
        channels: Iterable[NotificationChannel],
        resilience: Optional[ResilienceService] = None,
        formatter: Optional[AlertFormatter] = None,
        policies: Optional[Dict[str, RetryPolicy]] = None,
        push_health: Optional[PushHealthSignal] = None,
        use_circuit_breakers: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.channels: Dict[str, NotificationChannel] = {
            channel.channel_name: channel for channel in channels
        }
        self.resilience = resilience or ResilienceService()
        self.formatter = formatter or AlertFormatter()
        self.policies = {**DEFAULT_CHANNEL_POLICIES, **(policies or {})}
        self.push_health = push_health
        self.use_circuit_breakers = use_circuit_breakers
        self._clock = clock

        logger.info(
            "initialized_notification_dispatcher",
            channels=list(self.channels.keys()),
            priority=[name for name in CHANNEL_PRIORITY if name in self.channels],
            circuit_breakers_enabled=use_circuit_breakers,
        )

    def dispatch(
        self, alert_context: AlertContext, channel_config: ChannelConfig
    ) -> DispatchResult:
        """Deliver an alert through the first channel that succeeds.

        Args:
            alert_context: Alert to deliver
            channel_config: Delivery targets; unconfigured channels are ignored

        Returns:
            DispatchResult with one DeliveryAttempt per channel tried
        """
        notification = self.formatter.format(alert_context)
        configured = [
            self.channels[name]
            for name in CHANNEL_PRIORITY
            if name in self.channels and self.channels[name].is_configured(channel_config)
        ]

        if not configured:
            logger.error(
                "notification_no_channels_configured",
                alert_id=notification.alert_id,
            )
            return DispatchResult(success=False, alert_id=notification.alert_id)

        attempts: List[DeliveryAttempt] = []
        skipped: List[str] = []
        delivered_channel: Optional[str] = None

        for channel in configured:
            if channel.channel_name == "push" and not self._push_healthy():
                skipped.append(channel.channel_name)
                logger.warning(
                    "notification_channel_skipped",
                    channel=channel.channel_name,
                    reason="push_unhealthy",
                    alert_id=notification.alert_id,
                )
                continue

            attempt = self._attempt_channel(
                channel, notification, channel_config, attempt_index=len(attempts)
            )
            attempts.append(attempt)
            if attempt.is_success:
                delivered_channel = channel.channel_name
                break

        result = DispatchResult(
            success=delivered_channel is not None,
            channels_attempted=attempts,
            channels_skipped=skipped,
            fallback_used=len(attempts) > 1 or bool(skipped),
            delivered_channel=delivered_channel,
            alert_id=notification.alert_id,
        )

        log = logger.info if result.success else logger.error
        log(
            "notification_dispatched",
            alert_id=notification.alert_id,
            alert_level=notification.alert_level.value,
            success=result.success,
            delivered_channel=delivered_channel,
            fallback_used=result.fallback_used,
            channels_attempted=[a.channel for a in attempts],
            channels_skipped=skipped,
        )
        return result

    def health_check(self) -> Dict[str, Any]:
        """Breaker state per registered channel."""
        report: Dict[str, Any] = {}
        for name in CHANNEL_PRIORITY:
            channel = self.channels.get(name)
            if channel is None:
                continue
            breaker = self.resilience.get_circuit_breaker(self._breaker_name(channel))
            report[name] = {
                "provider": channel.provider_name,
                "circuit_state": breaker.state.value if breaker else "closed",
                "healthy": channel.health_check().is_success,
            }
        if self.push_health is not None and "push" in report:
            report["push"]["push_healthy"] = self._push_healthy()
        return report

    def _push_healthy(self) -> bool:
        if self.push_health is None:
            return True
        return self.push_health.is_push_healthy()

    @staticmethod
    def _breaker_name(channel: NotificationChannel) -> str:
        return f"{channel.channel_name}:{channel.provider_name}"

    def _attempt_channel(
        self,
        channel: NotificationChannel,
        notification: Notification,
        config: ChannelConfig,
        attempt_index: int,
    ) -> DeliveryAttempt:
        name = channel.channel_name
        policy = self.policies.get(name, RetryPolicy())
        transport_attempts = 0
        started = self._clock()

        def send_once() -> str:
            nonlocal transport_attempts
            transport_attempts += 1
            return channel.send(notification, config)

        if self.use_circuit_breakers:
            breaker = self.resilience.get_or_create_circuit_breaker(
                self._breaker_name(channel)
            )

            def operation() -> str:
                return breaker.call(send_once)

        else:
            operation = send_once

        try:
            if name == "push":
                self._check_push_payload(notification)
            message_id = self.resilience.retry_executor.execute(
                operation, policy=policy, operation_name=f"notification.{name}"
            )
        except Exception as exc:  # pylint: disable=broad-except
            classification = classify_error(exc)
            cause = exc.last_error if isinstance(exc, RetryExhaustedError) else exc
            logger.warning(
                "notification_channel_failed",
                channel=name,
                alert_id=notification.alert_id,
                category=classification.category.value,
                error_code=classification.code,
                attempts=transport_attempts,
                error=str(cause),
            )
            return DeliveryAttempt(
                channel=name,
                outcome=DeliveryOutcome.FAILURE,
                attempt_index=attempt_index,
                attempts=transport_attempts,
                duration_ms=(self._clock() - started) * 1000,
                error_category=classification.category,
                error_code=classification.code,
                error_message=str(cause),
            )

        return DeliveryAttempt(
            channel=name,
            outcome=DeliveryOutcome.SUCCESS,
            attempt_index=attempt_index,
            attempts=transport_attempts,
            duration_ms=(self._clock() - started) * 1000,
            message_id=message_id,
        )

    def _check_push_payload(self, notification: Notification) -> None:
        size = notification.push_payload_size()
        if size > MAX_PUSH_PAYLOAD_BYTES:
            raise ChannelError(
                "push",
                f"APNS payload is {size} bytes, limit is {MAX_PUSH_PAYLOAD_BYTES}",
                ChannelError.PAYLOAD_TOO_LARGE,
            )

"""Notification system core models.

Channel-agnostic alert models: the immutable ``AlertContext`` the
dispatcher receives, the rendered ``Notification`` each channel sends,
the ``ChannelConfig`` naming delivery targets, and the per-channel
``DeliveryAttempt`` records collected into a ``DispatchResult``.

Uses Pydantic BaseModel for runtime validation and frozen (immutable)
alert payloads.
"""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from infrastructure.operations.errors import AggregateDeliveryError
from infrastructure.operations.status import ErrorCategory

CRITICAL_PERCENTAGE_OVER = 50.0


class AlertLevel(Enum):
    """Alert severity. CRITICAL when spend is more than 50% over threshold."""

    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class DeliveryOutcome(Enum):
    """Outcome of one channel attempt within a dispatch."""

    SUCCESS = "success"
    FAILURE = "failure"


class ServiceCost(BaseModel):
    """One contributing service in an alert's ranked breakdown."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    cost: float
    percentage: float


class AIAnalysis(BaseModel):
    """Optional enrichment attached to an alert before dispatch."""

    model_config = ConfigDict(frozen=True)

    summary: str
    key_insights: Tuple[str, ...] = ()
    confidence_score: float = 0.0
    fallback: bool = False


class AlertContext(BaseModel):
    """Decision payload passed to the dispatcher. Immutable.

    Attributes:
        threshold: Configured spend threshold
        total_spend: Observed spend for the period
        exceed_amount: total_spend - threshold
        percentage_over: exceed_amount / threshold * 100
        alert_level: WARNING or CRITICAL
        top_services: Ranked contributing services, highest cost first
        period_start/period_end: ISO dates of the evaluated period
        projected_spend: Linear month-end projection, when known
        alert_id: Identifier carried into the push payload
        ai_analysis: Optional enrichment

    Example:
        context = AlertContext.from_spend(total_spend=15.50, threshold=10.0)
        context.alert_level  # AlertLevel.CRITICAL (55% over)
    """

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(..., gt=0)
    total_spend: float
    exceed_amount: float
    percentage_over: float
    alert_level: AlertLevel
    top_services: Tuple[ServiceCost, ...] = ()
    period_start: Optional[str] = None
    period_end: Optional[str] = None
    projected_spend: Optional[float] = None
    currency: str = "USD"
    alert_id: str = Field(default_factory=lambda: f"spend-alert-{uuid.uuid4().hex[:12]}")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ai_analysis: Optional[AIAnalysis] = None

    @classmethod
    def from_spend(
        cls,
        total_spend: float,
        threshold: float,
        top_services: Tuple[ServiceCost, ...] = (),
        **kwargs: Any,
    ) -> "AlertContext":
        """Build a context, deriving exceed amount, percentage and level."""
        exceed_amount = round(total_spend - threshold, 2)
        percentage_over = (total_spend - threshold) / threshold * 100
        alert_level = (
            AlertLevel.CRITICAL
            if percentage_over > CRITICAL_PERCENTAGE_OVER
            else AlertLevel.WARNING
        )
        return cls(
            threshold=threshold,
            total_spend=total_spend,
            exceed_amount=exceed_amount,
            percentage_over=percentage_over,
            alert_level=alert_level,
            top_services=tuple(top_services),
            **kwargs,
        )

    def with_analysis(self, analysis: AIAnalysis) -> "AlertContext":
        """Return a copy carrying the enrichment result."""
        return self.model_copy(update={"ai_analysis": analysis})

    @property
    def top_service(self) -> Optional[ServiceCost]:
        return self.top_services[0] if self.top_services else None


class Notification(BaseModel):
    """An alert rendered for every channel.

    Attributes:
        alert_id: Identifier of the originating AlertContext
        alert_level: Severity of the originating alert
        subject: Email subject line
        email_body: Plain-text email body
        sms_text: Short SMS text
        push_payload: APNS payload dict (``aps`` + ``customData``)
    """

    model_config = ConfigDict(frozen=True)

    alert_id: str
    alert_level: AlertLevel
    subject: str
    email_body: str
    sms_text: str
    push_payload: Dict[str, Any]

    @field_validator("email_body", "sms_text")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Notification text cannot be empty")
        return v

    def serialized_push_payload(self) -> str:
        """Compact JSON form of the APNS payload, as sent to the provider."""
        return json.dumps(self.push_payload, separators=(",", ":"), ensure_ascii=False)

    def push_payload_size(self) -> int:
        """UTF-8 byte length of the serialized APNS payload."""
        return len(self.serialized_push_payload().encode("utf-8"))


class ChannelConfig(BaseModel):
    """Delivery targets for one dispatch.

    A channel is configured only when at least one of its targets is set.

    Example:
        config = ChannelConfig(
            push_endpoint_arns=["arn:aws:sns:...:endpoint/APNS/app/abc"],
            email_topic_arn="arn:aws:sns:us-east-1:123456789012:spend-alerts",
        )
    """

    push_endpoint_arns: List[str] = Field(default_factory=list)
    push_topic_arn: Optional[str] = None
    email_topic_arn: Optional[str] = None
    sms_topic_arn: Optional[str] = None

    def has_push(self) -> bool:
        return bool(self.push_endpoint_arns or self.push_topic_arn)

    def has_email(self) -> bool:
        return bool(self.email_topic_arn)

    def has_sms(self) -> bool:
        return bool(self.sms_topic_arn)


class DeliveryAttempt(BaseModel):
    """One channel-level try within a dispatch. In-memory only.

    Attributes:
        channel: Channel name (push, email, sms)
        outcome: SUCCESS or FAILURE
        attempt_index: Position of this channel in the dispatch order
        attempts: Transport attempts made by the retry executor
        duration_ms: Wall time spent on this channel
        error_category/error_code/error_message: Set when failed
        message_id: Provider message id when delivered
    """

    channel: str
    outcome: DeliveryOutcome
    attempt_index: int
    attempts: int = 1
    duration_ms: float = 0.0
    error_category: Optional[ErrorCategory] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    message_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.outcome == DeliveryOutcome.SUCCESS


class DispatchResult(BaseModel):
    """Outcome of a dispatch.

    Attributes:
        success: True when at least one channel delivered
        channels_attempted: Attempts in priority order
        channels_skipped: Configured channels not attempted (e.g. unhealthy push)
        fallback_used: True when delivery went beyond the first choice channel
        delivered_channel: Channel that delivered, if any
        alert_id: Identifier of the dispatched alert
    """

    success: bool
    channels_attempted: List[DeliveryAttempt] = Field(default_factory=list)
    channels_skipped: List[str] = Field(default_factory=list)
    fallback_used: bool = False
    delivered_channel: Optional[str] = None
    alert_id: Optional[str] = None

    @property
    def failures(self) -> List[DeliveryAttempt]:
        return [a for a in self.channels_attempted if not a.is_success]

    def raise_for_failure(self) -> None:
        """Raise AggregateDeliveryError if no channel delivered."""
        if not self.success:
            raise AggregateDeliveryError(self.failures)

    def summary(self) -> Dict[str, Any]:
        """JSON-friendly summary for handler responses and logs."""
        return {
            "success": self.success,
            "fallback_used": self.fallback_used,
            "delivered_channel": self.delivered_channel,
            "channels_skipped": list(self.channels_skipped),
            "channels_attempted": [
                {
                    "channel": a.channel,
                    "outcome": a.outcome.value,
                    "attempts": a.attempts,
                    "duration_ms": round(a.duration_ms, 1),
                    "error_code": a.error_code,
                }
                for a in self.channels_attempted
            ],
        }

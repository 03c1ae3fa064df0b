"""Alert formatting for each delivery channel.

Renders an ``AlertContext`` into the texts and payloads the channels send:
an email subject and body, a short SMS text and an APNS payload.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from infrastructure.notifications.models import AlertContext, AlertLevel, Notification

APNS_TITLE = "AWS Spend Alert"
CRITICAL_SOUND = "critical-alert.caf"
DEFAULT_SOUND = "default"

RECOMMENDATIONS = (
    "Review your AWS resources and usage patterns",
    "Consider scaling down or terminating unused resources",
    "Check for any unexpected charges or services",
    "Set up additional CloudWatch alarms for specific services",
)

LEVEL_EMOJI = {
    AlertLevel.WARNING: "⚠️",
    AlertLevel.CRITICAL: "🚨",
}


def _money(value: float) -> str:
    return f"${value:,.2f}"


class AlertFormatter:
    """Formats spend alerts for email, SMS and iOS push.

    Example:
        formatter = AlertFormatter()
        notification = formatter.format(context)
        notification.subject  # "AWS Spend Alert: $5.50 over budget"
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def format(self, context: AlertContext) -> Notification:
        """Render every channel representation of an alert."""
        return Notification(
            alert_id=context.alert_id,
            alert_level=context.alert_level,
            subject=self.format_subject(context),
            email_body=self.format_email_body(context),
            sms_text=self.format_sms(context),
            push_payload=self.format_push_payload(context),
        )

    def format_subject(self, context: AlertContext) -> str:
        return f"AWS Spend Alert: {_money(context.exceed_amount)} over budget"

    def format_email_body(self, context: AlertContext) -> str:
        lines: List[str] = [
            f"{LEVEL_EMOJI[context.alert_level]} AWS Spend Alert - {context.alert_level.value}",
            "",
            "Your AWS spending has exceeded the configured threshold.",
            "",
            f"💰 Current Spending: {_money(context.total_spend)}",
            f"🎯 Threshold: {_money(context.threshold)}",
            f"📈 Over Budget: {_money(context.exceed_amount)} "
            f"({context.percentage_over:.1f}%)",
        ]
        if context.projected_spend is not None:
            lines.append(f"📊 Projected Monthly: {_money(context.projected_spend)}")
        lines.append("")

        if context.period_start and context.period_end:
            lines.extend(
                [f"📅 Period: {context.period_start} - {context.period_end}", ""]
            )

        if context.top_services:
            lines.append("🔝 Top Cost-Driving Services:")
            for index, service in enumerate(context.top_services, start=1):
                lines.append(
                    f"{index}. {service.service_name}: {_money(service.cost)} "
                    f"({service.percentage:.1f}%)"
                )
            lines.append("")

        if context.ai_analysis is not None:
            lines.append("🤖 AI Analysis:")
            lines.append(context.ai_analysis.summary)
            for insight in context.ai_analysis.key_insights:
                lines.append(f"• {insight}")
            lines.append("")

        lines.append("💡 Recommendations:")
        lines.extend(f"• {item}" for item in RECOMMENDATIONS)
        lines.append("")
        lines.append(
            f"⏰ Alert generated at: {self._clock().strftime('%Y-%m-%d %H:%M:%S')} UTC"
        )
        return "\n".join(lines)

    def format_sms(self, context: AlertContext) -> str:
        text = (
            f"AWS Alert: {_money(context.total_spend)} spent "
            f"(threshold {_money(context.threshold)})."
        )
        top = context.top_service
        if top is not None:
            text += f" Top: {top.service_name} {_money(top.cost)}"
        return text

    def format_push_payload(self, context: AlertContext) -> Dict[str, Any]:
        """APNS payload with ``aps`` and ``customData`` sections."""
        critical = context.alert_level == AlertLevel.CRITICAL
        top = context.top_service
        top_service: Optional[str] = top.service_name if top is not None else None
        return {
            "aps": {
                "alert": {
                    "title": APNS_TITLE,
                    "body": f"{_money(context.total_spend)} spent - "
                    f"{_money(context.exceed_amount)} over budget",
                    "subtitle": (
                        "Critical Budget Exceeded"
                        if critical
                        else "Budget Threshold Exceeded"
                    ),
                },
                "badge": 1,
                "sound": CRITICAL_SOUND if critical else DEFAULT_SOUND,
                "content-available": 1,
            },
            "customData": {
                "spendAmount": context.total_spend,
                "threshold": context.threshold,
                "exceedAmount": context.exceed_amount,
                "topService": top_service or "Unknown",
                "alertId": context.alert_id,
            },
        }

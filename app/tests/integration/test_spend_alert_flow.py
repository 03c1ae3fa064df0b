"""End-to-end spend alert cycles over in-memory AWS fakes."""

import pytest

from infrastructure.notifications import AlertLevel
from infrastructure.operations.errors import AggregateDeliveryError
from modules.devices import run_device_maintenance
from modules.spend_monitor import run_spend_check
from tests.factories import make_device_token, make_provider_error
from tests.factories.notifications import EMAIL_TOPIC_ARN


@pytest.fixture
def run(
    settings_factory, metric_source, dispatcher, channel_config_for, metrics_recorder
):
    def _run(**values):
        return run_spend_check(
            settings=settings_factory(**values),
            metric_source=metric_source,
            dispatcher=dispatcher,
            channel_config=channel_config_for(),
            metrics=metrics_recorder,
        )

    return _run


@pytest.mark.integration
class TestSpendAlertFlow:
    def test_critical_alert_delivered_by_push(self, run, registry, push_provider):
        device = registry.register(make_device_token("phone"), user_id="user-1")

        result = run(SPEND_THRESHOLD=10.0)

        assert result.alert_sent is True
        assert result.context.alert_level == AlertLevel.CRITICAL
        assert result.snapshot.period_end == "2024-03-15"
        assert result.snapshot.projected_monthly == 32.03
        summary = result.summary()
        assert summary["percentage_over"] == 55.0
        assert summary["exceed_amount"] == 5.5
        assert summary["dispatch"]["delivered_channel"] == "push"
        target, payload = push_provider.published[0]
        assert target == device.endpoint_arn
        assert payload["customData"]["topService"] == "Amazon EC2"

    def test_disabled_endpoint_falls_back_to_email(
        self, run, registry, push_provider, email_publisher
    ):
        registry.register(make_device_token("phone"))
        push_provider.fail(
            "publish", make_provider_error("EndpointDisabled", http_status=400)
        )

        result = run()

        dispatch = result.dispatch_result
        assert dispatch.delivered_channel == "email"
        assert dispatch.fallback_used is True
        assert dispatch.channels_attempted[0].error_code == "ENDPOINT_DISABLED"
        assert email_publisher.published[0]["topic_arn"] == EMAIL_TOPIC_ARN
        assert "🚨 AWS Spend Alert - CRITICAL" in email_publisher.published[0]["message"]

    def test_within_threshold_sends_nothing(
        self, run, registry, push_provider, email_publisher
    ):
        registry.register(make_device_token("phone"))

        result = run(SPEND_THRESHOLD=20.0)

        assert result.alert_sent is False
        assert push_provider.published == []
        assert email_publisher.published == []

    def test_every_channel_failing_raises(
        self, run, registry, push_provider, email_publisher, sms_publisher
    ):
        registry.register(make_device_token("phone"))
        push_provider.fail(
            "publish", make_provider_error("EndpointDisabled", http_status=400)
        )
        email_publisher.fail(make_provider_error("AuthorizationError", http_status=403))
        sms_publisher.fail(make_provider_error("AuthorizationError", http_status=403))

        with pytest.raises(AggregateDeliveryError) as exc_info:
            run()

        assert [f.channel for f in exc_info.value.failures] == ["push", "email", "sms"]


@pytest.mark.integration
class TestDeviceMaintenanceFlow:
    def test_disabled_endpoint_removed_before_next_alert(
        self,
        run,
        registry,
        monitor,
        push_provider,
        email_publisher,
        metrics_recorder,
        cloudwatch,
    ):
        device = registry.register(make_device_token("phone"))
        push_provider.endpoints[device.endpoint_arn]["enabled"] = False

        maintenance = run_device_maintenance(
            registry=registry, monitor=monitor, metrics=metrics_recorder
        )
        result = run()

        assert maintenance["reconciliation"]["removed"] == [device.device_token]
        assert maintenance["certificate"]["is_valid"] is True
        assert result.dispatch_result.delivered_channel == "email"
        assert result.dispatch_result.fallback_used is False
        assert "InvalidDeviceTokensRemoved" in cloudwatch.metric_names()
        assert push_provider.published == []

    def test_unhealthy_credential_skips_push(
        self, run, registry, monitor, push_provider, metrics_recorder
    ):
        registry.register(make_device_token("phone"))
        push_provider.platform_enabled = False

        maintenance = run_device_maintenance(
            registry=registry, monitor=monitor, metrics=metrics_recorder
        )
        result = run()

        assert maintenance["certificate"]["is_valid"] is False
        assert result.dispatch_result.channels_skipped == ["push"]
        assert result.dispatch_result.delivered_channel == "email"
        assert push_provider.published == []

"""Tests for the CloudWatch metrics recorder."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from infrastructure.notifications import (
    DeliveryAttempt,
    DeliveryOutcome,
    DispatchResult,
)
from infrastructure.observability import MetricsRecorder
from infrastructure.operations.result import OperationResult

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def values_by_name(data):
    return {d["MetricName"]: d["Value"] for d in data}


@pytest.fixture
def recorder(cloudwatch):
    return MetricsRecorder(cloudwatch, clock=lambda: NOW)


@pytest.mark.unit
class TestPublishing:
    def test_datums_share_namespace_and_timestamp(self, recorder, cloudwatch):
        assert recorder.record_cost_analysis(12.5, 30.0, 3) is True

        namespace, data = cloudwatch.published[0]
        assert namespace == "SpendMonitor/Agent"
        assert values_by_name(data) == {
            "CurrentSpend": 12.5,
            "ProjectedMonthlySpend": 30.0,
            "ServiceCount": 3,
        }
        assert {d["Timestamp"] for d in data} == {NOW}

    def test_disabled_recorder_publishes_nothing(self, cloudwatch):
        recorder = MetricsRecorder(cloudwatch, enabled=False)

        assert recorder.record_threshold_breach(15.0, 10.0) is False
        assert cloudwatch.published == []

    def test_recorder_without_client_is_disabled(self):
        recorder = MetricsRecorder(None)

        assert recorder.enabled is False
        assert recorder.record_device_reconciliation(1, 0) is False

    def test_failed_publish_returns_false(self, recorder, cloudwatch):
        cloudwatch.fail(
            OperationResult.transient_error("Rate exceeded", error_code="Throttling")
        )

        assert recorder.record_threshold_breach(15.0, 10.0) is False
        assert cloudwatch.published == []

    def test_client_exception_is_swallowed(self):
        cloudwatch = MagicMock()
        cloudwatch.put_metric_data.side_effect = RuntimeError("no credentials")

        recorder = MetricsRecorder(cloudwatch)

        assert recorder.record_device_reconciliation(2, 0) is False


@pytest.mark.unit
class TestRecordedMetrics:
    def test_threshold_breach(self, recorder, cloudwatch):
        recorder.record_threshold_breach(15.5, 10.0)

        _, data = cloudwatch.published[0]
        assert values_by_name(data) == {
            "ThresholdBreach": 1,
            "ThresholdExceedAmount": 5.5,
            "ThresholdExceedPercentage": 55.0,
        }
        units = {d["MetricName"]: d["Unit"] for d in data}
        assert units["ThresholdExceedPercentage"] == "Percent"

    def test_zero_threshold_has_no_percentage(self, recorder, cloudwatch):
        recorder.record_threshold_breach(3.0, 0.0)

        _, data = cloudwatch.published[0]
        assert values_by_name(data)["ThresholdExceedPercentage"] == 0.0

    def test_alert_delivery_per_channel(self, recorder, cloudwatch):
        result = DispatchResult(
            success=True,
            channels_attempted=[
                DeliveryAttempt(
                    channel="push",
                    outcome=DeliveryOutcome.FAILURE,
                    attempt_index=0,
                    attempts=3,
                ),
                DeliveryAttempt(
                    channel="email", outcome=DeliveryOutcome.SUCCESS, attempt_index=1
                ),
            ],
            fallback_used=True,
            delivered_channel="email",
        )

        recorder.record_alert_delivery(result)

        _, data = cloudwatch.published[0]
        summary = [d for d in data if d["MetricName"] != "ChannelDelivery"]
        assert values_by_name(summary) == {
            "AlertDeliveryCount": 1,
            "AlertChannelCount": 2,
            "AlertRetryCount": 2,
        }
        assert summary[0]["Dimensions"] == [{"Name": "Status", "Value": "Success"}]
        channels = [
            (d["Value"], d["Dimensions"])
            for d in data
            if d["MetricName"] == "ChannelDelivery"
        ]
        assert channels == [
            (
                0,
                [
                    {"Name": "Channel", "Value": "push"},
                    {"Name": "Status", "Value": "Failure"},
                ],
            ),
            (
                1,
                [
                    {"Name": "Channel", "Value": "email"},
                    {"Name": "Status", "Value": "Success"},
                ],
            ),
        ]

    def test_no_retry_count_without_retries(self, recorder, cloudwatch):
        recorder.record_alert_delivery(
            DispatchResult(
                success=True,
                channels_attempted=[
                    DeliveryAttempt(
                        channel="push",
                        outcome=DeliveryOutcome.SUCCESS,
                        attempt_index=0,
                    )
                ],
                delivered_channel="push",
            )
        )

        assert "AlertRetryCount" not in cloudwatch.metric_names()


@pytest.mark.unit
class TestTimer:
    def test_successful_block(self, recorder, cloudwatch):
        with recorder.timer("spend_check"):
            pass

        _, data = cloudwatch.published[0]
        assert [d["MetricName"] for d in data] == [
            "ExecutionDuration",
            "ExecutionCount",
            "SuccessRate",
        ]
        assert data[0]["Unit"] == "Milliseconds"
        assert data[0]["Value"] >= 0
        assert {"Name": "Operation", "Value": "spend_check"} in data[1]["Dimensions"]
        assert {"Name": "Status", "Value": "Success"} in data[1]["Dimensions"]

    def test_failing_block_records_error_and_reraises(self, recorder, cloudwatch):
        with pytest.raises(RuntimeError, match="boom"):
            with recorder.timer("spend_check"):
                raise RuntimeError("boom")

        _, data = cloudwatch.published[0]
        assert "ErrorRate" in [d["MetricName"] for d in data]
        assert {"Name": "Status", "Value": "Failure"} in data[1]["Dimensions"]

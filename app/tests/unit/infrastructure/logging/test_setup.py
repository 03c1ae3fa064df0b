"""Unit tests for infrastructure.logging.setup module."""

import pytest

from infrastructure.logging.setup import (
    _is_test_environment,
    configure_logging,
    get_module_logger,
)


@pytest.mark.unit
class TestConfigureLogging:
    def test_detects_test_environment(self):
        assert _is_test_environment() is True

    def test_returns_usable_logger(self):
        logger = configure_logging()

        for method in ("debug", "info", "warning", "error"):
            assert hasattr(logger, method)

    def test_accepts_overrides(self):
        assert configure_logging(log_level="DEBUG", is_production=True) is not None

    def test_idempotent(self):
        configure_logging()
        configure_logging()

    def test_structured_events_are_accepted_while_silenced(self):
        logger = configure_logging()

        logger.info("spend_check_started", threshold=10.0)
        logger.warning("channel_failed", channel="push", attempts=2)
        get_module_logger().error("dispatch_failed", error="all channels failed")


@pytest.mark.unit
class TestGetLoggers:
    def test_get_module_logger_binds_component(self):
        logger = get_module_logger()

        assert "component" in logger._context

    def test_component_is_last_path_segment(self):
        logger = get_module_logger()

        assert logger._context["module_path"].endswith(logger._context["component"])

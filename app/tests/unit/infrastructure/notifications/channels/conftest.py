"""Fixtures for notification channel tests."""

import pytest

from tests.factories.notifications import make_alert_context


@pytest.fixture
def notification(formatter):
    """Rendered default alert (CRITICAL, $15.50 against $10.00)."""
    return formatter.format(make_alert_context())

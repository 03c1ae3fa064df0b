"""Unit tests for infrastructure.logging.formatters module.

Tests cover:
- add_app_info processor
- mask_sensitive_data processor, including device token masking
- truncate_large_values processor
"""

import pytest

from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_device_token,
    mask_sensitive_data,
    truncate_large_values,
)

TOKEN = "a1b2c3d4" + "0" * 48 + "e5f6a7b8"


@pytest.mark.unit
class TestAddAppInfo:
    """Test suite for add_app_info processor factory."""

    def test_add_app_info_adds_name_and_version(self):
        processor = add_app_info("spend-alert-agent", "1.2.3")

        result = processor(None, "info", {"event": "test_event", "key": "value"})

        assert result["app_name"] == "spend-alert-agent"
        assert result["app_version"] == "1.2.3"
        assert result["key"] == "value"

    def test_add_app_info_with_unknown_version(self):
        processor = add_app_info("test-app")

        result = processor(None, "info", {"event": "test"})

        assert result["app_version"] == "unknown"


@pytest.mark.unit
class TestMaskDeviceToken:
    def test_keeps_first_and_last_four(self):
        assert mask_device_token(TOKEN) == "a1b2...a7b8"

    def test_short_values_fully_masked(self):
        assert mask_device_token("abc") == "***"


@pytest.mark.unit
class TestMaskSensitiveData:
    """Test suite for mask_sensitive_data processor factory."""

    def test_masks_password_and_secret(self):
        processor = mask_sensitive_data()

        result = processor(
            None, "info", {"password": "hunter2", "client_secret": "s", "user": "u"}
        )

        assert result["password"] == "***REDACTED***"
        assert result["client_secret"] == "***REDACTED***"
        assert result["user"] == "u"

    def test_masking_is_case_insensitive(self):
        processor = mask_sensitive_data()

        result = processor(None, "info", {"API_KEY": "k", "Authorization": "Bearer x"})

        assert result["API_KEY"] == "***REDACTED***"
        assert result["Authorization"] == "***REDACTED***"

    def test_device_token_keys_partially_masked(self):
        processor = mask_sensitive_data()

        result = processor(None, "info", {"token": TOKEN, "new_token": TOKEN})

        assert result["token"] == "a1b2...a7b8"
        assert result["new_token"] == "a1b2...a7b8"

    def test_device_token_inside_free_text_masked(self):
        processor = mask_sensitive_data()

        result = processor(None, "info", {"error": f"Invalid token {TOKEN} rejected"})

        assert result["error"] == "Invalid token a1b2...a7b8 rejected"

    def test_none_values_untouched(self):
        processor = mask_sensitive_data()

        result = processor(None, "info", {"password": None})

        assert result["password"] is None

    def test_additional_patterns(self):
        processor = mask_sensitive_data(additional_patterns=frozenset({"phone"}))

        result = processor(None, "info", {"phone_number": "+15555551234"})

        assert result["phone_number"] == "***REDACTED***"

    def test_custom_mask_value(self):
        processor = mask_sensitive_data(mask_value="[hidden]")

        result = processor(None, "info", {"credential": "x"})

        assert result["credential"] == "[hidden]"

    def test_non_string_values_preserved(self):
        processor = mask_sensitive_data()

        result = processor(None, "info", {"count": 3, "ratio": 0.5})

        assert result == {"count": 3, "ratio": 0.5}

    def test_sensitive_patterns_constant(self):
        assert "password" in SENSITIVE_PATTERNS
        assert "session_token" in SENSITIVE_PATTERNS


@pytest.mark.unit
class TestTruncateLargeValues:
    def test_truncates_long_strings(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"body": "x" * 25})

        assert result["body"] == "x" * 10 + "...[truncated, 25 chars total]"

    def test_short_strings_untouched(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"body": "short"})

        assert result["body"] == "short"

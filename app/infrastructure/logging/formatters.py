"""Custom log formatters for structured logging.

These are structlog processors that customize log output.

Usage:
    from infrastructure.logging.formatters import add_app_info, mask_sensitive_data

Dependencies:
    - structlog processors
"""

import re
from typing import Any

DEVICE_TOKEN_PATTERN = re.compile(r"\b[0-9a-fA-F]{64}\b")


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Create a processor that adds application info to log entries.

    Args:
        app_name: Name of the application.
        app_version: Version string for the application.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


# Sensitive field patterns that should be masked in logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "private_key",
        "access_token",
        "refresh_token",
        "session_token",
    }
)

# Keys holding APNS device tokens; partially masked so logs stay correlatable
DEVICE_TOKEN_KEYS = frozenset({"token", "device_token", "new_token", "old_token"})


def mask_device_token(token: str) -> str:
    """Mask a device token, keeping the first and last four characters.

    Args:
        token: Raw device token.

    Returns:
        Masked representation such as ``abcd...7890``.
    """
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks sensitive data in log entries.

    Values for keys containing a sensitive pattern are replaced outright.
    Device tokens are partially masked, both under their known keys and
    when they appear inside free-text string values.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked_dict = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            if value is None:
                masked_dict[key] = value
            elif any(pattern in key_lower for pattern in patterns):
                masked_dict[key] = mask_value
            elif key_lower in DEVICE_TOKEN_KEYS and isinstance(value, str):
                masked_dict[key] = mask_device_token(value)
            elif isinstance(value, str):
                masked_dict[key] = DEVICE_TOKEN_PATTERN.sub(
                    lambda match: mask_device_token(match.group(0)), value
                )
            else:
                masked_dict[key] = value
        return masked_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Keeps rendered alert bodies and model responses from flooding the logs.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor

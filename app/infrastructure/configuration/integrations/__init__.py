"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.enrichment import EnrichmentSettings
from infrastructure.configuration.integrations.notifications import (
    NotificationSettings,
)

__all__ = [
    "AwsSettings",
    "EnrichmentSettings",
    "NotificationSettings",
]

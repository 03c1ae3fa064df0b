"""
Dependency injection services.

Provides cached provider functions for the shared infrastructure services.
"""

from infrastructure.services.providers import (
    get_settings,
    get_aws_clients,
    get_resilience_service,
    get_topic_publisher,
    get_push_provider,
    get_device_store,
    get_enrichment_store,
    get_metrics_recorder,
)

__all__ = [
    "get_settings",
    "get_aws_clients",
    "get_resilience_service",
    "get_topic_publisher",
    "get_push_provider",
    "get_device_store",
    "get_enrichment_store",
    "get_metrics_recorder",
]

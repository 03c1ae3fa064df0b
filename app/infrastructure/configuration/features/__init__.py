"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.spend_monitor import SpendMonitorSettings

__all__ = ["SpendMonitorSettings"]

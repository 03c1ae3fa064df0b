"""Spend alert agent configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    AwsSettings,
    EnrichmentSettings,
    NotificationSettings,
)

# Feature settings
from infrastructure.configuration.features import SpendMonitorSettings

# Infrastructure settings
from infrastructure.configuration.infrastructure import ResilienceSettings


class Settings(BaseSettings):
    """Spend alert agent configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: AWS clients, delivery channels, Bedrock enrichment
    - **Features**: Spend evaluation thresholds
    - **Infrastructure**: Retry and circuit breaker defaults

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.configuration import settings

        threshold = settings.spend_monitor.spend_threshold
        topic = settings.notifications.email_topic

        if settings.enrichment.enabled:
            # Build the rate-limited enrichment path...
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    aws: AwsSettings
    notifications: NotificationSettings
    enrichment: EnrichmentSettings

    # Feature settings
    spend_monitor: SpendMonitorSettings

    # Infrastructure settings
    resilience: ResilienceSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "aws": AwsSettings,
            "notifications": NotificationSettings,
            "enrichment": EnrichmentSettings,
            # Features
            "spend_monitor": SpendMonitorSettings,
            # Infrastructure
            "resilience": ResilienceSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the singleton settings instance
settings = Settings()

"""Base classes for the settings sections.

Every section reads the same process environment (Lambda environment
variables in production, ``.env`` locally), so they share one model config
and differ only in where they sit in the ``Settings`` aggregate.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=True,
    extra="ignore",
)


class IntegrationSettings(BaseSettings):
    """Settings for an external service (AWS, SNS topics, Bedrock)."""

    model_config = SECTION_CONFIG


class FeatureSettings(BaseSettings):
    """Settings for a feature module such as the spend check."""

    model_config = SECTION_CONFIG


class InfrastructureSettings(BaseSettings):
    """Settings for shared runtime behavior such as retries and breakers."""

    model_config = SECTION_CONFIG

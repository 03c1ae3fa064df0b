"""Bedrock enrichment integration settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings


class EnrichmentSettings(IntegrationSettings):
    """AI spend-analysis configuration.

    The enrichment call is optional. When disabled, or when it fails and
    ``BEDROCK_FALLBACK_ON_ERROR`` is set, alerts go out without AI insights.

    Environment Variables:
        BEDROCK_ENABLED: Enable AI enrichment of alerts (default: False)
        BEDROCK_MODEL_ID: Model identifier (default: amazon.titan-text-express-v1)
        BEDROCK_REGION: Region for bedrock-runtime (default: AWS_REGION)
        BEDROCK_MAX_TOKENS: Max output tokens per invocation
        BEDROCK_TEMPERATURE: Sampling temperature (0-1)
        BEDROCK_MONTHLY_SPEND_LIMIT: Monthly budget ceiling in USD
        BEDROCK_RATE_LIMIT_PER_MINUTE: Nominal invocations per minute
        BEDROCK_CACHE_TTL_MINUTES: Result cache lifetime
        BEDROCK_FALLBACK_ON_ERROR: Return a fallback result instead of raising
        BEDROCK_BUDGET_TABLE_NAME: DynamoDB table for the monthly spend tally
            (default: the device registration table)
    """

    enabled: bool = Field(default=False, alias="BEDROCK_ENABLED")
    model_id: str = Field(
        default="amazon.titan-text-express-v1", alias="BEDROCK_MODEL_ID"
    )
    region: str | None = Field(default=None, alias="BEDROCK_REGION")
    max_tokens: int = Field(default=1000, alias="BEDROCK_MAX_TOKENS", gt=0)
    temperature: float = Field(default=0.7, alias="BEDROCK_TEMPERATURE")
    monthly_spend_limit: float = Field(
        default=10.0,
        alias="BEDROCK_MONTHLY_SPEND_LIMIT",
        description="Monthly budget ceiling for enrichment calls (USD)",
    )
    rate_limit_per_minute: int = Field(
        default=10, alias="BEDROCK_RATE_LIMIT_PER_MINUTE", gt=0
    )
    cache_ttl_minutes: int = Field(default=60, alias="BEDROCK_CACHE_TTL_MINUTES")
    fallback_on_error: bool = Field(default=True, alias="BEDROCK_FALLBACK_ON_ERROR")
    budget_table_name: str | None = Field(
        default=None,
        alias="BEDROCK_BUDGET_TABLE_NAME",
        description="DynamoDB table persisting the enrichment spend tally",
    )

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("BEDROCK_TEMPERATURE must be between 0 and 1")
        return value

    @field_validator("monthly_spend_limit")
    @classmethod
    def validate_spend_limit(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("BEDROCK_MONTHLY_SPEND_LIMIT must be positive")
        return value

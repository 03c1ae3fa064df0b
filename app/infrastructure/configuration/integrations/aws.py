"""AWS integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """AWS configuration settings.

    Environment Variables:
        AWS_REGION: AWS region for services (default: us-east-1)
        AWS_ENDPOINT_URL: Optional endpoint override (LocalStack, VPC endpoints)
        AWS_CONNECT_TIMEOUT: Per-call connection timeout in seconds
        AWS_READ_TIMEOUT: Per-call read timeout in seconds

    Example:
        ```python
        from infrastructure.configuration import settings

        region = settings.aws.AWS_REGION
        read_timeout = settings.aws.READ_TIMEOUT
        ```
    """

    AWS_REGION: str = Field(default="us-east-1", alias="AWS_REGION")
    ENDPOINT_URL: str | None = Field(default=None, alias="AWS_ENDPOINT_URL")
    CONNECT_TIMEOUT: float = Field(
        default=5.0,
        alias="AWS_CONNECT_TIMEOUT",
        description="Connection timeout applied to every AWS API call (seconds)",
    )
    READ_TIMEOUT: float = Field(
        default=10.0,
        alias="AWS_READ_TIMEOUT",
        description="Read timeout applied to every AWS API call (seconds)",
    )

    THROTTLING_ERRS: list[str] = [
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
    ]
    RESOURCE_NOT_FOUND_ERRS: list[str] = [
        "ResourceNotFoundException",
        "NotFound",
        "NotFoundException",
    ]

    @property
    def client_config(self) -> dict[str, object]:
        """Keyword arguments for botocore.config.Config.

        Botocore's own retries are disabled; retries are owned by the
        RetryExecutor so attempt counts stay predictable.

        Returns:
            Dict suitable for ``botocore.config.Config(**client_config)``
        """
        return {
            "connect_timeout": self.CONNECT_TIMEOUT,
            "read_timeout": self.READ_TIMEOUT,
            "retries": {"max_attempts": 1, "mode": "standard"},
        }

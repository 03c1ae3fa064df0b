"""Bedrock enrichment provider (Amazon Titan text models)."""

from typing import Any, Dict, Optional

from infrastructure.clients.aws.bedrock import BedrockRuntimeClient
from infrastructure.logging import get_module_logger
from infrastructure.operations.errors import ProviderError
from infrastructure.resilience.retry import RetryExecutor, RetryPolicy
from modules.enrichment.errors import MalformedResponseError

logger = get_module_logger()

TOP_P = 0.9


class BedrockEnrichmentProvider:
    """EnrichmentProvider invoking a Titan text model through Bedrock Runtime.

    Args:
        bedrock: Bedrock Runtime client wrapper
        model_id: Model identifier
        max_tokens: ``maxTokenCount`` for generation
        temperature: Sampling temperature
        retry_executor: Executor applied to the invocation
        policy: Retry policy for the invocation
    """

    def __init__(
        self,
        bedrock: BedrockRuntimeClient,
        model_id: str,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        retry_executor: Optional[RetryExecutor] = None,
        policy: Optional[RetryPolicy] = None,
    ):
        self._bedrock = bedrock
        self.model_id = model_id
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._retry_executor = retry_executor or RetryExecutor()
        self._policy = policy

    @classmethod
    def from_settings(
        cls,
        enrichment_settings,
        bedrock: BedrockRuntimeClient,
        retry_executor: Optional[RetryExecutor] = None,
    ) -> "BedrockEnrichmentProvider":
        return cls(
            bedrock,
            enrichment_settings.model_id,
            max_tokens=enrichment_settings.max_tokens,
            temperature=enrichment_settings.temperature,
            retry_executor=retry_executor,
        )

    def build_request(self, prompt: str) -> Dict[str, Any]:
        return {
            "inputText": prompt,
            "textGenerationConfig": {
                "maxTokenCount": self.max_tokens,
                "temperature": self.temperature,
                "topP": TOP_P,
            },
        }

    def invoke(self, prompt: str) -> str:
        """Return the model's ``results[0].outputText``.

        Raises:
            MalformedResponseError: Response body missing the output text
            RetryExhaustedError: Transient failures exhausted the policy
            ProviderError: Terminal provider failure
        """
        return self._retry_executor.execute(
            lambda: self._invoke_once(prompt),
            policy=self._policy,
            operation_name="bedrock.invoke_model",
        )

    def _invoke_once(self, prompt: str) -> str:
        result = self._bedrock.invoke_model(self.model_id, self.build_request(prompt))
        if not result.is_success:
            if result.error_code == MalformedResponseError.default_code:
                raise MalformedResponseError(result.message)
            raise ProviderError.from_result("bedrock.invoke_model", result)

        data = result.data or {}
        try:
            text = data["results"][0]["outputText"]
        except (KeyError, IndexError, TypeError) as e:
            logger.warning("bedrock_response_invalid", model_id=self.model_id)
            raise MalformedResponseError(
                "Invalid response format from Bedrock model"
            ) from e
        if not isinstance(text, str):
            raise MalformedResponseError("Bedrock outputText is not a string")
        return text

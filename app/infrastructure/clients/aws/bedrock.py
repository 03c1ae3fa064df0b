"""Amazon Bedrock Runtime client implementation."""

import json
from typing import Any, Dict, Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class BedrockRuntimeClient:
    """Client for Bedrock model invocation.

    Args:
        session_provider: SessionProvider instance for credential/config management
        region: Optional region override; Bedrock models are not offered in
            every region
    """

    def __init__(
        self, session_provider: SessionProvider, region: Optional[str] = None
    ) -> None:
        self._session_provider = session_provider
        self._region = region
        self.service_name = "bedrock-runtime"

    def invoke_model(self, model_id: str, body: Dict[str, Any]) -> OperationResult:
        """Invoke a model with a JSON request body.

        Returns:
            OperationResult whose ``data`` is the decoded JSON response body
        """
        client_kwargs = self._session_provider.build_client_kwargs(
            service_name=self.service_name, region=self._region
        )
        result = execute_aws_api_call(
            self.service_name,
            "invoke_model",
            modelId=model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(body),
            **client_kwargs,
        )
        if not result.is_success:
            return result

        raw = result.data["body"].read()
        try:
            decoded = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("bedrock_response_not_json", model_id=model_id, error=str(e))
            return OperationResult.permanent_error(
                f"Model response is not valid JSON: {e}", error_code="MALFORMED_RESPONSE"
            )
        return OperationResult.success(data=decoded, message=result.message)

"""Base AWS client utilities for infrastructure clients.

Provides `get_boto3_client` and `execute_aws_api_call` with the
OperationResult pattern. Each call is made exactly once: retries belong to
the RetryExecutor, which decides from the classified result whether another
attempt is worthwhile. This module avoids reading settings at import time
and accepts configuration via parameters.
"""

from typing import Any, Dict, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.config import Config  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
import structlog

from infrastructure.operations.classifiers import classify_aws_error
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    role_arn: Optional[str] = None,
    session_name: str = "SpendAlertAgentSession",
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'sns')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url). A
            ``botocore_config`` entry is turned into ``botocore.config.Config``.
        role_arn: Optional role to assume
        session_name: Name for assumed role session

    Returns:
        botocore client instance
    """
    session_config = session_config or {}
    client_config = dict(client_config or {})

    botocore_config = client_config.pop("botocore_config", None)
    if botocore_config:
        client_config["config"] = Config(**botocore_config)

    if role_arn:
        sts = boto3.client("sts")
        assumed = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)
        creds = assumed["Credentials"]
        session = boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            **session_config,
        )
    else:
        session = boto3.Session(**session_config)

    return session.client(service_name, **client_config)


def _call_api_once(
    service_name: str,
    method: str,
    keys: Optional[List[str]],
    role_arn: Optional[str],
    session_config: Optional[Dict[str, Any]],
    client_config: Optional[Dict[str, Any]],
    force_paginate: bool,
    kwargs: Dict[str, Any],
) -> Any:
    client = get_boto3_client(
        service_name,
        session_config=session_config,
        client_config=client_config,
        role_arn=role_arn,
    )
    api_method = getattr(client, method)

    if force_paginate and client.can_paginate(method):
        paginator = client.get_paginator(method)
        results: List[Any] = []
        for page in paginator.paginate(**kwargs):
            if keys:
                for k in keys:
                    if k in page and isinstance(page[k], list):
                        results.extend(page[k])
            else:
                for k, v in page.items():
                    if k == "ResponseMetadata":
                        continue
                    if isinstance(v, list):
                        results.extend(v)
                    else:
                        results.append(v)
        return results

    return api_method(**kwargs)


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    role_arn: Optional[str] = None,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    force_paginate: bool = False,
    **kwargs,
) -> OperationResult:
    """Execute a single AWS API call and return a standardized result.

    Args mirror `boto3` call parameters. Failures are converted with
    `classify_aws_error`, keeping the AWS error code and HTTP status on the
    result so callers can classify them without parsing messages.
    """
    try:
        result = _call_api_once(
            service_name,
            method,
            keys,
            role_arn,
            session_config,
            client_config,
            force_paginate,
            kwargs,
        )
        return OperationResult.success(
            data=result, message=f"{service_name}.{method} succeeded"
        )

    except ClientError as e:
        mapped = classify_aws_error(e)
        log = logger.warning if mapped.is_transient else logger.error
        log(
            "aws_api_error",
            service=service_name,
            method=method,
            error_code=mapped.error_code,
            http_status=mapped.http_status,
            error=mapped.message,
        )
        return mapped

    except BotoCoreError as e:
        mapped = classify_aws_error(e)
        logger.warning(
            "aws_api_transport_error",
            service=service_name,
            method=method,
            error_code=mapped.error_code,
            error=str(e),
        )
        return mapped

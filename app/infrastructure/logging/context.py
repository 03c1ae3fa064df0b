"""Invocation context binding for structured logging.

Binds invocation-scoped context (correlation IDs, trigger metadata) to
every log entry emitted during one scheduled run.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(correlation_id=context.aws_request_id, cycle="spend_check"):
        logger.info("spend_check_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind invocation-scoped context to all logs within the block.

    Args:
        correlation_id: Unique invocation identifier. Auto-generated if not
            provided.
        **extra_context: Additional key-value pairs to include in logs.
            None values are dropped.

    Yields:
        The correlation ID bound for the block.

    Example:
        with bind_request_context(cycle="device_maintenance") as correlation_id:
            registry.reconcile()
    """
    context: dict[str, Any] = {
        key: value for key, value in extra_context.items() if value is not None
    }
    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context.

    Returns:
        The correlation ID if set, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_request_context() -> None:
    """Clear all invocation-scoped context from the logging context.

    Called at the end of each handler invocation so warm Lambda containers
    do not leak context between runs.
    """
    structlog.contextvars.clear_contextvars()

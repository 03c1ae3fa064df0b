"""Scheduled entry point for the spend alert agent.

The scheduler invokes ``handler(event, context)``. ``event["task"]`` picks
the job:

- ``"spend_check"`` (default): snapshot, evaluate, enrich, dispatch
- ``"device_maintenance"``: endpoint reconciliation and credential check

The same function serves the device registration API: API Gateway proxy
events (those carrying ``httpMethod``) are routed to the device handler.
"""

from typing import Any, Dict, Optional

from dotenv import load_dotenv

from infrastructure.logging import (
    clear_request_context,
    configure_logging,
    get_module_logger,
)
from infrastructure.operations.errors import AggregateDeliveryError
from modules.devices import handle_device_request, run_device_maintenance
from modules.spend_monitor import run_spend_check

load_dotenv()

logger = get_module_logger()

SPEND_CHECK = "spend_check"
DEVICE_MAINTENANCE = "device_maintenance"


def _request_id(context: Any) -> Optional[str]:
    return getattr(context, "aws_request_id", None)


def _is_api_request(event: Dict[str, Any]) -> bool:
    return "httpMethod" in event


def handler(
    event: Optional[Dict[str, Any]] = None, context: Any = None
) -> Dict[str, Any]:
    """Run the task named by the event and return a JSON-able summary.

    API Gateway events return the device API response instead.

    Raises:
        AggregateDeliveryError: An alert was due and no channel delivered it
        ValueError: Unknown task name
    """
    configure_logging()
    event = event or {}

    if _is_api_request(event):
        request_id = (event.get("requestContext") or {}).get("requestId")
        try:
            return handle_device_request(
                event, correlation_id=request_id or _request_id(context)
            )
        finally:
            clear_request_context()

    task = event.get("task", SPEND_CHECK)
    correlation_id = _request_id(context)

    logger.info("invocation_started", task=task, correlation_id=correlation_id)
    try:
        if task == SPEND_CHECK:
            body = run_spend_check(correlation_id=correlation_id).summary()
        elif task == DEVICE_MAINTENANCE:
            body = run_device_maintenance(correlation_id=correlation_id)
        else:
            raise ValueError(f"Unknown task: {task!r}")
    except AggregateDeliveryError as e:
        logger.error(
            "alert_delivery_failed",
            task=task,
            failures=[
                {"channel": f.channel, "error_code": f.error_code} for f in e.failures
            ],
        )
        raise
    finally:
        clear_request_context()

    logger.info("invocation_completed", task=task)
    return {"statusCode": 200, "task": task, "body": body}


if __name__ == "__main__":
    import json
    import sys

    task_name = sys.argv[1] if len(sys.argv) > 1 else SPEND_CHECK
    print(json.dumps(handler({"task": task_name}), default=str, indent=2))

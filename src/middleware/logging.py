import json
import os
import threading
from typing import Any, Dict, Optional

import psutil
from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.logging.lambda_context import build_lambda_context_model
from aws_lambda_powertools.middleware_factory import lambda_handler_decorator

from ..engine.record_store import RecordStore

# Initialize logger outside the handler for performance
logger = Logger(service="single-table-store")


def describe_request(event: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Extract the route and, for POST /users, the requested operation.

    Args:
        event: API Gateway HTTP API event

    Returns:
        Dictionary with ``route`` and ``operation`` (None when not present)
    """
    route = event.get("routeKey")
    operation = None
    body = event.get("body")
    if body and not event.get("isBase64Encoded"):
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("operation"), str):
            operation = payload["operation"]
    return {"route": route, "operation": operation}


@lambda_handler_decorator
def logging_middleware(handler, event, context, record_store: Optional[RecordStore] = None):
    """Middleware logging each request with host and store state.

    Args:
        record_store: Store whose record count is logged before and after the call
    """
    # Inject context into the logger
    if context is not None:
        logger.append_keys(**build_lambda_context_model(context).__dict__)

    request = describe_request(event)
    logger.append_keys(route=request["route"], operation=request["operation"])

    vm_start = psutil.virtual_memory()
    logger.info(
        "Request started",
        extra={
            "system_info": {
                "cpu_cores": os.cpu_count(),
                "memory_available_mb": vm_start.available // (1024 * 1024),
                "memory_percent_used": vm_start.percent,
                "active_threads": threading.active_count(),
            },
            "record_count": len(record_store) if record_store is not None else None,
        },
    )
    logger.debug("Received event", extra={"event": event})

    try:
        response = handler(event, context)
        logger.info(
            "Request completed",
            extra={
                "status_code": response.get("statusCode") if isinstance(response, dict) else None,
                "memory_percent_used": psutil.virtual_memory().percent,
                "record_count": len(record_store) if record_store is not None else None,
            },
        )
        return response
    except Exception:
        logger.exception("Error processing request")
        # Re-raise the exception to be handled by the error handler middleware
        raise
    finally:
        logger.remove_keys(["route", "operation"])

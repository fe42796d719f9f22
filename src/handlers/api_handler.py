import atexit
import functools
from typing import Any, Dict

from aws_lambda_powertools.event_handler import APIGatewayHttpResolver, CORSConfig
from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

from src.config.app import AppConfig
from src.engine.record_store import RecordStore
from src.engine.ttl_reaper import TTLReaper
from src.handlers import handle_list_items, handle_user_operation
from src.middleware.error_handler import error_handler_middleware
from src.middleware.logging import logging_middleware
from src.models.api import VersionResponse

# --- Constants and Setup ---
logger = Logger()

# --- Load Configuration ---
try:
    app_config = AppConfig.from_env()
    logger.info(
        "Configuration loaded successfully.",
        extra={
            "app_env": app_config.app_env,
            "version": app_config.version,
            "commit_hash": app_config.commit_hash,
            "table_name": app_config.table_name,
        },
    )
except Exception as e:
    logger.exception("CRITICAL: Failed to load configuration or initialize services.")
    # This error prevents the Lambda from functioning, raise to indicate failure
    raise RuntimeError(f"Initialization error: {e}") from e

# Configure CORS
cors_config = CORSConfig(
    allow_origin=app_config.cors_allow_origin,
    allow_headers=["Content-Type", "Authorization"],
)

# Initialize API Gateway resolver
app = APIGatewayHttpResolver(cors=cors_config)

# --- Initialize the store handle shared by every request ---
record_store = RecordStore()
ttl_reaper = TTLReaper(
    record_store,
    interval_seconds=app_config.ttl_sweep_interval_seconds,
    batch_size=app_config.ttl_sweep_batch_size,
)
if app_config.ttl_reaper_enabled:
    ttl_reaper.start()
    atexit.register(ttl_reaper.stop)


def _to_body(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


# --- API Route Handlers ---
@app.get("/version")
def get_version() -> Dict[str, Any]:
    """Returns the application version."""
    display_version = f"{app_config.version}-B:{app_config.commit_hash[:7]}-{app_config.app_env[0].upper()}"
    logger.info(f"Version requested: {display_version}")
    return _to_body(VersionResponse(version=display_version))


@app.get("/users")
def get_users() -> Dict[str, Any]:
    """Handle GET /users: scan, partition query or sort-key prefix query."""
    return _to_body(handle_list_items(app=app, record_store=record_store, logger=logger))


@app.post("/users")
def post_users() -> Dict[str, Any]:
    """Handle POST /users request."""
    # Use functools.partial to pass dependencies to the actual handler
    bound_handler = functools.partial(
        handle_user_operation,
        app=app,
        record_store=record_store,
        logger=logger,
    )
    return _to_body(bound_handler())


# --- Main Lambda Entry Point ---
@error_handler_middleware
@logging_middleware(record_store=record_store)
def lambda_handler(event: dict, context: LambdaContext) -> dict:
    """Main Lambda handler function.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    return app.resolve(event, context)

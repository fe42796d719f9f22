import os
from pathlib import Path

from aws_lambda_powertools.logging import Logger
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = Logger()


class AppConfig(BaseModel):
    """Application configuration."""

    app_env: str = Field(
        description="Application environment (local, dev or prod)"
    )
    version: str = Field(description="Application version")
    commit_hash: str = Field(description="Commit hash")
    table_name: str = Field(
        default="Users", description="Logical name of the single table"
    )
    ttl_reaper_enabled: bool = Field(
        default=True, description="Run the background TTL reaper"
    )
    ttl_sweep_interval_seconds: float = Field(
        default=60.0, gt=0, description="Seconds between TTL sweeps"
    )
    ttl_sweep_batch_size: int = Field(
        default=100, gt=0, description="Deletions per TTL sweep batch"
    )
    cors_allow_origin: str = Field(
        default="*", description="Allowed CORS origin for the HTTP API"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables.

        In 'local' mode (default), it first loads variables from a .env file.
        In 'dev' and 'prod' modes, it reads directly from environment variables.
        """

        app_env = os.getenv("APP_ENV", "local").lower()
        logger.debug("App environment", extra={"app_env": app_env})
        if app_env == "local":
            dotenv_path = Path(".env")
            load_dotenv(dotenv_path=dotenv_path, override=True)
            logger.debug("Loaded .env file", extra={"dotenv_path": str(dotenv_path)})
        elif app_env not in ["dev", "prod"]:
            raise ValueError(f"Invalid app environment: {app_env}")

        # pydantic validates and coerces the raw strings
        return cls(
            app_env=app_env,
            version=os.getenv("VERSION", "unknown"),
            commit_hash=os.getenv("COMMIT_HASH", "unknown"),
            table_name=os.getenv("TABLE_NAME", "Users"),
            ttl_reaper_enabled=os.getenv("TTL_REAPER_ENABLED", "true"),
            ttl_sweep_interval_seconds=os.getenv("TTL_SWEEP_INTERVAL_SECONDS", "60"),
            ttl_sweep_batch_size=os.getenv("TTL_SWEEP_BATCH_SIZE", "100"),
            cors_allow_origin=os.getenv("CORS_ALLOW_ORIGIN", "*"),
        )

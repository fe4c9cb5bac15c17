"""Configuration via pydantic-settings, 12-factor app style."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """oplogstats configuration, loaded from env vars / .env file.

    Command-line flags take precedence over every value here.
    """

    model_config = SettingsConfigDict(env_prefix="OPLOGSTATS_", env_file=".env")

    host: str = Field(default="localhost", description="MongoDB hostname")
    port: int = Field(default=27017, ge=1, le=65535, description="MongoDB TCP port")
    auth_db: str | None = Field(default=None, description="Authentication database")
    oplog_db: str = Field(default="local", description="Database holding the oplog")
    oplog_collection: str = Field(default="oplog.rs", description="Oplog collection name")
    print_after: int | None = Field(
        default=None, gt=0, description="Print statistics every N processed documents"
    )
    log_level: str = Field(default="WARNING", description="Logging level for diagnostics")


settings = Settings()

"""
Configuration module for the VideoUp Video Service.

This module defines the settings for the Video Service, including the
catalog backend, payload storage paths, logging levels, and service ports.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from videoup_common.config_enums import CatalogBackend, Environment


class Settings(BaseSettings):
    """
    Configuration settings for the Video Service.

    Settings are loaded from .env files and environment variables.
    """

    # Service identity
    SERVICE_NAME: str = "video-service"

    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",  # Read from global ENVIRONMENT var
        description="Runtime environment for the service",
    )

    # Catalog metadata and likes. The memory backend is process-local, so it
    # must run with WEB_CONCURRENCY=1.
    CATALOG_BACKEND: CatalogBackend = CatalogBackend.MEMORY
    DATABASE_URL: str = "sqlite+aiosqlite:///./.local_video_catalog.db"
    DATABASE_POOL_PRE_PING: bool = True

    # Binary payloads
    PAYLOAD_STORE_ROOT_PATH: Path = Path("./.local_video_payloads")
    PAYLOAD_CHUNK_SIZE: int = Field(default=64 * 1024, gt=0)

    # Prefix for the data_url handed back with every entry
    PUBLIC_BASE_URL: str = "http://localhost:8080"

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    WEB_CONCURRENCY: int = 1

    # Quart app.run() parameters
    DEBUG: bool = False
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="VIDEO_SERVICE_",  # e.g. VIDEO_SERVICE_CATALOG_BACKEND=database
    )


# Create a single instance for the application to use
settings = Settings()

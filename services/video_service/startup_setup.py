"""Startup and shutdown logic for Video Service."""

from __future__ import annotations

from dishka import AsyncContainer, make_async_container
from prometheus_client import CollectorRegistry, Counter, Histogram
from quart import Quart
from sqlalchemy.ext.asyncio import AsyncEngine
from videoup_common.config_enums import CatalogBackend
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.config import Settings
from services.video_service.di import VideoServiceProvider, catalog_provider_for
from services.video_service.models_db import Base

# Global reference for DI container, managed by app.py
_app_container_ref: AsyncContainer | None = None


def create_di_container(settings: Settings) -> AsyncContainer:
    """Creates and returns the DI AsyncContainer for the configured backend."""
    global _app_container_ref
    logger = create_service_logger("video.startup")

    container = make_async_container(
        VideoServiceProvider(settings),
        catalog_provider_for(settings.CATALOG_BACKEND),
    )
    _app_container_ref = container  # Keep a reference for shutdown
    logger.info(
        "DI AsyncContainer created.",
        catalog_backend=settings.CATALOG_BACKEND.value,
    )
    return container


async def initialize_services(app: Quart, settings: Settings, container: AsyncContainer) -> None:
    """Initialize metrics and, for the database backend, the catalog schema."""
    logger = create_service_logger("video.startup")

    if settings.CATALOG_BACKEND is CatalogBackend.MEMORY and settings.WEB_CONCURRENCY > 1:
        logger.warning(
            "Memory catalog backend is process-local; workers will not share entries",
            web_concurrency=settings.WEB_CONCURRENCY,
        )

    try:
        registry = await container.get(CollectorRegistry)
        metrics = _create_metrics(registry)

        # Store metrics in app context (proper Quart pattern)
        app.extensions = getattr(app, "extensions", {})
        app.extensions["metrics"] = metrics

        if settings.CATALOG_BACKEND is CatalogBackend.DATABASE:
            engine = await container.get(AsyncEngine)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Catalog schema ensured", database_url=engine.url.render_as_string())

        logger.info("Video Service metrics initialized successfully.")
    except Exception as e:
        logger.critical(f"Failed to initialize Video Service: {e}", exc_info=True)
        raise


async def shutdown_services() -> None:
    """Gracefully shutdown the Video Service's DI container."""
    global _app_container_ref
    logger = create_service_logger("video.startup")

    try:
        if _app_container_ref:
            await _app_container_ref.close()
            logger.info("Video Service DI container closed")

        logger.info("Video Service shutdown completed")
    except Exception as e:
        logger.error(f"Error during Video Service shutdown: {e}", exc_info=True)


def _create_metrics(registry: CollectorRegistry) -> dict:
    """Create Prometheus metrics instances for HTTP middleware."""
    return {
        "http_requests_total": Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=registry,
        ),
        "http_request_duration_seconds": Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        ),
    }

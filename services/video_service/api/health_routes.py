"""Health and metrics routes for Video Service."""

from __future__ import annotations

import uuid

from dishka import FromDishka
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from quart import Blueprint, Response, jsonify
from quart_dishka import inject
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.config import Settings

logger = create_service_logger("video.api.health")
health_bp = Blueprint("health_routes", __name__)


@health_bp.route("/healthz")
@inject
async def health_check(settings: FromDishka[Settings]) -> Response | tuple[Response, int]:
    """Standardized health check endpoint.

    The payload store root may not exist until the first upload, so only a
    path that exists and is not a directory counts as unhealthy.
    """
    correlation_id = uuid.uuid4()

    try:
        store_root = settings.PAYLOAD_STORE_ROOT_PATH
        storage_ok = not store_root.exists() or store_root.is_dir()

        health_response = {
            "service": "video_service",
            "status": "healthy" if storage_ok else "unhealthy",
            "message": "Video Service is healthy" if storage_ok else "Payload storage unusable",
            "version": "1.0.0",
            "checks": {
                "service_responsive": True,
                "dependencies_available": storage_ok,
            },
            "dependencies": {
                "storage": {
                    "status": "healthy" if storage_ok else "unhealthy",
                    "path": str(store_root),
                },
                "catalog": {"backend": settings.CATALOG_BACKEND.value},
            },
            "environment": settings.ENVIRONMENT.value,
            "correlation_id": str(correlation_id),
        }

        return jsonify(health_response), 200 if storage_ok else 503

    except Exception as e:
        logger.error(
            f"Health check unexpected error: {e}",
            correlation_id=str(correlation_id),
            exc_info=True,
        )
        return jsonify(
            {
                "service": "video_service",
                "status": "unhealthy",
                "message": "Health check failed",
                "version": "1.0.0",
                "error": str(e),
                "correlation_id": str(correlation_id),
            }
        ), 503


@health_bp.route("/metrics")
@inject
async def metrics(registry: FromDishka[CollectorRegistry]) -> Response:
    """Prometheus metrics endpoint."""
    correlation_id = uuid.uuid4()

    try:
        metrics_data = generate_latest(registry)
        response = Response(metrics_data, content_type=CONTENT_TYPE_LATEST)
        response.headers["X-Correlation-ID"] = str(correlation_id)
        return response
    except Exception as e:
        logger.error(
            f"Error generating metrics: {e}",
            correlation_id=str(correlation_id),
            exc_info=True,
        )
        return Response("Error generating metrics", status=500)

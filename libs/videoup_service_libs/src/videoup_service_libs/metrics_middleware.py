"""Shared Prometheus metrics middleware for VideoUp HTTP services.

This module provides a common metrics middleware implementation that can be
configured for different service-specific metric naming conventions.
"""

from __future__ import annotations

import time

from quart import Quart, Response, current_app, g, request

from videoup_service_libs.logging_utils import create_service_logger

logger = create_service_logger("videoup.metrics_middleware")


def setup_metrics_middleware(
    app: Quart,
    request_count_metric_name: str = "http_requests_total",
    request_duration_metric_name: str = "http_request_duration_seconds",
    status_label_name: str = "status_code",
    logger_name: str | None = None,
) -> None:
    """Setup Prometheus metrics middleware for a Quart application.

    Args:
        app: The Quart application to configure
        request_count_metric_name: Name of the request counter metric
        request_duration_metric_name: Name of the request duration metric
        status_label_name: Name of the status code label
        logger_name: Optional custom logger name for this service

    Note:
        The metrics instances must be stored in app.extensions["metrics"] as a dict
        containing the metric objects. This is done in startup_setup.py.
    """
    service_logger = create_service_logger(logger_name) if logger_name else logger

    @app.before_request
    async def before_request() -> None:
        """Record request start time for duration metrics."""
        g.start_time = time.time()

    @app.after_request
    async def after_request(response: Response) -> Response:
        """Record metrics after each request."""
        try:
            start_time = getattr(g, "start_time", None)

            extensions = getattr(current_app, "extensions", {})
            metrics = extensions.get("metrics", {}) if extensions else {}

            if start_time is not None and metrics:
                duration = time.time() - start_time

                # Use the matched rule so /video/<id> stays one label value
                endpoint = request.url_rule.rule if request.url_rule else request.path
                method = request.method
                status_code = str(response.status_code)

                request_count = metrics.get(request_count_metric_name)
                request_duration = metrics.get(request_duration_metric_name)

                if request_count:
                    request_count.labels(
                        method=method,
                        endpoint=endpoint,
                        **{status_label_name: status_code},
                    ).inc()
                if request_duration:
                    request_duration.labels(method=method, endpoint=endpoint).observe(duration)

        except Exception as e:
            service_logger.error(f"Error recording request metrics: {e}")

        return response


def setup_video_service_metrics_middleware(app: Quart) -> None:
    """Setup metrics middleware with Video Service naming conventions.

    Uses:
    - http_requests_total (request count)
    - http_request_duration_seconds (request duration)
    - status_code (status label)
    """
    setup_metrics_middleware(
        app=app,
        request_count_metric_name="http_requests_total",
        request_duration_metric_name="http_request_duration_seconds",
        status_label_name="status_code",
        logger_name="video.metrics",
    )

"""Tests for the shared Quart metrics middleware."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram
from quart import Quart
from videoup_service_libs.metrics_middleware import setup_video_service_metrics_middleware


def _build_app(registry: CollectorRegistry) -> Quart:
    app = Quart(__name__)
    app.extensions["metrics"] = {
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

    @app.route("/video/<int:video_id>")
    async def get_video(video_id: int) -> dict:
        return {"id": video_id}

    setup_video_service_metrics_middleware(app)
    return app


async def test_requests_are_labelled_by_route_rule() -> None:
    registry = CollectorRegistry()
    app = _build_app(registry)

    async with app.test_client() as client:
        await client.get("/video/1")
        await client.get("/video/2")

    count = registry.get_sample_value(
        "http_requests_total",
        {"method": "GET", "endpoint": "/video/<int:video_id>", "status_code": "200"},
    )
    assert count == 2.0


async def test_unmatched_path_falls_back_to_request_path() -> None:
    registry = CollectorRegistry()
    app = _build_app(registry)

    async with app.test_client() as client:
        response = await client.get("/nowhere")

    assert response.status_code == 404
    count = registry.get_sample_value(
        "http_requests_total",
        {"method": "GET", "endpoint": "/nowhere", "status_code": "404"},
    )
    assert count == 1.0

"""
VideoUp Video Service Application.
"""

from __future__ import annotations

from quart import Quart
from quart_dishka import QuartDishka
from videoup_service_libs.logging_utils import configure_service_logging, create_service_logger
from videoup_service_libs.metrics_middleware import setup_video_service_metrics_middleware

from services.video_service import startup_setup
from services.video_service.api.health_routes import health_bp
from services.video_service.api.video_routes import video_bp
from services.video_service.config import settings
from services.video_service.startup_setup import create_di_container

# Configure structured logging
configure_service_logging(
    settings.SERVICE_NAME,
    environment=settings.ENVIRONMENT.value,
    log_level=settings.LOG_LEVEL,
)
logger = create_service_logger("video.app")

app = Quart(__name__)

# Create DI container and setup QuartDishka integration before registering blueprints
_di_container = create_di_container(settings)
QuartDishka(app=app, container=_di_container)


@app.before_serving
async def startup() -> None:
    """Initialize services and middleware."""
    try:
        await startup_setup.initialize_services(app, settings, _di_container)
        setup_video_service_metrics_middleware(app)
        logger.info("Video Service startup completed successfully")
    except Exception as e:
        logger.critical(f"Failed to start Video Service: {e}", exc_info=True)
        raise


@app.after_serving
async def shutdown() -> None:
    """Gracefully shutdown all services."""
    try:
        await startup_setup.shutdown_services()
        logger.info("Video Service shutdown completed")
    except Exception as e:
        logger.error(f"Error during service shutdown: {e}", exc_info=True)


# Register Blueprints
app.register_blueprint(video_bp)
app.register_blueprint(health_bp)


if __name__ == "__main__":
    app.run(debug=settings.DEBUG, host=settings.HTTP_HOST, port=settings.HTTP_PORT)

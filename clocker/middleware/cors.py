"""
CORS middleware configuration for a local UI talking to the control API.
"""
from fastapi.middleware.cors import CORSMiddleware
from clocker.config import settings
import logging

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = ["http://localhost:3000", "http://localhost:8080"]


def setup_cors(app):
    """
    Setup CORS middleware from CORS_ORIGINS (comma-separated).
    An empty value falls back to localhost:3000 and localhost:8080.

    Args:
        app: FastAPI application instance
    """
    origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    if not origins:
        origins = DEFAULT_ORIGINS
        logger.info("CORS_ORIGINS not set, using defaults: localhost:3000, localhost:8080")
    else:
        logger.info(f"CORS configured with origins: {origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    return origins

"""Main application entry point."""

from __future__ import annotations

from fastapi import FastAPI

from app.api.app import create_api_app
from app.core.config import settings
from app.core.logging import get_logger, setup_logging


logger = get_logger("main")


def create_app() -> FastAPI:
    """Create the main FastAPI application."""
    setup_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    return create_api_app()


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )

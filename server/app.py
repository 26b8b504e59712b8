"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from server.config import settings
from server.errors import install_error_handlers
from server.routes import analyze, health, speech

__all__ = ["app", "create_app"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and teardown resources."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; vision and speech requests will fail.")
    yield


def create_app() -> FastAPI:
    """Build and configure the FastAPI application instance."""
    logging.basicConfig(level=settings.log_level.upper())
    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    install_error_handlers(application)
    application.include_router(health.router)
    application.include_router(analyze.router)
    application.include_router(speech.router)
    return application


app = create_app()

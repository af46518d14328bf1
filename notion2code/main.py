"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import generate_router, notion_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .exceptions import AppException
from .middleware.exception_handler import app_exception_handler
from .middleware.request_context import RequestContextMiddleware

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the notion2code API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        if not settings.chat_configured():
            logger.warning(
                "CHAT_API_KEY is empty. /api/ai/generate will return 503 until it is set."
            )
        if not settings.notion_api_key:
            logger.info(
                "NOTION_API_KEY is empty; requests must send a Notion-API-Key header."
            )

    yield  # App runs here


app = FastAPI(
    title="notion2code API",
    description=(
        "Generates application source code from Notion documentation. "
        "Fetches selected pages with their nested sub-pages, flattens them into "
        "a single prompt, and returns the generated files as a path -> content map.\n\n"
        "**Authentication:** Notion calls use the integration token sent in the "
        "`Notion-API-Key` header, falling back to `NOTION_API_KEY`."
    ),
    version=__version__,
    lifespan=lifespan,
)

# Middleware stack (outermost first: CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Notion-API-Key"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(AppException, app_exception_handler)

logger.info(
    "notion2code API started | env=%s | model=%s | generation=%s | cors=%s",
    settings.environment.value,
    settings.chat_model or "-",
    "enabled" if settings.chat_configured() else "disabled",
    ",".join(settings.get_cors_origins()),
)

app.include_router(notion_router)
app.include_router(generate_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "notion2code API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check():
    """Liveness probe with uptime and configuration status. Never raises."""
    return {
        "status": "healthy",
        "generation": "enabled" if settings.chat_configured() else "disabled",
        "notion_fallback_key": bool(settings.notion_api_key),
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
    }

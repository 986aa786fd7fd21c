"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from greensquares import __version__
from greensquares.api import api_router, oauth_browser_router
from greensquares.auth import get_session_store
from greensquares.config import get_settings
from greensquares.errors import (
    APIError,
    api_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from greensquares.utils.http_client import close_all_clients
from greensquares.utils.logging import get_logger, setup_logging
from greensquares.utils.metrics import MetricsMiddleware, metrics

settings = get_settings()
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info(f"{settings.app_name} backend running on port {settings.port}")
    logger.info(f"Frontend URL: {settings.frontend_url}")
    logger.info("GitHub OAuth configured")

    yield

    await close_all_clients()
    logger.info("HTTP clients closed")

    # Sessions are process memory only
    logger.info(f"Application shutdown complete, dropping {len(get_session_store())} sessions")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(api_router)
app.include_router(oauth_browser_router)

# Store app start time for uptime tracking
_app_start_time = datetime.now(UTC)


@app.get("/", tags=["monitoring"])
async def root() -> dict:
    """Liveness probe."""
    return {
        "success": True,
        "message": f"{settings.app_name} Backend API",
        "status": "running",
    }


@app.get("/api/config", tags=["config"])
async def frontend_config() -> dict:
    """URLs the frontend needs to reach this backend."""
    return {
        "success": True,
        "config": {
            "backendUrl": settings.backend_url,
            "githubAuthUrl": settings.github_auth_url,
            "environment": settings.app_env,
        },
    }


@app.get("/health", tags=["monitoring"])
async def health_check() -> dict:
    """Health check endpoint for monitoring and load balancers."""
    sessions = len(get_session_store())
    metrics.sessions_active.set(sessions)
    return {
        "success": True,
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": (datetime.now(UTC) - _app_start_time).total_seconds(),
        "version": __version__,
        "checks": {"sessions": {"status": "healthy", "active": sessions}},
    }


@app.get("/metrics", tags=["monitoring"])
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=metrics.format_prometheus(),
        media_type="text/plain; charset=utf-8",
    )

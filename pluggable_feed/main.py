"""
Main FastAPI application entry point.
Configures logging, exception handlers, middleware, and routers.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pluggable_feed.api.routers import feed_router, health_router
from pluggable_feed.config import get_settings
from pluggable_feed.config.logging import configure_logging
from pluggable_feed.core.exceptions import AppException, InternalError, InvalidRequestError
from pluggable_feed.core.telemetry import setup_telemetry
from pluggable_feed.services.response import ResponseAssembler


# =============================================================================
# Lifespan (Startup/Shutdown)
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logger = logging.getLogger(__name__)
    settings = get_settings()

    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Preference parse mode: {settings.PREFERENCE_PARSE_MODE}")
    logger.info(f"Third-party timeout: {settings.THIRD_PARTY_TIMEOUT_SEC}s")

    app.state.http_client = httpx.AsyncClient(timeout=settings.THIRD_PARTY_TIMEOUT_SEC)

    yield

    # Shutdown
    logger.info("Shutting down application")
    await app.state.http_client.aclose()


# =============================================================================
# Exception Handlers
# =============================================================================


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handle custom application exceptions."""
    assembled = ResponseAssembler.error(exc)
    return JSONResponse(status_code=assembled.status_code, content=assembled.body)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render request validation failures in the uniform error shape."""
    errors = exc.errors()
    details = None
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        details = f"{location}: {first.get('msg')}"

    assembled = ResponseAssembler.error(InvalidRequestError(details))
    return JSONResponse(status_code=assembled.status_code, content=assembled.body)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions - return generic error."""
    logger = logging.getLogger(__name__)
    logger.exception(f"Unhandled exception: {exc}")

    assembled = ResponseAssembler.error(InternalError())
    return JSONResponse(status_code=assembled.status_code, content=assembled.body)


# =============================================================================
# Application Factory
# =============================================================================


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Configure structured logging
    configure_logging(debug=settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        Pluggable Feed API

        Personalized feed pages with a per-user choice of ranking algorithm.

        ## Features
        - Custom ranking from likes, comments, follows and recency with per-user weights
        - Chronological feed as the default and fallback
        - Delegation to a user-configured third-party scorer
        - Uniform `{posts, algorithm}` / `{error, details}` responses
        - Observability: JSON logs, Prometheus, OpenTelemetry
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(feed_router)

    # Setup Telemetry (Metrics & Tracing)
    setup_telemetry(app, settings)

    return app


# Create application instance
app = create_app()


# =============================================================================
# Development Entry Point
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pluggable_feed.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

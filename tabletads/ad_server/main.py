"""
tabletads edge server.

Serves the ``get-ads`` and ``track-impression`` functions to in-vehicle
tablets under ``/functions/v1``, plus health and Prometheus endpoints.
"""

import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tabletads.ad_server.middleware.metrics import MetricsMiddleware, metrics_endpoint
from tabletads.ad_server.responses import error_response
from tabletads.ad_server.routers import health, impression, playlist
from tabletads.common.config import get_settings
from tabletads.common.database import close_db, init_db
from tabletads.common.exceptions import TabletAdsError
from tabletads.common.logger import clear_log_context, get_logger, log_context
from tabletads.common.utils import generate_request_id
from tabletads.schemas.response import ErrorResponse

logger = get_logger(__name__)

FUNCTIONS_PREFIX = "/functions/v1"


def _validation_message(exc: RequestValidationError) -> str:
    """Flatten the first body validation error into a single line."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request body")
    return f"{location}: {message}" if location else message


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    logger.info(
        "Starting tabletads server",
        version=settings.app_version,
        env=settings.env,
        backend=settings.store.backend,
    )

    # Supabase clients are per request; only the direct backend holds a pool
    if settings.store.backend == "postgres":
        await init_db()

    logger.info("tabletads server started successfully")

    yield

    logger.info("Shutting down tabletads server")
    if settings.store.backend == "postgres":
        await close_db()
    logger.info("tabletads server stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="tabletads",
        description="Ad playlist delivery and impression tracking for in-vehicle tablets",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    if settings.monitoring.enabled:
        app.add_middleware(MetricsMiddleware)
        app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["monitoring"])

    # Request logging middleware
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log all requests with timing."""
        request_id = generate_request_id()
        log_context(request_id=request_id)

        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        clear_log_context()

        return response

    # Exception handlers
    @app.exception_handler(TabletAdsError)
    async def tabletads_error_handler(
        request: Request,
        exc: TabletAdsError,
    ) -> JSONResponse:
        """Handle tabletads errors."""
        logger.warning(
            "Request failed",
            error=exc.__class__.__name__,
            message=exc.message,
            details=exc.details,
        )
        return error_response(exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Malformed bodies are client errors like any other: 400, not 422."""
        message = _validation_message(exc)
        logger.warning("Invalid request body", message=message)
        return error_response(message)

    @app.exception_handler(Exception)
    async def general_error_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "Unexpected error",
            error=str(exc),
            error_type=exc.__class__.__name__,
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="An unexpected error occurred").model_dump(),
        )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(playlist.router, prefix=FUNCTIONS_PREFIX, tags=["playlist"])
    app.include_router(impression.router, prefix=FUNCTIONS_PREFIX, tags=["impression"])

    return app


# Create app instance
app = create_app()


def main() -> None:
    """Run the server using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "tabletads.ad_server.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.server.reload,
        log_level="info" if not settings.debug else "debug",
    )


if __name__ == "__main__":
    main()

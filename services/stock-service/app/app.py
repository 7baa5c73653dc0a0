"""
Main FastAPI application.

This file wires together all layers:
- Domain: Stock record and error types
- Repositories: SQL store and Redis cache
- Services: Cache-aside orchestration
- Routers: HTTP endpoints
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, settings as default_settings
from .core.redis_manager import RedisConnectionManager
from .database import Database
from .domain.exceptions import (
    CacheUnavailableException,
    StoreUnavailableException,
    ValidationException,
)
from .metrics import metrics_endpoint, track_request_metrics
from .repositories.sql_repository import SqlStockRepository
from .routers import health_router, stock_router
from .seed import seed_stocks

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def setup_logging(log_level: str) -> None:
    """Route stdlib logging (used by repositories and the service) to stdout."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    logger.info("Starting Stock Service", version=__version__)

    database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    app.state.database = database
    try:
        await database.init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        await database.close()
        raise

    redis_manager = RedisConnectionManager(settings)
    app.state.redis_manager = redis_manager
    try:
        await redis_manager.initialize()
        logger.info("Redis connected successfully")
    except Exception as e:
        logger.error("Failed to connect to Redis", error=str(e))
        await redis_manager.close()
        await database.close()
        raise

    try:
        if settings.SEED_ON_STARTUP:
            async with database.session_factory() as session:
                await seed_stocks(SqlStockRepository(session))

        logger.info("Stock Service started successfully")
        yield
    finally:
        logger.info("Shutting down Stock Service...")
        await redis_manager.close()
        await database.close()
        logger.info("Stock Service shut down complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to run with (defaults to environment settings)

    Returns:
        Configured FastAPI instance
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Stock Service",
        description="Stock price service with Redis cache-aside reads",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID for distributed tracing."""
        request_id = request.headers.get("X-Request-ID", f"req-{id(request)}")

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        return response

    @app.middleware("http")
    async def track_metrics(request: Request, call_next):
        """Track Prometheus metrics."""
        start_time = time.time()
        response = await call_next(request)

        route = request.scope.get("route")
        endpoint = route.path if route is not None else request.url.path
        track_request_metrics(
            request.method, endpoint, response.status_code, time.time() - start_time
        )
        return response

    app.include_router(stock_router.router)
    app.include_router(health_router.router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        return await metrics_endpoint()

    register_exception_handlers(app)
    return app


def _error_response(request: Request, status_code: int, error: str, exc) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "message": exc.message,
            "details": exc.details,
            "request_id": request.headers.get("X-Request-ID"),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain errors that escape the routers into HTTP responses."""

    @app.exception_handler(StoreUnavailableException)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableException):
        logger.error("Store unavailable", path=request.url.path, error=exc.message)
        return _error_response(
            request, status.HTTP_503_SERVICE_UNAVAILABLE, "store_unavailable", exc
        )

    @app.exception_handler(CacheUnavailableException)
    async def cache_unavailable_handler(request: Request, exc: CacheUnavailableException):
        logger.error("Cache unavailable", path=request.url.path, error=exc.message)
        return _error_response(
            request, status.HTTP_503_SERVICE_UNAVAILABLE, "cache_unavailable", exc
        )

    @app.exception_handler(ValidationException)
    async def validation_handler(request: Request, exc: ValidationException):
        return _error_response(request, status.HTTP_400_BAD_REQUEST, "validation_error", exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "request_id": request.headers.get("X-Request-ID"),
            },
        )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.app:app",
        host=default_settings.SERVICE_HOST,
        port=default_settings.SERVICE_PORT,
        reload=default_settings.DEBUG,
        log_level=default_settings.LOG_LEVEL.lower(),
    )

"""
FastAPI application entry point with health endpoints and API routing.

This module builds the storefront application: CORS configuration, request
logging with correlation ids, rate limiting, global exception handling,
health endpoints and the REST routers. The lifespan creates the configured
storage backend, optionally seeds sample data, and releases the backend on
shutdown.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from storefront.api.deps import limiter
from storefront.api.v1 import api_router
from storefront.core.config import Settings, get_settings
from storefront.core.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    log_performance,
    set_request_id,
)
from storefront.database.connection import (
    check_database_health,
    create_engine,
    create_session_factory,
    create_tables,
    dispose_engine,
)
from storefront.services.catalog.seed import seed_sample_data
from storefront.storage.base import Storage
from storefront.storage.database import DatabaseStorage
from storefront.storage.memory import MemoryStorage

logger = get_logger(__name__)


async def build_storage(settings: Settings) -> Storage:
    """
    Create the storage backend selected by ``settings.storage_backend``.

    Args:
        settings: Application settings

    Returns:
        Ready-to-use storage backend

    Raises:
        RuntimeError: If the database is unreachable
    """
    if settings.storage_backend == "memory":
        return MemoryStorage()

    engine = create_engine(settings)
    if not await check_database_health(engine):
        await dispose_engine(engine)
        raise RuntimeError("Database health check failed during startup")

    if settings.db_create_tables:
        await create_tables(engine)

    return DatabaseStorage(create_session_factory(engine), engine=engine)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan context manager for startup and shutdown events.

    Creates the storage backend unless one was injected into
    ``create_app``, loads sample data when enabled, and closes the backend
    it created on shutdown.

    Args:
        app: FastAPI application instance

    Yields:
        None during application runtime
    """
    settings: Settings = app.state.settings
    owns_storage = getattr(app.state, "storage", None) is None

    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        version=settings.app_version,
        storage_backend=settings.storage_backend,
    )

    async with log_performance(logger, "application_startup"):
        if owns_storage:
            app.state.storage = await build_storage(settings)
        if settings.seed_sample_data:
            await seed_sample_data(app.state.storage)
        logger.info("Resources initialized successfully", backend=app.state.storage.name)

    yield

    logger.info("Application shutting down")
    async with log_performance(logger, "application_shutdown"):
        if owns_storage:
            await app.state.storage.close()
            app.state.storage = None
        logger.info("Resources cleaned up successfully")


async def request_logging_middleware(request: Request, call_next):
    """
    Middleware for request logging and correlation ID management.

    Sets request ID for correlation, logs request details, and measures
    response time. Clears context after request processing.

    Args:
        request: Incoming HTTP request
        call_next: Next middleware or route handler

    Returns:
        HTTP response with X-Request-ID header
    """
    request_id = set_request_id(request.headers.get("X-Request-ID"))

    logger.info(
        "Request received",
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None,
    )

    try:
        with log_performance(
            logger,
            "request_processing",
            method=request.method,
            path=request.url.path,
        ):
            response = await call_next(request)

        response.headers["X-Request-ID"] = request_id

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )

        return response
    except Exception as e:
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        clear_context()


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors with structured error response.

    Args:
        request: HTTP request that caused validation error
        exc: Validation exception with error details

    Returns:
        JSON response with validation error details
    """
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        "Request validation failed",
        method=request.method,
        path=request.url.path,
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "message": "Request validation failed",
            "details": errors,
            "request_id": get_request_id(),
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with structured error response.

    Logs error with full context and returns generic error message
    to avoid exposing internal details.
    """
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "request_id": get_request_id(),
        },
    )


def register_health_routes(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health check endpoint",
    )
    async def health_check() -> dict[str, str]:
        """Always returns 200 OK while the application is running."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        }

    @app.get(
        "/live",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Liveness check endpoint",
    )
    async def liveness_check() -> dict[str, str]:
        return {
            "status": "alive",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get(
        "/ready",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Readiness check endpoint",
    )
    async def readiness_check(request: Request):
        """
        Readiness check endpoint for orchestration.

        Returns 200 when the storage backend answers, 503 otherwise.
        """
        storage: Optional[Storage] = getattr(request.app.state, "storage", None)
        storage_ready = storage is not None and await storage.ping()

        if not storage_ready:
            logger.warning("Readiness check failed", dependencies_ready=False)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "not_ready",
                    "service": settings.app_name,
                    "dependencies_ready": False,
                    "storage": "unhealthy",
                },
            )

        return {
            "status": "ready",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "dependencies_ready": True,
            "storage": "healthy",
            "storage_backend": storage.name,
        }


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[Storage] = None,
) -> FastAPI:
    """
    Build the storefront application.

    Args:
        settings: Settings to use, defaults to the cached environment settings
        storage: Pre-built storage backend; when omitted the lifespan creates
            one from ``settings.storage_backend``

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Storefront catalog, customer and order API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.storage = storage

    # Configure rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.middleware("http")(request_logging_middleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    register_health_routes(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()

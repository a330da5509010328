"""FastAPI application for GridBase.

``create_app`` wires CORS, health probes, the databases and entries routers,
error mapping and the request logging middleware. Domain errors never reach
the routes' callers as tracebacks:

* ``SchemaValidationError`` / ``EntryValidationError`` -> 400 with per-field details
* ``SchemaNotFoundError`` / ``EntryNotFoundError`` -> 404
* anything else -> 500
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from gridbase.domain.exceptions import (
    EntryNotFoundError,
    EntryValidationError,
    SchemaNotFoundError,
    SchemaValidationError,
)
from gridbase.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and the database on startup; dispose the engine on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "GridBase starting",
        version=settings.app_version,
        environment=settings.environment,
        timezone=settings.default_timezone,
    )

    try:
        await init_database()
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise

    yield

    await close_database()
    logger.info("GridBase stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to build from; defaults to the cached settings.

    Returns:
        FastAPI: The configured application.
    """
    settings = settings or get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Flexible-schema structured tables: typed columns, rows, views, filter and sort",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app, settings)
    register_routes(app, settings)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def _service_info(settings: Settings) -> dict[str, Any]:
    return {"service": settings.app_name, "version": settings.app_version}


def register_health_check(app: FastAPI, settings: Settings) -> None:
    """Register ``/health``, ``/live`` and ``/ready`` probes.

    Only ``/ready`` touches the database.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        return {"status": "healthy", **_service_info(settings)}

    @app.get("/live", tags=["health"])
    async def liveness_check():
        return {"status": "alive", **_service_info(settings)}

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        if await get_db_manager().check_connection():
            return {"status": "ready", "database": "connected", **_service_info(settings)}
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "database": "disconnected", **_service_info(settings)},
        )


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Mount the databases and entries routers under ``{api_prefix}/databases``."""
    from gridbase.infrastructure.api.routes import databases_router, entries_router

    prefix = f"{settings.api_prefix}/databases"
    app.include_router(databases_router, prefix=prefix, tags=["databases"])
    app.include_router(entries_router, prefix=prefix, tags=["entries"])

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        return {"name": settings.app_name, "version": settings.app_version, "api_version": "v1"}


async def validation_error_handler(
    request: Request, exc: SchemaValidationError | EntryValidationError
) -> JSONResponse:
    """Answer 400 with one detail per failing field."""
    logger.info(
        "Request rejected by validation",
        path=request.url.path,
        method=request.method,
        codes=[e.code for e in exc.errors],
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "details": [{"field": e.field, "message": e.message, "code": e.code} for e in exc.errors],
        },
    )


async def not_found_handler(
    request: Request, exc: SchemaNotFoundError | EntryNotFoundError
) -> JSONResponse:
    """Answer 404 for stale database or entry IDs."""
    logger.info("Target not found", path=request.url.path, method=request.method, error=str(exc))
    return JSONResponse(status_code=404, content={"error": "Not found", "message": str(exc)})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer 500; the exception text is only exposed in debug mode."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if get_settings().debug else "An unexpected error occurred",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to HTTP responses."""
    for exc_class in (SchemaValidationError, EntryValidationError):
        app.add_exception_handler(exc_class, validation_error_handler)
    for exc_class in (SchemaNotFoundError, EntryNotFoundError):
        app.add_exception_handler(exc_class, not_found_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


def register_middleware(app: FastAPI) -> None:
    """Log each request with its duration and echo the correlation ID."""

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()
        bind_correlation_id(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()

"""Catalog Store main application module.

This module initializes the FastAPI application and configures
logging, middleware, routers, and startup/shutdown events.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from catalog_store.api.health import router as health_router
from catalog_store.api.middleware import REQUEST_ID_HEADER, setup_middleware
from catalog_store.api.products import router as products_router
from catalog_store.catalog.exceptions import (
    InvalidProductError,
    StorageConflictError,
    StorageError,
)
from catalog_store.catalog.importer import ImportResult, SeedImporter
from catalog_store.catalog.service import CatalogService
from catalog_store.infrastructure.config import settings
from catalog_store.infrastructure.database import async_session_factory, create_tables
from catalog_store.infrastructure.feed_client import ProductFeedClient


def configure_logging(log_level: str = settings.log_level) -> None:
    """Configure stdlib logging and structlog.

    Args:
        log_level: Minimum level name (e.g., "INFO").
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger()


async def run_seed_import(
    feed_url: str = settings.feed_url,
    limit: int = settings.seed_limit,
) -> ImportResult:
    """Seed the catalog from the feed if the store is empty.

    Uses its own session, independent of any request.

    Args:
        feed_url: Product feed URL.
        limit: Maximum number of products to import.

    Returns:
        Import result.
    """
    feed_client = ProductFeedClient(feed_url, timeout=settings.feed_timeout_seconds)
    try:
        async with async_session_factory() as session:
            importer = SeedImporter(
                CatalogService(session),
                feed_client,
                limit=limit,
            )
            result = await importer.run()
    finally:
        await feed_client.close()

    if result.succeeded:
        logger.info(
            "Seed import complete",
            state=result.state.value,
            products_saved=result.products_saved,
        )
    else:
        logger.warning(
            "Seed import incomplete, catalog may be empty or partial",
            state=result.state.value,
            products_saved=result.products_saved,
            error=result.error,
        )
    return result


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting Catalog Store",
        version=settings.api_version,
        debug=settings.debug,
    )

    await create_tables()

    seed_task: asyncio.Task | None = None
    if settings.seed_on_startup:
        seed_task = asyncio.create_task(run_seed_import())

    yield

    # Shutdown
    if seed_task is not None and not seed_task.done():
        seed_task.cancel()
        with suppress(asyncio.CancelledError):
            await seed_task
    logger.info("Shutting down Catalog Store")


app = FastAPI(
    title="Catalog Store",
    description="Product catalog with one-time seed import",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request ID correlation
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Report storage failures as 503; the caller should re-fetch to verify state."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        "Storage error in handler",
        path=request.url.path,
        method=request.method,
        operation=exc.operation,
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error_code": "STORAGE_UNAVAILABLE",
            "message": exc.message,
            "details": [],
            "request_id": request_id,
        },
    )


@app.exception_handler(InvalidProductError)
async def invalid_product_handler(request: Request, exc: InvalidProductError) -> JSONResponse:
    """Report invalid product data as 422."""
    request_id = getattr(request.state, "request_id", None)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "INVALID_PRODUCT",
            "message": exc.message,
            "details": [{"field": exc.field, "message": exc.details["reason"]}],
            "request_id": request_id,
        },
    )


@app.exception_handler(StorageConflictError)
async def storage_conflict_handler(request: Request, exc: StorageConflictError) -> JSONResponse:
    """Report key and constraint violations as 409; retrying will not help."""
    request_id = getattr(request.state, "request_id", None)

    logger.warning(
        "Storage conflict in handler",
        path=request.url.path,
        method=request.method,
        operation=exc.operation,
    )

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error_code": "PRODUCT_CONFLICT",
            "message": exc.message,
            "details": [],
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    # Raised past the correlation middleware, so the header is set here
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
        headers=headers,
    )

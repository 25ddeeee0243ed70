"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from noshow.api.v1.router import api_router
from noshow.config import settings
from noshow.core.exceptions import AppException
from noshow.core.redis_client import (
    DistributedRunLock,
    check_redis_connection,
    close_redis_connection,
    get_redis_client,
)
from noshow.database import AsyncSessionLocal, check_database_connection, engine
from noshow.middleware.error_handler import (
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from noshow.middleware.logging import LoggingMiddleware, configure_logging
from noshow.services.scheduler import RUN_LOCK_NAME, NoShowScheduler

# Configure logging
configure_logging()
logger = structlog.get_logger()


def build_scheduler() -> NoShowScheduler:
    """Create the no-show scheduler from settings."""
    run_lock = None
    if settings.noshow_distributed_lock:
        run_lock = DistributedRunLock(
            get_redis_client(),
            name=RUN_LOCK_NAME,
            ttl=settings.noshow_lock_ttl_seconds,
        )
    return NoShowScheduler(AsyncSessionLocal, settings, run_lock=run_lock)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Starts the no-show scheduler at boot and stops it before connections are
    closed at shutdown.
    """
    logger.info("application_startup", environment=settings.environment)

    if await check_database_connection():
        logger.info("database_connected")
    else:
        # The scheduler still starts; each run retries the connection
        logger.error("database_connection_failed")

    if settings.noshow_distributed_lock:
        if await check_redis_connection():
            logger.info("redis_connected")
        else:
            logger.error("redis_connection_failed", run_lock="fails_open")

    scheduler = build_scheduler()
    app.state.no_show_scheduler = scheduler
    if settings.noshow_scheduler_enabled:
        await scheduler.start()
    else:
        logger.info("no_show_scheduler_disabled")

    yield

    logger.info("application_shutdown")

    await scheduler.stop()

    await engine.dispose()
    logger.info("database_connections_closed")

    close_redis_connection()
    logger.info("redis_connection_closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Automatic no-show reconciliation for urology appointments and investigations",
    # Interactive docs are not served in production
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, general_exception_handler)  # type: ignore[arg-type]

app.include_router(api_router, prefix=settings.api_v1_prefix)

# HTTP metrics; the no-show job's own metrics share the default registry
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    excluded_handlers=["/docs", "/redoc", "/openapi.json", "/metrics"],
).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Service banner."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "noshow.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )

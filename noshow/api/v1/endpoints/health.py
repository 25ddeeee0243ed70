"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from noshow.config import settings
from noshow.core.redis_client import check_redis_connection
from noshow.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Detailed health check response model."""

    database: str
    redis: str
    scheduler: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check(request: Request) -> DetailedHealthResponse:
    """
    Detailed health check with database, Redis and scheduler status.

    Redis only counts against overall health when the distributed run lock
    is enabled.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    scheduler = getattr(request.app.state, "no_show_scheduler", None)
    if scheduler is None or not scheduler.is_started:
        scheduler_state = "stopped"
    elif scheduler.last_error:
        scheduler_state = "degraded"
    else:
        scheduler_state = "running"

    healthy = db_healthy and (redis_healthy or not settings.noshow_distributed_lock)
    return DetailedHealthResponse(
        status="healthy" if healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
        scheduler=scheduler_state,
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    """Simple ping endpoint."""
    return {"message": "pong"}

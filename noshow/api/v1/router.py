"""API v1 router configuration."""

from fastapi import APIRouter

from noshow.api.v1.endpoints import health, no_show

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(no_show.router, tags=["No-Show"])

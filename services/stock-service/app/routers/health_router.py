"""
Health check and monitoring router.

Provides endpoints for liveness and readiness probes.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = "stock-service"
    version: str = __version__


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc).isoformat())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if service is ready to accept traffic (store and cache reachable)",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(request: Request):
    """
    Readiness check.

    Returns 200 if both the database and Redis answer, 503 otherwise.
    """
    checks = {
        "database": "healthy" if await request.app.state.database.health_check() else "unhealthy",
        "redis": "healthy" if await request.app.state.redis_manager.health_check() else "unhealthy",
    }
    all_ready = all(check == "healthy" for check in checks.values())

    response = ReadinessResponse(
        ready=all_ready, checks=checks, timestamp=datetime.now(timezone.utc).isoformat()
    )

    if not all_ready:
        logger.warning("Readiness check failed", checks=checks)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump()
        )

    return response

"""
Health Check Router
===================

Provides health, readiness, and liveness endpoints.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.auth import AuthClient
from athletix.config import Settings
from athletix.dependencies import get_auth_client, get_db, get_settings
from athletix.schemas import HealthResponse, ReadyResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


async def _database_ok(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns status of all dependencies: the database and the auth service.
    The service counts as degraded only when the database is down.
    """
    db_status = "healthy" if await _database_ok(db) else "unhealthy"
    auth_status = "healthy" if await auth.health() else "unavailable"

    overall_status = "healthy" if db_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.api_version,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        auth=auth_status,
        environment=settings.environment,
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> ReadyResponse:
    """
    Kubernetes readiness probe.

    Returns true only if all critical dependencies are available.
    """
    checks = {"database": await _database_ok(db)}
    return ReadyResponse(ready=all(checks.values()), checks=checks)


@router.get("/live")
async def liveness_check() -> dict:
    """Kubernetes liveness probe."""
    return {"alive": True}

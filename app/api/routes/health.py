"""Health check endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from app.core.exceptions import AppException
from app.core.logging import get_logger
from app.database.connection import db_healthcheck
from app.schemas.common import HealthResponse


router = APIRouter(prefix="/health")

logger = get_logger("health")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness of the API process.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", ts=datetime.now(UTC))


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check that the database answers.",
)
async def readiness_check() -> dict:
    """
    Kubernetes-style readiness probe.

    Returns 200 if the database is reachable, 503 otherwise.
    """
    if not await db_healthcheck():
        raise AppException("Database not ready", status_code=503)
    return {"status": "ready"}

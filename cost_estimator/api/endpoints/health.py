"""
Health Check Endpoints
======================
Liveness and readiness probes.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator import __version__
from cost_estimator.core.tokenizer import get_token_counter
from cost_estimator.database import get_session

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str
    database: str
    tokenizer: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Liveness probe endpoint.
    Returns OK if the service is running.
    """
    return HealthResponse(status="ok", version=__version__)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    session: AsyncSession = Depends(get_session),
) -> ReadinessResponse:
    """
    Readiness probe endpoint.
    Checks database connectivity and whether exact token counting is available.
    """
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        db_status = "disconnected"

    tokenizer = "estimate" if get_token_counter().uses_fallback else "exact"

    return ReadinessResponse(
        status="ok" if db_status == "connected" else "degraded",
        database=db_status,
        tokenizer=tokenizer,
        version=__version__,
    )

"""
Health Check Endpoints
======================
Liveness, and readiness covering the database and the usage queue.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gateway import __version__
from gateway.api.dependencies import get_usage_sink
from gateway.database import get_session
from gateway.services.gateway import UsageSink

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str


class ReadinessResponse(BaseModel):
    status: str
    version: str
    database: str
    usage_queue_pending: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    session: Annotated[AsyncSession, Depends(get_session)],
    usage_sink: Annotated[UsageSink, Depends(get_usage_sink)],
) -> ReadinessResponse:
    """
    Report whether the gateway can admit requests.

    Admission reads the ledger, so an unreachable database degrades the
    gateway. The usage queue depth is informational: a growing backlog means
    usage writes are falling behind, not that requests will fail.
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        database = "disconnected"

    return ReadinessResponse(
        status="ok" if database == "connected" else "degraded",
        version=__version__,
        database=database,
        usage_queue_pending=getattr(usage_sink, "pending", None),
    )

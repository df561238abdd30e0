"""
Health endpoints.

`/health` answers as long as the process is up. `/ready` additionally
requires a reachable database and an initialized game config, since every
game operation needs both.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.db.database import get_session
from menagerie.db.operations import get_game_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    database: str
    game_initialized: bool = False


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ReadinessResponse:
    """
    Readiness probe.

    Returns 503 while the database is unreachable or the game has not been
    initialized.
    """
    try:
        config = await get_game_config(session)
    except SQLAlchemyError as e:
        logger.error("Readiness check failed: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not ready", database="disconnected")

    if config is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not ready", database="connected")
    return ReadinessResponse(status="ready", database="connected", game_initialized=True)

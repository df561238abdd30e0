"""
Match result endpoint. Only the game authority reports results.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.api.dependencies import Caller
from menagerie.db.database import get_session
from menagerie.services.match_engine import record_match

router = APIRouter(prefix="/matches", tags=["matches"])


class MatchRequest(BaseModel):
    winner: str
    loser: str


class MatchResponse(BaseModel):
    """Response model for a settled match."""

    winner: str
    loser: str
    trophy_gain: int
    trophy_loss: int
    winner_trophies: int
    loser_trophies: int
    winner_streak: int
    reward: int


@router.post("", response_model=MatchResponse)
async def report_match(
    request: MatchRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MatchResponse:
    """
    Record a finished match.

    Returns 403 unless the caller is the game authority.
    """
    result = await record_match(session, caller, request.winner, request.loser)
    return MatchResponse(
        winner=result.winner,
        loser=result.loser,
        trophy_gain=result.trophy_gain,
        trophy_loss=result.trophy_loss,
        winner_trophies=result.winner_trophies,
        loser_trophies=result.loser_trophies,
        winner_streak=result.winner_streak,
        reward=result.reward,
    )

"""
Match Engine: trophy, streak and reward settlement.

The authority reports a finished match; this module settles it:

    winner: streak + 1, trophies + (30 + new streak), wins + 1, currency + 100
    loser:  streak = 0, trophies - 30 (floored at zero), losses + 1

Every new value is computed before either profile is touched, so an
overflow on any field leaves both records exactly as they were.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.config import BASE_TROPHY_GAIN, TROPHY_LOSS, WIN_REWARD
from menagerie.db.operations import require_game_config, require_profile
from menagerie.models.failure import ErrorCode, ValidationError
from menagerie.models.numeric import U32_MAX, checked_add, saturating_sub
from menagerie.services.catalog import require_authority

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Settled outcome of one match."""

    winner: str
    loser: str
    trophy_gain: int
    trophy_loss: int
    winner_trophies: int
    loser_trophies: int
    winner_streak: int
    reward: int


def trophy_gain_for_streak(streak: int) -> int:
    """Trophies awarded for a win that brings the streak to `streak`."""
    return checked_add(BASE_TROPHY_GAIN, streak, U32_MAX)


async def record_match(
    session: AsyncSession, caller: str, winner: str, loser: str
) -> MatchResult:
    """
    Record a match result. Authority only.

    Raises:
        ValidationError: If winner and loser are the same player.
        AuthorizationError: If the caller is not the authority.
        NotFoundError: If either profile is missing.
        NumericalOverflowError: If any counter would overflow.
    """
    if winner == loser:
        raise ValidationError(ErrorCode.INVALID_MATCH, "Winner and loser must be different players")

    config = await require_game_config(session)
    require_authority(config, caller)

    winner_profile = await require_profile(session, winner)
    loser_profile = await require_profile(session, loser)

    streak = checked_add(winner_profile.win_streak, 1, U32_MAX)
    gain = trophy_gain_for_streak(streak)
    winner_trophies = checked_add(winner_profile.trophies, gain, U32_MAX)
    wins = checked_add(winner_profile.total_wins, 1, U32_MAX)
    balance = checked_add(winner_profile.currency_balance, WIN_REWARD)

    loser_trophies = saturating_sub(loser_profile.trophies, TROPHY_LOSS)
    losses = checked_add(loser_profile.total_losses, 1, U32_MAX)

    winner_profile.win_streak = streak
    winner_profile.trophies = winner_trophies
    winner_profile.total_wins = wins
    winner_profile.currency_balance = balance

    loser_profile.trophies = loser_trophies
    loser_profile.win_streak = 0
    loser_profile.total_losses = losses

    logger.info(
        "Match recorded: %s beat %s. Winner +%d trophies (streak %d), loser now %d",
        winner,
        loser,
        gain,
        streak,
        loser_trophies,
    )
    return MatchResult(
        winner=winner,
        loser=loser,
        trophy_gain=gain,
        trophy_loss=TROPHY_LOSS,
        winner_trophies=winner_trophies,
        loser_trophies=loser_trophies,
        winner_streak=streak,
        reward=WIN_REWARD,
    )

"""
Player endpoints.

Registration, the ledger operations a player performs on their own profile,
and read access to profiles, owned cards, saved decks and the leaderboard.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.api.dependencies import Caller, TokenTransferDep
from menagerie.api.schemas import CardResponse, DeckResponse, card_response, deck_response
from menagerie.db import (
    card_to_model,
    get_leaderboard,
    list_cards_by_owner,
    profile_to_model,
    require_profile,
)
from menagerie.db.database import get_session
from menagerie.models.db import PlayerProfileDB
from menagerie.services.decks import list_decks
from menagerie.services.ledger import (
    add_gacha_tickets,
    buy_currency,
    buy_tickets,
    claim_starter_tickets,
    register_player,
)

router = APIRouter(prefix="/players", tags=["players"])


class RegisterRequest(BaseModel):
    username: str = Field(..., description="Display name, at most 32 bytes")


class ProfileResponse(BaseModel):
    """Response model for a player profile."""

    owner: str
    username: str
    has_claimed_starter_pack: bool
    gacha_tickets: int
    currency_balance: int
    trophies: int
    total_wins: int
    total_losses: int
    win_streak: int


class BuyCurrencyRequest(BaseModel):
    external_amount: int = Field(..., description="External units to exchange")


class BuyCurrencyResponse(BaseModel):
    profile: ProfileResponse
    credited: int


class BuyTicketsRequest(BaseModel):
    ticket_count: int


class GrantTicketsRequest(BaseModel):
    amount: int


class CardListResponse(BaseModel):
    owner: str
    cards: list[CardResponse]
    count: int


class DeckListResponse(BaseModel):
    owner: str
    decks: list[DeckResponse]


class LeaderboardResponse(BaseModel):
    players: list[ProfileResponse]
    count: int


def _profile_response(db_profile: PlayerProfileDB) -> ProfileResponse:
    profile = profile_to_model(db_profile)
    return ProfileResponse(
        owner=profile.owner,
        username=profile.username,
        has_claimed_starter_pack=profile.has_claimed_starter_pack,
        gacha_tickets=profile.gacha_tickets,
        currency_balance=profile.currency_balance,
        trophies=profile.trophies,
        total_wins=profile.total_wins,
        total_losses=profile.total_losses,
        win_streak=profile.win_streak,
    )


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProfileResponse:
    """
    Register the caller as a player.

    Returns 409 if the caller already has a profile.
    """
    profile = await register_player(session, caller, request.username)
    return _profile_response(profile)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> LeaderboardResponse:
    """Players ordered by trophies, then wins."""
    players = [_profile_response(p) for p in await get_leaderboard(session, limit=limit)]
    return LeaderboardResponse(players=players, count=len(players))


@router.post("/me/starter", response_model=ProfileResponse)
async def claim_starter(
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProfileResponse:
    """Claim the free starter tickets. Returns 409 on a second claim."""
    profile = await claim_starter_tickets(session, caller)
    return _profile_response(profile)


@router.post("/me/currency", response_model=BuyCurrencyResponse)
async def purchase_currency(
    request: BuyCurrencyRequest,
    caller: Caller,
    token_transfer: TokenTransferDep,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BuyCurrencyResponse:
    """
    Exchange external value for in-game currency.

    The external transfer happens first; returns 502 if it fails.
    """
    profile, credited = await buy_currency(
        session, caller, request.external_amount, token_transfer
    )
    return BuyCurrencyResponse(profile=_profile_response(profile), credited=credited)


@router.post("/me/tickets", response_model=ProfileResponse)
async def purchase_tickets(
    request: BuyTicketsRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProfileResponse:
    """Buy gacha tickets with currency."""
    profile = await buy_tickets(session, caller, request.ticket_count)
    return _profile_response(profile)


@router.get("/{owner}", response_model=ProfileResponse)
async def get_player(
    owner: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProfileResponse:
    """Get a player profile. Returns 404 if the player is not registered."""
    profile = await require_profile(session, owner)
    return _profile_response(profile)


@router.post("/{owner}/tickets", response_model=ProfileResponse)
async def grant_tickets(
    owner: str,
    request: GrantTicketsRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProfileResponse:
    """Grant tickets to a player. Authority only."""
    profile = await add_gacha_tickets(session, caller, owner, request.amount)
    return _profile_response(profile)


@router.get("/{owner}/cards", response_model=CardListResponse)
async def get_player_cards(
    owner: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardListResponse:
    """Cards owned by a player, including ones held in marketplace escrow."""
    cards = [card_response(card_to_model(c)) for c in await list_cards_by_owner(session, owner)]
    return CardListResponse(owner=owner, cards=cards, count=len(cards))


@router.get("/{owner}/decks", response_model=DeckListResponse)
async def get_player_decks(
    owner: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """Saved deck slots for a player."""
    decks = [deck_response(d) for d in await list_decks(session, owner)]
    return DeckListResponse(owner=owner, decks=decks)

"""
Deck API endpoints.

Save, clear and list the caller's deck slots.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.api.dependencies import Caller
from menagerie.api.schemas import DeckResponse, deck_response
from menagerie.db.database import get_session
from menagerie.services.decks import delete_deck, list_decks, save_deck

router = APIRouter(prefix="/decks", tags=["decks"])


class SaveDeckRequest(BaseModel):
    """Request model for saving a deck slot."""

    deck_name: str = Field(..., description="Deck name, at most 32 bytes")
    card_refs: list[str] = Field(
        default_factory=list,
        description="Token references of the caller's cards, at most 10",
    )


class DeckListResponse(BaseModel):
    decks: list[DeckResponse]


@router.get("", response_model=DeckListResponse)
async def get_my_decks(
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """The caller's saved deck slots."""
    decks = [deck_response(d) for d in await list_decks(session, caller)]
    return DeckListResponse(decks=decks)


@router.put("/{deck_index}", response_model=DeckResponse)
async def put_deck(
    deck_index: int,
    request: SaveDeckRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Save a deck into a slot, overwriting it.

    Returns 400 for a bad slot or too many cards and 403 if a card belongs
    to someone else.
    """
    deck = await save_deck(session, caller, deck_index, request.deck_name, request.card_refs)
    return deck_response(deck)


@router.delete("/{deck_index}", response_model=DeckResponse)
async def remove_deck(
    deck_index: int,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Clear a deck slot. Returns 404 if the slot was never saved."""
    deck = await delete_deck(session, caller, deck_index)
    return deck_response(deck)

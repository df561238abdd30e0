"""
Gacha endpoints: rarity rolls, single draws and pack purchases.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.api.dependencies import Caller, ClockDep, MintDep
from menagerie.api.schemas import CardResponse, DrawResponse, card_response
from menagerie.db.database import get_session
from menagerie.models.card import Rarity
from menagerie.services.ledger import gacha_draw, purchase_pack, roll_gacha

router = APIRouter(prefix="/gacha", tags=["gacha"])


class RollResponse(BaseModel):
    rarity: Rarity
    card_type_id: int


class DrawRequest(BaseModel):
    card_type_id: int = Field(..., description="Card type to draw, normally from /gacha/roll")


class PackResponse(BaseModel):
    cards: list[DrawResponse]
    count: int


@router.post("/roll", response_model=RollResponse)
async def roll(
    caller: Caller,
    clock: ClockDep,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RollResponse:
    """
    Roll a rarity and card type. Spends nothing.

    Returns 409 if the rolled tier has no card types.
    """
    result = await roll_gacha(session, caller, clock)
    return RollResponse(rarity=result.rarity, card_type_id=result.card_type_id)


@router.post("/draw", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def draw(
    request: DrawRequest,
    caller: Caller,
    clock: ClockDep,
    mint_service: MintDep,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Spend one ticket to draw and mint a card of the given type."""
    card = await gacha_draw(session, caller, request.card_type_id, clock, mint_service)
    return card_response(card)


@router.post("/pack", response_model=PackResponse, status_code=status.HTTP_201_CREATED)
async def pack(
    caller: Caller,
    clock: ClockDep,
    mint_service: MintDep,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PackResponse:
    """Buy a pack with currency. Every card in the pack is minted to the caller."""
    results = await purchase_pack(session, caller, clock, mint_service)
    cards = [
        DrawResponse(
            rarity=r.rarity,
            card_type_id=r.card_type_id,
            attack=r.attack,
            health=r.health,
            token_ref=r.token_ref,
        )
        for r in results
    ]
    return PackResponse(cards=cards, count=len(cards))

"""
Marketplace endpoints.

A listing is keyed by the card's token reference, so every listing route
takes the card reference in its path.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.api.dependencies import Caller, ClockDep
from menagerie.api.schemas import ListingResponse, listing_response
from menagerie.db import list_active_listings, require_listing
from menagerie.db.database import get_session
from menagerie.services.marketplace import (
    buy_card,
    cancel_listing,
    list_card,
    listing_to_model,
)

router = APIRouter(prefix="/market", tags=["market"])


class CreateListingRequest(BaseModel):
    card_ref: str
    price: int


class ListingListResponse(BaseModel):
    listings: list[ListingResponse]
    count: int


class SaleResponse(BaseModel):
    """Settlement of a sale. The fee is burned."""

    listing: ListingResponse
    buyer: str
    price: int
    fee: int
    seller_amount: int


@router.post("/listings", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    request: CreateListingRequest,
    caller: Caller,
    clock: ClockDep,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ListingResponse:
    """List one of the caller's cards. The card moves into escrow."""
    listing = await list_card(session, caller, request.card_ref, request.price, clock)
    return listing_response(listing)


@router.get("/listings", response_model=ListingListResponse)
async def get_listings(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> ListingListResponse:
    """Active listings, newest first."""
    listings = [
        listing_response(listing_to_model(db))
        for db in await list_active_listings(session, limit=limit)
    ]
    return ListingListResponse(listings=listings, count=len(listings))


@router.get("/listings/{card_ref}", response_model=ListingResponse)
async def get_listing(
    card_ref: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ListingResponse:
    """Get the listing for a card. Returns 404 if the card is not listed."""
    db_listing = await require_listing(session, card_ref)
    return listing_response(listing_to_model(db_listing))


@router.delete("/listings/{card_ref}", response_model=ListingResponse)
async def delete_listing(
    card_ref: str,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ListingResponse:
    """Cancel a listing. Seller only; the card returns to the seller."""
    listing = await cancel_listing(session, caller, card_ref)
    return listing_response(listing)


@router.post("/listings/{card_ref}/buy", response_model=SaleResponse)
async def buy_listing(
    card_ref: str,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SaleResponse:
    """Buy a listed card with currency."""
    receipt = await buy_card(session, caller, card_ref)
    return SaleResponse(
        listing=listing_response(receipt.listing),
        buyer=receipt.buyer,
        price=receipt.price,
        fee=receipt.fee,
        seller_amount=receipt.seller_amount,
    )

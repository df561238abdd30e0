"""
Marketplace Escrow: list, cancel and buy.

A listing moves the card into escrow custody: the card's owner field keeps
the seller, but only the listing can release it. Every listing resolves to
exactly one terminal state:

    ACTIVE --cancel--> CANCELLED   (card returns to the seller)
    ACTIVE --buy-----> SOLD        (card and owner move to the buyer)

The listing record is deleted on either transition, and its storage deposit
is refunded to the original seller.

INVARIANTS:
- At most one listing per card (the card reference is the listing key)
- Card custody and currency move in the same transaction or not at all
- The fee is floor(price * 25 / 1000) and is burned
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.config import MARKET_FEE_DENOMINATOR, MARKET_FEE_NUMERATOR
from menagerie.db.addressing import listing_address
from menagerie.db.operations import (
    get_listing,
    insert_record,
    require_card,
    require_listing,
    require_profile,
)
from menagerie.models.db import ListingDB
from menagerie.models.failure import (
    AuthorizationError,
    DuplicateRecordError,
    ErrorCode,
    StateError,
    ValidationError,
)
from menagerie.models.listing import Listing, ListingState, SaleReceipt
from menagerie.models.numeric import U64_MAX, checked_add, checked_sub
from menagerie.services.randomness import Clock

logger = logging.getLogger(__name__)


def calculate_fee(price: int) -> int:
    """Platform fee on a sale: floor(price * 25 / 1000)."""
    # Intermediate product may exceed u64; the fee itself never exceeds price
    return price * MARKET_FEE_NUMERATOR // MARKET_FEE_DENOMINATOR


def listing_to_model(
    db_listing: ListingDB,
    state: ListingState = ListingState.ACTIVE,
    deposit_refund_to: str | None = None,
) -> Listing:
    """Convert a database listing to a domain model."""
    return Listing(
        address=db_listing.address,
        seller=db_listing.seller,
        card_ref=db_listing.card_ref,
        price=db_listing.price,
        state=state,
        created_at=db_listing.created_at,
        deposit_refund_to=deposit_refund_to,
    )


def _require_active(listing: ListingDB) -> None:
    if not listing.is_active:
        raise StateError(ErrorCode.LISTING_NOT_ACTIVE, "Listing is not active")


async def list_card(
    session: AsyncSession,
    seller: str,
    card_ref: str,
    price: int,
    clock: Clock,
) -> Listing:
    """
    List a card for sale, moving it into escrow.

    Raises:
        ValidationError: If the price is zero.
        DuplicateRecordError: If the card is already listed.
        AuthorizationError: If the seller does not hold the card.
    """
    if price <= 0 or price > U64_MAX:
        raise ValidationError(ErrorCode.INVALID_PRICE, "Invalid price (must be greater than 0)")

    await require_profile(session, seller)
    card = await require_card(session, card_ref)

    if await get_listing(session, card_ref) is not None:
        raise DuplicateRecordError("Listing", card_ref)
    if card.owner != seller or card.escrow_listing is not None:
        logger.warning("Rejected listing of %s by non-holder %s", card_ref, seller)
        raise AuthorizationError("Seller does not hold this card")

    db_listing = ListingDB(
        address=listing_address(card_ref),
        seller=seller,
        card_ref=card_ref,
        price=price,
        is_active=True,
        created_at=clock.unix_timestamp(),
    )
    await insert_record(session, db_listing, "Listing", card_ref)
    card.escrow_listing = db_listing.address

    logger.info("Card listed: token=%s price=%d seller=%s", card_ref, price, seller)
    return listing_to_model(db_listing)


async def cancel_listing(session: AsyncSession, seller: str, card_ref: str) -> Listing:
    """
    Cancel an active listing and return the card to its seller.

    Raises:
        NotFoundError: If the card has no listing.
        StateError: If the listing is not active.
        AuthorizationError: If the caller is not the recorded seller.
    """
    db_listing = await require_listing(session, card_ref)
    _require_active(db_listing)
    if db_listing.seller != seller:
        logger.warning("Rejected cancel of %s by non-seller %s", card_ref, seller)
        raise AuthorizationError("Only the seller can cancel this listing")

    card = await require_card(session, card_ref)
    card.escrow_listing = None

    closed = listing_to_model(
        db_listing, state=ListingState.CANCELLED, deposit_refund_to=db_listing.seller
    )
    await session.delete(db_listing)
    await session.flush()

    logger.info("Listing cancelled: token=%s", card_ref)
    return closed


async def buy_card(session: AsyncSession, buyer: str, card_ref: str) -> SaleReceipt:
    """
    Buy a listed card with currency.

    The buyer pays the full price; the seller receives the price minus the
    fee; the fee is burned.

    Raises:
        NotFoundError: If the card has no listing or a profile is missing.
        StateError: If the listing is not active, the buyer is the seller,
            or the buyer cannot afford the price.
        NumericalOverflowError: If the seller's balance would overflow.
    """
    db_listing = await require_listing(session, card_ref)
    _require_active(db_listing)
    if buyer == db_listing.seller:
        raise StateError(ErrorCode.CANNOT_BUY_OWN_CARD, "Cannot buy your own card")

    buyer_profile = await require_profile(session, buyer)
    seller_profile = await require_profile(session, db_listing.seller)
    card = await require_card(session, card_ref)

    price = db_listing.price
    if buyer_profile.currency_balance < price:
        raise StateError(
            ErrorCode.INSUFFICIENT_BALANCE,
            f"Insufficient balance: need {price}, have {buyer_profile.currency_balance}",
        )

    fee = calculate_fee(price)
    seller_amount = checked_sub(price, fee)
    buyer_balance = checked_sub(buyer_profile.currency_balance, price)
    seller_balance = checked_add(seller_profile.currency_balance, seller_amount)

    buyer_profile.currency_balance = buyer_balance
    seller_profile.currency_balance = seller_balance
    card.owner = buyer
    card.escrow_listing = None

    closed = listing_to_model(
        db_listing, state=ListingState.SOLD, deposit_refund_to=db_listing.seller
    )
    await session.delete(db_listing)
    await session.flush()

    logger.info(
        "Card sold: token=%s price=%d fee=%d seller=%s buyer=%s",
        card_ref,
        price,
        fee,
        closed.seller,
        buyer,
    )
    return SaleReceipt(
        listing=closed,
        buyer=buyer,
        price=price,
        fee=fee,
        seller_amount=seller_amount,
    )

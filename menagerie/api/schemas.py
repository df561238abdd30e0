"""Response models shared by several routers."""

from pydantic import BaseModel, Field

from menagerie.models.card import CardInstance, InEscrow, Rarity
from menagerie.models.deck import PlayerDeck
from menagerie.models.listing import Listing, ListingState


class CardResponse(BaseModel):
    """Response model for a card instance."""

    token_ref: str
    card_type_id: int
    attack: int
    health: int
    owner: str
    in_escrow: bool = False
    escrow_listing: str | None = Field(
        default=None,
        description="Listing address holding the card, if it is in escrow",
    )


class DrawResponse(BaseModel):
    """Response model for one drawn card."""

    rarity: Rarity
    card_type_id: int
    attack: int
    health: int
    token_ref: str | None = None


class DeckResponse(BaseModel):
    """Response model for a deck slot."""

    owner: str
    deck_index: int
    deck_name: str
    card_refs: list[str] = Field(default_factory=list)
    is_active: bool


class ListingResponse(BaseModel):
    """Response model for a marketplace listing."""

    address: str
    seller: str
    card_ref: str
    price: int
    state: ListingState
    created_at: int
    deposit_refund_to: str | None = None


def card_response(card: CardInstance) -> CardResponse:
    escrow_listing = card.location.listing_address if isinstance(card.location, InEscrow) else None
    return CardResponse(
        token_ref=card.token_ref,
        card_type_id=card.card_type_id,
        attack=card.attack,
        health=card.health,
        owner=card.owner,
        in_escrow=card.in_escrow,
        escrow_listing=escrow_listing,
    )


def deck_response(deck: PlayerDeck) -> DeckResponse:
    return DeckResponse(
        owner=deck.owner,
        deck_index=deck.deck_index,
        deck_name=deck.deck_name,
        card_refs=list(deck.card_refs),
        is_active=deck.is_active,
    )


def listing_response(listing: Listing) -> ListingResponse:
    return ListingResponse(
        address=listing.address,
        seller=listing.seller,
        card_ref=listing.card_ref,
        price=listing.price,
        state=listing.state,
        created_at=listing.created_at,
        deposit_refund_to=listing.deposit_refund_to,
    )

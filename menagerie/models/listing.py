from dataclasses import dataclass
from enum import Enum


class ListingState(str, Enum):
    """Listing lifecycle. SOLD and CANCELLED are terminal."""

    ACTIVE = "active"
    SOLD = "sold"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class Listing:
    """
    A marketplace listing.

    Attributes:
        address: Listing record address (also the escrow custody id)
        seller: Seller identity
        card_ref: Token reference of the listed card
        price: Asking price in currency
        state: Lifecycle state
        created_at: Unix timestamp of listing creation
        deposit_refund_to: Who receives the escrow storage refund once the
            listing is closed (None while active)
    """

    address: str
    seller: str
    card_ref: str
    price: int
    state: ListingState
    created_at: int
    deposit_refund_to: str | None = None

    @property
    def is_active(self) -> bool:
        return self.state == ListingState.ACTIVE


@dataclass(frozen=True, slots=True)
class SaleReceipt:
    """Settlement of a completed sale. The fee is burned."""

    listing: Listing
    buyer: str
    price: int
    fee: int
    seller_amount: int

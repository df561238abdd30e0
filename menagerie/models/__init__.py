from menagerie.models.capped_set import CapacityExceededError, CappedOrderedSet
from menagerie.models.card import (
    CardInstance,
    CardTemplate,
    DrawResult,
    InEscrow,
    Location,
    Rarity,
    StatRange,
    TraitType,
    WithOwner,
)
from menagerie.models.deck import PlayerDeck
from menagerie.models.failure import (
    AuthorizationError,
    DuplicateRecordError,
    ErrorCategory,
    ErrorCode,
    ErrorDetail,
    ErrorResponse,
    ExternalServiceError,
    GameError,
    NotFoundError,
    NumericalOverflowError,
    StateError,
    ValidationError,
)
from menagerie.models.listing import Listing, ListingState, SaleReceipt
from menagerie.models.numeric import (
    U16_MAX,
    U32_MAX,
    U64_MAX,
    checked_add,
    checked_mul,
    checked_sub,
    saturating_sub,
)
from menagerie.models.player import PlayerProfile
from menagerie.models.rarity_pool import RarityPool

__all__ = [
    "AuthorizationError",
    "CapacityExceededError",
    "CappedOrderedSet",
    "CardInstance",
    "CardTemplate",
    "DrawResult",
    "DuplicateRecordError",
    "ErrorCategory",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "ExternalServiceError",
    "GameError",
    "InEscrow",
    "Listing",
    "ListingState",
    "Location",
    "NotFoundError",
    "NumericalOverflowError",
    "PlayerDeck",
    "PlayerProfile",
    "Rarity",
    "RarityPool",
    "SaleReceipt",
    "StateError",
    "StatRange",
    "TraitType",
    "U16_MAX",
    "U32_MAX",
    "U64_MAX",
    "ValidationError",
    "WithOwner",
    "checked_add",
    "checked_mul",
    "checked_sub",
    "saturating_sub",
]

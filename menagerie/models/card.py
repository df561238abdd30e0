from dataclasses import dataclass
from enum import Enum

from menagerie.models.failure import ErrorCode, ValidationError


class TraitType(str, Enum):
    """Combat trait of a card type."""

    WARRIOR = "warrior"
    ARCHER = "archer"
    ASSASSIN = "assassin"


class Rarity(str, Enum):
    """Rarity tier, in draw-band order."""

    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"

    @property
    def discriminant(self) -> int:
        """Stable numeric tag used in record addresses."""
        return _RARITY_ORDER.index(self)

    @classmethod
    def from_discriminant(cls, value: int) -> "Rarity":
        """
        Convert a numeric tag back to a Rarity.

        Raises:
            ValidationError: If the tag is not 0, 1 or 2.
        """
        if not 0 <= value < len(_RARITY_ORDER):
            raise ValidationError(ErrorCode.INVALID_RARITY, f"Invalid rarity discriminant: {value}")
        return _RARITY_ORDER[value]


_RARITY_ORDER: tuple[Rarity, ...] = (Rarity.COMMON, Rarity.RARE, Rarity.LEGENDARY)


@dataclass(frozen=True, slots=True)
class StatRange:
    """Inclusive [minimum, maximum] range for a rolled stat."""

    minimum: int
    maximum: int

    @property
    def width(self) -> int:
        """Number of distinct values in the range."""
        return self.maximum - self.minimum + 1

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.minimum <= value <= self.maximum


@dataclass(frozen=True, slots=True)
class CardTemplate:
    """
    Authoritative definition of a card type.

    Attributes:
        card_type_id: Unique card type id (u32)
        name: Display name (max 32 chars)
        trait_type: Combat trait
        rarity: Rarity tier this card is drawn from
        attack: Attack roll range
        health: Health roll range
        description: Flavor text (max 200 chars)
        image_uri: Artwork reference (max 200 chars)
    """

    card_type_id: int
    name: str
    trait_type: TraitType
    rarity: Rarity
    attack: StatRange
    health: StatRange
    description: str
    image_uri: str = ""


@dataclass(frozen=True, slots=True)
class WithOwner:
    """Card is held by its owner."""

    owner: str


@dataclass(frozen=True, slots=True)
class InEscrow:
    """Card is held by a marketplace listing pending cancel or sale."""

    listing_address: str


Location = WithOwner | InEscrow


@dataclass(frozen=True, slots=True)
class CardInstance:
    """A drawn card with its rolled stats."""

    token_ref: str
    card_type_id: int
    attack: int
    health: int
    owner: str
    location: Location

    @property
    def in_escrow(self) -> bool:
        return isinstance(self.location, InEscrow)


@dataclass(frozen=True, slots=True)
class DrawResult:
    """Outcome of one draw: tier, card type and rolled stats."""

    rarity: Rarity
    card_type_id: int
    attack: int
    health: int
    token_ref: str | None = None

"""
RarityPool: the set of card types eligible for a rarity tier.

Membership is append-only and de-duplicated. The tier is fixed by the first
write to an empty pool.
"""

from dataclasses import dataclass, field

from menagerie.config import MAX_POOL_CARDS
from menagerie.models.capped_set import CappedOrderedSet, CapacityExceededError
from menagerie.models.card import Rarity
from menagerie.models.failure import ErrorCode, StateError, ValidationError


@dataclass
class RarityPool:
    """
    Card type ids drawable at one rarity tier.

    Attributes:
        rarity: Tier this pool serves (None until the first write)
        card_type_ids: Ordered, de-duplicated membership
    """

    rarity: Rarity | None = None
    card_type_ids: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.card_type_ids)

    def __contains__(self, card_type_id: object) -> bool:
        return card_type_id in self.card_type_ids

    def with_cards(self, rarity: Rarity, card_type_ids: list[int]) -> "RarityPool":
        """
        Return a new pool with `card_type_ids` appended.

        The receiver is never modified, so a failed update leaves the stored
        pool untouched.

        Raises:
            ValidationError: If the pool would exceed MAX_POOL_CARDS.
        """
        tier = rarity if not self.card_type_ids else self.rarity
        members = CappedOrderedSet.from_iterable(MAX_POOL_CARDS, self.card_type_ids)
        try:
            members.extend(card_type_ids)
        except CapacityExceededError as e:
            raise ValidationError(
                ErrorCode.POOL_FULL,
                f"Rarity pool is limited to {e.capacity} card types",
            ) from e
        return RarityPool(rarity=tier, card_type_ids=[int(i) for i in members])

    def select(self, random_value: int) -> int:
        """
        Pick a card type id using `random_value % len(pool)`.

        Raises:
            StateError: If the pool is empty.
        """
        if not self.card_type_ids:
            raise StateError(ErrorCode.EMPTY_RARITY_POOL, "Rarity pool is empty")
        return self.card_type_ids[random_value % len(self.card_type_ids)]

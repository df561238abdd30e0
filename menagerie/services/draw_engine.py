"""
Draw Engine: rarity sampling and stat rolling.

Turns a derived random u64 into:
1. a rarity tier, using cumulative probability bands over `value % 100`
2. a card type, using `value % len(pool)` within that tier
3. attack and health rolls, using disjoint bit ranges of a second value

The engine is pure: pools and templates are passed in, nothing is loaded
or persisted here.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from menagerie.config import PACK_CARD_COUNT, STATS_SALT_OFFSET, settings
from menagerie.models.card import CardTemplate, DrawResult, Rarity, StatRange
from menagerie.models.failure import ErrorCode, NotFoundError, StateError
from menagerie.models.rarity_pool import RarityPool
from menagerie.services.randomness import SeedContext, derive_random_u64

ROLL_MODULUS = 100


@dataclass(frozen=True)
class RarityBands:
    """
    Band widths per tier, in draw order. Widths must sum to 100.

    A roll falls in the first band whose cumulative upper bound exceeds it.
    With the default (70, 27, 3): Common < 70, Rare < 97, else Legendary.
    """

    common: int = 70
    rare: int = 27
    legendary: int = 3

    def __post_init__(self) -> None:
        widths = self.widths()
        if any(width < 0 for _, width in widths):
            raise ValueError("Rarity band widths must be non-negative")
        total = sum(width for _, width in widths)
        if total != ROLL_MODULUS:
            raise ValueError(f"Rarity band widths must sum to {ROLL_MODULUS}, got {total}")

    @classmethod
    def from_settings(cls) -> "RarityBands":
        common, rare, legendary = settings.rarity_bands
        return cls(common=common, rare=rare, legendary=legendary)

    def widths(self) -> tuple[tuple[Rarity, int], ...]:
        return (
            (Rarity.COMMON, self.common),
            (Rarity.RARE, self.rare),
            (Rarity.LEGENDARY, self.legendary),
        )

    def bounds(self) -> tuple[tuple[Rarity, int, int], ...]:
        """Half-open [lower, upper) roll interval for each tier."""
        result = []
        lower = 0
        for rarity, width in self.widths():
            result.append((rarity, lower, lower + width))
            lower += width
        return tuple(result)


def roll_rarity(random_value: int, bands: RarityBands | None = None) -> Rarity:
    """Map a random value to a rarity tier."""
    bands = bands or RarityBands()
    roll = random_value % ROLL_MODULUS
    for rarity, _, upper in bands.bounds():
        if roll < upper:
            return rarity
    # Unreachable while widths sum to ROLL_MODULUS
    raise AssertionError(f"Roll {roll} fell outside every rarity band")


def select_card(pool: RarityPool, random_value: int) -> int:
    """
    Pick a card type id from a pool.

    Raises:
        StateError: If the pool is empty.
    """
    return pool.select(random_value)


def roll_stat(stat_range: StatRange, random_value: int) -> int:
    return stat_range.minimum + random_value % stat_range.width


def roll_stats(template: CardTemplate, random_value: int) -> tuple[int, int]:
    """
    Roll (attack, health) inside the template's ranges.

    Attack uses the low bits of the value; health uses the value shifted
    right by 32 bits.
    """
    attack = roll_stat(template.attack, random_value)
    health = roll_stat(template.health, random_value >> 32)
    return attack, health


@dataclass(frozen=True, slots=True)
class Roll:
    """Rarity and card type chosen for one draw, before stats."""

    rarity: Rarity
    card_type_id: int


class DrawEngine:
    """
    Performs draws against a fixed set of rarity pools.

    Usage:
        engine = DrawEngine(pools, bands=RarityBands())
        roll = engine.roll(context, salt=0)
        result = engine.draw(context, salt=0, templates=templates)
    """

    def __init__(
        self,
        pools: Mapping[Rarity, RarityPool],
        bands: RarityBands | None = None,
    ) -> None:
        self.pools = pools
        self.bands = bands or RarityBands.from_settings()

    def pool_for(self, rarity: Rarity) -> RarityPool:
        return self.pools.get(rarity) or RarityPool()

    def roll(self, context: SeedContext, salt: int) -> Roll:
        """
        Choose a rarity and card type for one draw.

        Raises:
            StateError: If the chosen tier's pool is empty.
        """
        random_value = derive_random_u64(context, salt)
        rarity = roll_rarity(random_value, self.bands)
        try:
            card_type_id = select_card(self.pool_for(rarity), random_value)
        except StateError as e:
            raise StateError(
                ErrorCode.EMPTY_RARITY_POOL,
                f"Rarity pool for {rarity.value} is empty",
            ) from e
        return Roll(rarity=rarity, card_type_id=card_type_id)

    def draw(
        self,
        context: SeedContext,
        salt: int,
        templates: Mapping[int, CardTemplate],
        stats_salt: int | None = None,
    ) -> DrawResult:
        """
        Full draw: rarity, card type and rolled stats.

        Args:
            context: Seed inputs for this transaction
            salt: Salt for the rarity and card roll
            templates: Templates by card type id
            stats_salt: Salt for the stat roll (defaults to salt + STATS_SALT_OFFSET)

        Raises:
            StateError: If the tier's pool is empty.
            NotFoundError: If the chosen card type has no template.
        """
        roll = self.roll(context, salt)
        template = templates.get(roll.card_type_id)
        if template is None:
            raise NotFoundError("CardTemplate", roll.card_type_id)

        if stats_salt is None:
            stats_salt = salt + STATS_SALT_OFFSET
        attack, health = roll_stats(template, derive_random_u64(context, stats_salt))
        return DrawResult(
            rarity=roll.rarity,
            card_type_id=roll.card_type_id,
            attack=attack,
            health=health,
        )

    def draw_pack(
        self,
        context: SeedContext,
        templates: Mapping[int, CardTemplate],
        count: int = PACK_CARD_COUNT,
    ) -> list[DrawResult]:
        """Draw `count` cards, salting slot i with i and i + STATS_SALT_OFFSET."""
        return [
            self.draw(context, salt=i, templates=templates, stats_salt=i + STATS_SALT_OFFSET)
            for i in range(count)
        ]

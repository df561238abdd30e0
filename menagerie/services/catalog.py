"""
Game configuration, card template registry and rarity pools.

All writes here are privileged: the config and pools are authority-only,
templates may also be created by authorized creators.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.config import (
    MAX_CARD_CREATORS,
    MAX_DESCRIPTION_LEN,
    MAX_IMAGE_URI_LEN,
    MAX_TEMPLATE_NAME_LEN,
    PACK_CARD_COUNT,
)
from menagerie.db.addressing import (
    card_template_address,
    game_config_address,
    rarity_pool_address,
)
from menagerie.db.operations import (
    get_rarity_pool,
    insert_record,
    pool_to_model,
    require_game_config,
    template_to_model,
)
from menagerie.models.capped_set import CappedOrderedSet, CapacityExceededError
from menagerie.models.card import CardTemplate, Rarity, TraitType
from menagerie.models.db import CardTemplateDB, GameConfigDB, RarityPoolDB
from menagerie.models.failure import (
    AuthorizationError,
    ErrorCode,
    StateError,
    ValidationError,
)
from menagerie.models.numeric import U16_MAX
from menagerie.models.rarity_pool import RarityPool
from menagerie.services.validation import (
    validate_card_type_id,
    validate_identity,
    validate_non_empty_string,
    validate_positive_amount,
    validate_string_length,
)

logger = logging.getLogger(__name__)


def require_authority(config: GameConfigDB, caller: str) -> None:
    """Raise AuthorizationError unless `caller` is the game authority."""
    if caller != config.authority:
        logger.warning("Rejected authority-only call from %s", caller)
        raise AuthorizationError("Caller is not the game authority")


def is_authorized_creator(config: GameConfigDB, identity: str) -> bool:
    """True for the authority and for members of the creator set."""
    return identity == config.authority or identity in (config.card_creators or [])


# --- Game Config ---


async def initialize_game(
    session: AsyncSession,
    authority: str,
    normal_pack_price: int,
    currency_rate: int,
    ticket_price: int,
) -> GameConfigDB:
    """
    Create the singleton game config.

    Raises:
        DuplicateRecordError: If the game is already initialized.
    """
    validate_identity(authority, "authority")
    validate_positive_amount(normal_pack_price, "pack price")
    validate_positive_amount(currency_rate, "currency rate")
    validate_positive_amount(ticket_price, "ticket price")

    config = GameConfigDB(
        address=game_config_address(),
        authority=authority,
        card_creators=[],
        normal_pack_price=normal_pack_price,
        pack_card_count=PACK_CARD_COUNT,
        currency_rate=currency_rate,
        ticket_price=ticket_price,
    )
    await insert_record(session, config, "GameConfig", "singleton")

    logger.info(
        "Game initialized: authority=%s pack_price=%d rate=%d ticket_price=%d",
        authority,
        normal_pack_price,
        currency_rate,
        ticket_price,
    )
    return config


async def add_card_creator(session: AsyncSession, caller: str, new_creator: str) -> list[str]:
    """
    Add an identity to the authorized-creator set.

    Returns:
        The creator set after the update.

    Raises:
        AuthorizationError: If the caller is not the authority.
        StateError: If the set already holds MAX_CARD_CREATORS members.
    """
    config = await require_game_config(session)
    require_authority(config, caller)
    validate_identity(new_creator, "creator")

    creators = CappedOrderedSet.from_iterable(MAX_CARD_CREATORS, config.card_creators or [])
    try:
        added = creators.add(new_creator)
    except CapacityExceededError as e:
        raise StateError(
            ErrorCode.CARD_CREATORS_FULL,
            f"Card creators list is full ({e.capacity})",
        ) from e

    if added:
        config.card_creators = [str(c) for c in creators]
        logger.info("Added card creator %s (total %d)", new_creator, len(creators))
    return [str(c) for c in creators]


# --- Card Templates ---


def _validate_stat_range(minimum: int, maximum: int, stat: str) -> None:
    if not (0 <= minimum <= U16_MAX and 0 <= maximum <= U16_MAX):
        raise ValidationError(
            ErrorCode.INVALID_STAT_RANGE,
            f"{stat} values must be between 0 and {U16_MAX}",
        )
    if minimum > maximum:
        raise ValidationError(
            ErrorCode.INVALID_STAT_RANGE,
            f"Invalid {stat} range: min {minimum} is greater than max {maximum}",
        )


async def create_card_template(
    session: AsyncSession,
    caller: str,
    card_type_id: int,
    name: str,
    trait_type: TraitType,
    rarity: Rarity,
    min_attack: int,
    max_attack: int,
    min_health: int,
    max_health: int,
    description: str,
    image_uri: str = "",
) -> CardTemplate:
    """
    Register a new card type.

    Raises:
        AuthorizationError: If the caller is neither authority nor creator.
        ValidationError: On inverted stat ranges or bad strings.
        DuplicateRecordError: If the card type id is already registered.
    """
    config = await require_game_config(session)
    if not is_authorized_creator(config, caller):
        logger.warning("Rejected template creation by %s", caller)
        raise AuthorizationError("Caller is not an authorized card creator")

    validate_card_type_id(card_type_id)
    _validate_stat_range(min_attack, max_attack, "attack")
    _validate_stat_range(min_health, max_health, "health")

    validate_non_empty_string(name, "name")
    validate_non_empty_string(description, "description")
    validate_string_length(name, MAX_TEMPLATE_NAME_LEN, "name")
    validate_string_length(description, MAX_DESCRIPTION_LEN, "description")
    validate_string_length(image_uri, MAX_IMAGE_URI_LEN, "image_uri")

    db_template = CardTemplateDB(
        address=card_template_address(card_type_id),
        card_type_id=card_type_id,
        name=name,
        trait_type=trait_type.value,
        rarity=rarity.value,
        min_attack=min_attack,
        max_attack=max_attack,
        min_health=min_health,
        max_health=max_health,
        description=description,
        image_uri=image_uri,
        creator=caller,
    )
    await insert_record(session, db_template, "CardTemplate", card_type_id)

    logger.info(
        "Created card template %s (id=%d, %s, %s) ATK %d-%d HP %d-%d",
        name,
        card_type_id,
        trait_type.value,
        rarity.value,
        min_attack,
        max_attack,
        min_health,
        max_health,
    )
    return template_to_model(db_template)


# --- Rarity Pools ---


async def update_rarity_pool(
    session: AsyncSession,
    caller: str,
    rarity_discriminant: int,
    card_type_ids: list[int],
) -> RarityPool:
    """
    Append card type ids to a rarity pool, creating it on first use.

    Ids already in the pool are skipped. The pool's tier is fixed by its
    first write.

    Raises:
        AuthorizationError: If the caller is not the authority.
        ValidationError: On an invalid discriminant or a full pool.
    """
    config = await require_game_config(session)
    require_authority(config, caller)
    rarity = Rarity.from_discriminant(rarity_discriminant)

    for card_type_id in card_type_ids:
        validate_card_type_id(card_type_id)

    db_pool = await get_rarity_pool(session, rarity)
    current = pool_to_model(db_pool) if db_pool is not None else RarityPool()
    updated = current.with_cards(rarity, card_type_ids)

    if db_pool is None:
        db_pool = RarityPoolDB(
            address=rarity_pool_address(rarity.discriminant),
            rarity=updated.rarity.value if updated.rarity else None,
            card_type_ids=updated.card_type_ids,
        )
        await insert_record(session, db_pool, "RarityPool", rarity.value)
    else:
        db_pool.rarity = updated.rarity.value if updated.rarity else None
        db_pool.card_type_ids = updated.card_type_ids

    logger.info("Updated rarity pool %s: %d card types", rarity.value, len(updated))
    return updated

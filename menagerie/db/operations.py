"""
Record access operations.

Loads and inserts records by deterministic address and converts ORM rows to
domain models. Services call these helpers and never build addresses
themselves.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.db.addressing import (
    card_instance_address,
    card_template_address,
    game_config_address,
    listing_address,
    player_deck_address,
    player_profile_address,
    rarity_pool_address,
)
from menagerie.models.card import (
    CardInstance,
    CardTemplate,
    InEscrow,
    Rarity,
    StatRange,
    TraitType,
    WithOwner,
)
from menagerie.models.db import (
    Base,
    CardInstanceDB,
    CardTemplateDB,
    GameConfigDB,
    ListingDB,
    PlayerDeckDB,
    PlayerProfileDB,
    RarityPoolDB,
)
from menagerie.models.failure import DuplicateRecordError, NotFoundError
from menagerie.models.player import PlayerProfile
from menagerie.models.rarity_pool import RarityPool


async def insert_record(session: AsyncSession, record: Base, label: str, key: object) -> None:
    """
    Insert a record at its address, failing if one already exists.

    Raises:
        DuplicateRecordError: If the address is taken (checked up front and
            again by the primary key constraint on flush).
    """
    model = type(record)
    address = record.address  # type: ignore[attr-defined]
    if await session.get(model, address) is not None:
        raise DuplicateRecordError(label, key)

    session.add(record)
    try:
        await session.flush()
    except IntegrityError as e:
        raise DuplicateRecordError(label, key) from e


# --- Game Config ---


async def get_game_config(session: AsyncSession) -> GameConfigDB | None:
    """Get the singleton game config, or None before initialization."""
    return await session.get(GameConfigDB, game_config_address())


async def require_game_config(session: AsyncSession) -> GameConfigDB:
    config = await get_game_config(session)
    if config is None:
        raise NotFoundError("GameConfig", "singleton")
    return config


# --- Card Templates ---


async def get_template(session: AsyncSession, card_type_id: int) -> CardTemplateDB | None:
    return await session.get(CardTemplateDB, card_template_address(card_type_id))


async def require_template(session: AsyncSession, card_type_id: int) -> CardTemplateDB:
    template = await get_template(session, card_type_id)
    if template is None:
        raise NotFoundError("CardTemplate", card_type_id)
    return template


async def list_templates(
    session: AsyncSession, rarity: Rarity | None = None
) -> list[CardTemplateDB]:
    """List templates ordered by card type id, optionally for one rarity."""
    query = select(CardTemplateDB).order_by(CardTemplateDB.card_type_id)
    if rarity is not None:
        query = query.where(CardTemplateDB.rarity == rarity.value)
    result = await session.execute(query)
    return list(result.scalars().all())


def template_to_model(db_template: CardTemplateDB) -> CardTemplate:
    """Convert a database template to a domain model."""
    return CardTemplate(
        card_type_id=db_template.card_type_id,
        name=db_template.name,
        trait_type=TraitType(db_template.trait_type),
        rarity=Rarity(db_template.rarity),
        attack=StatRange(db_template.min_attack, db_template.max_attack),
        health=StatRange(db_template.min_health, db_template.max_health),
        description=db_template.description,
        image_uri=db_template.image_uri,
    )


# --- Rarity Pools ---


async def get_rarity_pool(session: AsyncSession, rarity: Rarity) -> RarityPoolDB | None:
    return await session.get(RarityPoolDB, rarity_pool_address(rarity.discriminant))


async def load_rarity_pool(session: AsyncSession, rarity: Rarity) -> RarityPool:
    """Load a pool as a domain model. A missing pool is an empty pool."""
    db_pool = await get_rarity_pool(session, rarity)
    if db_pool is None:
        return RarityPool()
    return pool_to_model(db_pool)


def pool_to_model(db_pool: RarityPoolDB) -> RarityPool:
    return RarityPool(
        rarity=Rarity(db_pool.rarity) if db_pool.rarity else None,
        card_type_ids=[int(i) for i in db_pool.card_type_ids or []],
    )


# --- Player Profiles ---


async def get_profile(session: AsyncSession, owner: str) -> PlayerProfileDB | None:
    return await session.get(PlayerProfileDB, player_profile_address(owner))


async def require_profile(session: AsyncSession, owner: str) -> PlayerProfileDB:
    profile = await get_profile(session, owner)
    if profile is None:
        raise NotFoundError("PlayerProfile", owner)
    return profile


async def get_leaderboard(session: AsyncSession, limit: int = 50) -> list[PlayerProfileDB]:
    """Profiles ordered by trophies (desc), then wins (desc), then username."""
    result = await session.execute(
        select(PlayerProfileDB)
        .order_by(
            PlayerProfileDB.trophies.desc(),
            PlayerProfileDB.total_wins.desc(),
            PlayerProfileDB.username,
        )
        .limit(limit)
    )
    return list(result.scalars().all())


# --- Card Instances ---


async def get_card(session: AsyncSession, token_ref: str) -> CardInstanceDB | None:
    return await session.get(CardInstanceDB, card_instance_address(token_ref))


async def require_card(session: AsyncSession, token_ref: str) -> CardInstanceDB:
    card = await get_card(session, token_ref)
    if card is None:
        raise NotFoundError("CardInstance", token_ref)
    return card


async def list_cards_by_owner(session: AsyncSession, owner: str) -> list[CardInstanceDB]:
    """All cards whose owner field is `owner`, including escrowed ones."""
    result = await session.execute(
        select(CardInstanceDB)
        .where(CardInstanceDB.owner == owner)
        .order_by(CardInstanceDB.created_at, CardInstanceDB.token_ref)
    )
    return list(result.scalars().all())


def card_to_model(db_card: CardInstanceDB) -> CardInstance:
    """Convert a database card to a domain model."""
    location: WithOwner | InEscrow
    if db_card.escrow_listing is None:
        location = WithOwner(db_card.owner)
    else:
        location = InEscrow(db_card.escrow_listing)
    return CardInstance(
        token_ref=db_card.token_ref,
        card_type_id=db_card.card_type_id,
        attack=db_card.attack,
        health=db_card.health,
        owner=db_card.owner,
        location=location,
    )


# --- Decks ---


async def get_deck(session: AsyncSession, owner: str, slot: int) -> PlayerDeckDB | None:
    return await session.get(PlayerDeckDB, player_deck_address(owner, slot))


async def list_decks(session: AsyncSession, owner: str) -> list[PlayerDeckDB]:
    result = await session.execute(
        select(PlayerDeckDB).where(PlayerDeckDB.owner == owner).order_by(PlayerDeckDB.deck_index)
    )
    return list(result.scalars().all())


# --- Listings ---


async def get_listing(session: AsyncSession, token_ref: str) -> ListingDB | None:
    return await session.get(ListingDB, listing_address(token_ref))


async def require_listing(session: AsyncSession, token_ref: str) -> ListingDB:
    listing = await get_listing(session, token_ref)
    if listing is None:
        raise NotFoundError("Listing", token_ref)
    return listing


async def list_active_listings(session: AsyncSession, limit: int = 50) -> list[ListingDB]:
    """Active listings, newest first."""
    result = await session.execute(
        select(ListingDB)
        .where(ListingDB.is_active.is_(True))
        .order_by(ListingDB.created_at.desc(), ListingDB.card_ref)
        .limit(limit)
    )
    return list(result.scalars().all())


def profile_to_model(db_profile: PlayerProfileDB) -> PlayerProfile:
    """Convert a database profile to a domain model."""
    return PlayerProfile(
        owner=db_profile.owner,
        username=db_profile.username,
        has_claimed_starter_pack=db_profile.has_claimed_starter_pack,
        gacha_tickets=db_profile.gacha_tickets,
        currency_balance=db_profile.currency_balance,
        trophies=db_profile.trophies,
        total_wins=db_profile.total_wins,
        total_losses=db_profile.total_losses,
        win_streak=db_profile.win_streak,
    )

"""
SQLAlchemy ORM models for persistent storage.

Every record's primary key is its deterministic address (see
menagerie.db.addressing). String column lengths mirror the protocol bounds
in menagerie.config.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from menagerie.config import (
    MAX_DECK_NAME_LEN,
    MAX_DESCRIPTION_LEN,
    MAX_IDENTITY_LEN,
    MAX_IMAGE_URI_LEN,
    MAX_TEMPLATE_NAME_LEN,
    MAX_USERNAME_LEN,
)

ADDRESS_LEN = 64


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class GameConfigDB(Base):
    """
    Singleton game configuration.

    The authority is fixed at creation; everything else is authority-only.
    """

    __tablename__ = "game_config"

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    authority: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN))
    card_creators: Mapped[list[Any]] = mapped_column(JSON, default=list)
    normal_pack_price: Mapped[int] = mapped_column(BigInteger)
    pack_card_count: Mapped[int] = mapped_column(Integer)
    currency_rate: Mapped[int] = mapped_column(BigInteger)
    ticket_price: Mapped[int] = mapped_column(BigInteger)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<GameConfigDB(authority={self.authority})>"


class CardTemplateDB(Base):
    """A card type definition. Insert-once."""

    __tablename__ = "card_templates"

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    card_type_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(MAX_TEMPLATE_NAME_LEN))
    trait_type: Mapped[str] = mapped_column(String(16))
    rarity: Mapped[str] = mapped_column(String(16), index=True)
    min_attack: Mapped[int] = mapped_column(Integer)
    max_attack: Mapped[int] = mapped_column(Integer)
    min_health: Mapped[int] = mapped_column(Integer)
    max_health: Mapped[int] = mapped_column(Integer)
    description: Mapped[str] = mapped_column(String(MAX_DESCRIPTION_LEN))
    image_uri: Mapped[str] = mapped_column(String(MAX_IMAGE_URI_LEN), default="")
    creator: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CardTemplateDB(id={self.card_type_id}, name={self.name})>"


class RarityPoolDB(Base):
    """Card type ids drawable at one rarity tier."""

    __tablename__ = "rarity_pools"

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    rarity: Mapped[str | None] = mapped_column(String(16), nullable=True)
    card_type_ids: Mapped[list[Any]] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<RarityPoolDB(rarity={self.rarity}, size={len(self.card_type_ids or [])})>"


class PlayerProfileDB(Base):
    """
    A player's ledger: currency, tickets, trophies and match counters.

    Created once per owner on registration; never destroyed.
    """

    __tablename__ = "player_profiles"

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    owner: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(MAX_USERNAME_LEN))
    has_claimed_starter_pack: Mapped[bool] = mapped_column(Boolean, default=False)
    gacha_tickets: Mapped[int] = mapped_column(BigInteger, default=0)
    currency_balance: Mapped[int] = mapped_column(BigInteger, default=0)
    trophies: Mapped[int] = mapped_column(BigInteger, default=0, index=True)
    total_wins: Mapped[int] = mapped_column(BigInteger, default=0)
    total_losses: Mapped[int] = mapped_column(BigInteger, default=0)
    win_streak: Mapped[int] = mapped_column(BigInteger, default=0)

    # Last card type produced by roll_gacha, consumed by a bound draw
    pending_card_type_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PlayerProfileDB(owner={self.owner}, username={self.username})>"


class CardInstanceDB(Base):
    """
    A drawn card with rolled stats.

    `escrow_listing` is NULL while the owner holds the card and the listing
    address while the card sits in marketplace escrow. `owner` is only
    changed by a completed sale.
    """

    __tablename__ = "card_instances"

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    token_ref: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN), unique=True, index=True)
    card_type_id: Mapped[int] = mapped_column(BigInteger, index=True)
    attack: Mapped[int] = mapped_column(Integer)
    health: Mapped[int] = mapped_column(Integer)
    owner: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN), index=True)
    escrow_listing: Mapped[str | None] = mapped_column(String(ADDRESS_LEN), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CardInstanceDB(token={self.token_ref}, type={self.card_type_id})>"


class PlayerDeckDB(Base):
    """A saved deck slot. Deleting clears it in place."""

    __tablename__ = "player_decks"
    __table_args__ = (UniqueConstraint("owner", "deck_index", name="uq_owner_deck_index"),)

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    owner: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN), index=True)
    deck_index: Mapped[int] = mapped_column(Integer)
    deck_name: Mapped[str] = mapped_column(String(MAX_DECK_NAME_LEN), default="")
    card_refs: Mapped[list[Any]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PlayerDeckDB(owner={self.owner}, index={self.deck_index})>"


class ListingDB(Base):
    """
    An active marketplace listing.

    Keyed by the card's token reference, so a card can have at most one
    listing. The row is deleted when the listing is cancelled or sold.
    """

    __tablename__ = "listings"

    address: Mapped[str] = mapped_column(String(ADDRESS_LEN), primary_key=True)
    seller: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN), index=True)
    card_ref: Mapped[str] = mapped_column(String(MAX_IDENTITY_LEN), unique=True)
    price: Mapped[int] = mapped_column(BigInteger)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[int] = mapped_column(BigInteger)

    def __repr__(self) -> str:
        return f"<ListingDB(card={self.card_ref}, price={self.price})>"

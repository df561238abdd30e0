"""
Player deck slots.

Each player has MAX_DECKS numbered slots. Saving creates or overwrites a
slot; deleting clears it in place so the slot can be reused.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.config import MAX_DECK_CARDS, MAX_DECK_NAME_LEN, MAX_DECKS
from menagerie.db import operations
from menagerie.db.addressing import player_deck_address
from menagerie.models.db import PlayerDeckDB
from menagerie.models.deck import PlayerDeck
from menagerie.models.failure import (
    AuthorizationError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from menagerie.services.validation import validate_string_length

logger = logging.getLogger(__name__)


def deck_to_model(db_deck: PlayerDeckDB) -> PlayerDeck:
    """Convert a database deck to a domain model."""
    return PlayerDeck(
        owner=db_deck.owner,
        deck_index=db_deck.deck_index,
        deck_name=db_deck.deck_name,
        card_refs=tuple(str(ref) for ref in db_deck.card_refs or []),
        is_active=db_deck.is_active,
    )


def _validate_slot(deck_index: int) -> None:
    if not 0 <= deck_index < MAX_DECKS:
        raise ValidationError(
            ErrorCode.INVALID_DECK_INDEX,
            f"Deck index must be between 0 and {MAX_DECKS - 1}, got {deck_index}",
        )


async def save_deck(
    session: AsyncSession,
    owner: str,
    deck_index: int,
    deck_name: str,
    card_refs: list[str],
) -> PlayerDeck:
    """
    Save a deck into a slot, overwriting whatever the slot held.

    Raises:
        ValidationError: On a bad slot, an over-long name or too many cards.
        NotFoundError: If the profile or a referenced card is missing.
        AuthorizationError: If a referenced card belongs to someone else or
            is held in marketplace escrow.
    """
    _validate_slot(deck_index)
    if len(card_refs) > MAX_DECK_CARDS:
        raise ValidationError(
            ErrorCode.TOO_MANY_CARDS_IN_DECK,
            f"Deck holds at most {MAX_DECK_CARDS} cards, got {len(card_refs)}",
        )
    validate_string_length(deck_name, MAX_DECK_NAME_LEN, "deck name")

    await operations.require_profile(session, owner)
    for ref in card_refs:
        card = await operations.require_card(session, ref)
        if card.owner != owner:
            logger.warning("Rejected deck save by %s: card %s is not theirs", owner, ref)
            raise AuthorizationError(f"Card {ref} is not owned by the player")
        if card.escrow_listing is not None:
            logger.warning("Rejected deck save by %s: card %s is in escrow", owner, ref)
            raise AuthorizationError(f"Card {ref} is listed on the marketplace")

    db_deck = await operations.get_deck(session, owner, deck_index)
    if db_deck is None:
        db_deck = PlayerDeckDB(
            address=player_deck_address(owner, deck_index),
            owner=owner,
            deck_index=deck_index,
            deck_name=deck_name,
            card_refs=list(card_refs),
            is_active=True,
        )
        await operations.insert_record(session, db_deck, "PlayerDeck", (owner, deck_index))
    else:
        db_deck.deck_name = deck_name
        db_deck.card_refs = list(card_refs)
        db_deck.is_active = True

    logger.info(
        "Saved deck %r in slot %d for %s (%d cards)", deck_name, deck_index, owner, len(card_refs)
    )
    return deck_to_model(db_deck)


async def delete_deck(session: AsyncSession, owner: str, deck_index: int) -> PlayerDeck:
    """
    Clear a deck slot.

    Raises:
        ValidationError: On a bad slot.
        NotFoundError: If the slot was never saved.
    """
    _validate_slot(deck_index)
    db_deck = await operations.get_deck(session, owner, deck_index)
    if db_deck is None:
        raise NotFoundError("PlayerDeck", f"{owner}/{deck_index}")

    db_deck.deck_name = ""
    db_deck.card_refs = []
    db_deck.is_active = False

    logger.info("Deleted deck %d for %s", deck_index, owner)
    return deck_to_model(db_deck)


async def list_decks(session: AsyncSession, owner: str) -> list[PlayerDeck]:
    """All saved slots for `owner`, including cleared ones, by slot index."""
    return [deck_to_model(d) for d in await operations.list_decks(session, owner)]

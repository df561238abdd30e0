"""
Player Ledger and Economy Exchange.

Owns every change to a player's currency and ticket balances outside of
match results and marketplace trades:
- registration and the one-shot starter ticket grant
- currency purchases (external value in, in-game currency out)
- ticket purchases and admin ticket grants
- gacha rolls, single draws and pack purchases

INVARIANTS:
- Every balance update is overflow-checked; nothing wraps or clamps
- All new values are computed before any field is assigned, so a failure
  leaves the loaded records untouched
- External collaborators run before the ledger is credited; their failure
  aborts the whole transaction
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.config import FREE_STARTER_TICKETS, LAMPORTS_PER_SOL, MAX_USERNAME_LEN, settings
from menagerie.db.addressing import card_instance_address, player_profile_address
from menagerie.db.operations import (
    card_to_model,
    insert_record,
    list_templates,
    load_rarity_pool,
    require_game_config,
    require_profile,
    require_template,
    template_to_model,
)
from menagerie.models.card import CardInstance, DrawResult, Rarity
from menagerie.models.db import CardInstanceDB, PlayerProfileDB
from menagerie.models.failure import ErrorCode, StateError, ValidationError
from menagerie.models.numeric import checked_add, checked_mul, checked_sub
from menagerie.services.catalog import require_authority
from menagerie.services.collaborators import MintService, TokenTransferService
from menagerie.services.draw_engine import DrawEngine, Roll, roll_stats
from menagerie.services.randomness import Clock, SeedContext, derive_random_u64
from menagerie.services.validation import (
    validate_card_type_id,
    validate_identity,
    validate_non_empty_string,
    validate_positive_amount,
    validate_string_length,
)

logger = logging.getLogger(__name__)


def new_token_ref() -> str:
    """Generate a unique token reference for a freshly drawn card."""
    return uuid.uuid4().hex


async def load_draw_engine(session: AsyncSession) -> DrawEngine:
    """Build a DrawEngine over the currently stored rarity pools."""
    pools = {rarity: await load_rarity_pool(session, rarity) for rarity in Rarity}
    return DrawEngine(pools)


# --- Registration ---


async def register_player(session: AsyncSession, owner: str, username: str) -> PlayerProfileDB:
    """
    Create a profile for `owner` with every counter at zero.

    Raises:
        ValidationError: If the username is blank or too long.
        DuplicateRecordError: If the owner is already registered.
    """
    validate_identity(owner, "owner")
    validate_non_empty_string(username, "username")
    validate_string_length(username, MAX_USERNAME_LEN, "username")

    profile = PlayerProfileDB(
        address=player_profile_address(owner),
        owner=owner,
        username=username,
        has_claimed_starter_pack=False,
        gacha_tickets=0,
        currency_balance=0,
        trophies=0,
        total_wins=0,
        total_losses=0,
        win_streak=0,
        pending_card_type_id=None,
    )
    await insert_record(session, profile, "PlayerProfile", owner)

    logger.info("Player registered: %s (%s)", username, owner)
    return profile


async def claim_starter_tickets(session: AsyncSession, owner: str) -> PlayerProfileDB:
    """
    Grant the free starter tickets. One-shot per player.

    Raises:
        StateError: If the player has already claimed.
    """
    profile = await require_profile(session, owner)
    if profile.has_claimed_starter_pack:
        raise StateError(
            ErrorCode.STARTER_ALREADY_CLAIMED,
            "Player has already claimed starter tickets",
        )

    tickets = checked_add(profile.gacha_tickets, FREE_STARTER_TICKETS)

    profile.gacha_tickets = tickets
    profile.has_claimed_starter_pack = True

    logger.info("Claimed %d starter tickets for %s", FREE_STARTER_TICKETS, owner)
    return profile


async def add_gacha_tickets(
    session: AsyncSession, caller: str, owner: str, amount: int
) -> PlayerProfileDB:
    """Admin grant of tickets. Authority only."""
    validate_positive_amount(amount, "ticket amount")
    config = await require_game_config(session)
    require_authority(config, caller)
    profile = await require_profile(session, owner)

    tickets = checked_add(profile.gacha_tickets, amount)
    profile.gacha_tickets = tickets

    logger.info("Added %d tickets to %s. Total: %d", amount, owner, tickets)
    return profile


# --- Exchange ---


def convert_to_currency(external_amount: int, rate: int) -> int:
    """floor(external_amount * rate / LAMPORTS_PER_SOL)."""
    return external_amount * rate // LAMPORTS_PER_SOL


async def buy_currency(
    session: AsyncSession,
    owner: str,
    external_amount: int,
    token_transfer: TokenTransferService,
) -> tuple[PlayerProfileDB, int]:
    """
    Buy in-game currency with external value.

    The external transfer to the treasury happens before the ledger credit.

    Returns:
        Tuple of (profile, credited amount).

    Raises:
        ValidationError: If the amount is zero or converts to nothing.
        ExternalServiceError: If the transfer fails.
    """
    validate_positive_amount(external_amount, "external amount")
    config = await require_game_config(session)
    profile = await require_profile(session, owner)

    credited = convert_to_currency(external_amount, config.currency_rate)
    if credited == 0:
        raise ValidationError(
            ErrorCode.INVALID_AMOUNT,
            f"Amount {external_amount} converts to zero currency",
        )
    balance = checked_add(profile.currency_balance, credited)

    await token_transfer.transfer(owner, settings.treasury_account, external_amount)

    profile.currency_balance = balance

    logger.info(
        "Bought %d currency for %d external units. Balance: %d", credited, external_amount, balance
    )
    return profile, credited


async def buy_tickets(session: AsyncSession, owner: str, ticket_count: int) -> PlayerProfileDB:
    """
    Buy gacha tickets with currency.

    Raises:
        ValidationError: If ticket_count is zero.
        NumericalOverflowError: If the cost or the new ticket total overflows.
        StateError: If the balance does not cover the cost.
    """
    validate_positive_amount(ticket_count, "ticket count")
    config = await require_game_config(session)
    profile = await require_profile(session, owner)

    cost = checked_mul(config.ticket_price, ticket_count)
    if profile.currency_balance < cost:
        raise StateError(
            ErrorCode.INSUFFICIENT_BALANCE,
            f"Insufficient balance: need {cost}, have {profile.currency_balance}",
        )
    balance = checked_sub(profile.currency_balance, cost)
    tickets = checked_add(profile.gacha_tickets, ticket_count)

    profile.currency_balance = balance
    profile.gacha_tickets = tickets

    logger.info(
        "Bought %d tickets for %d. Tickets: %d, balance: %d", ticket_count, cost, tickets, balance
    )
    return profile


# --- Gacha ---


async def roll_gacha(session: AsyncSession, owner: str, clock: Clock) -> Roll:
    """
    Roll a rarity and card type without drawing.

    The caller uses the result to choose which template to submit to
    gacha_draw. When `bind_roll_to_draw` is enabled the roll is remembered
    on the profile and the next draw must use it.

    Raises:
        StateError: If the rolled tier's pool is empty.
    """
    context = SeedContext.capture(clock, owner)
    engine = await load_draw_engine(session)
    roll = engine.roll(context, salt=context.slot)

    if settings.bind_roll_to_draw:
        profile = await require_profile(session, owner)
        profile.pending_card_type_id = roll.card_type_id

    logger.info("Rolled %s - card type %d for %s", roll.rarity.value, roll.card_type_id, owner)
    return roll


async def _create_card(
    session: AsyncSession,
    owner: str,
    token_ref: str,
    card_type_id: int,
    attack: int,
    health: int,
    mint_service: MintService,
) -> CardInstanceDB:
    db_card = CardInstanceDB(
        address=card_instance_address(token_ref),
        token_ref=token_ref,
        card_type_id=card_type_id,
        attack=attack,
        health=health,
        owner=owner,
        escrow_listing=None,
    )
    await insert_record(session, db_card, "CardInstance", token_ref)
    await mint_service.mint(owner, token_ref)
    return db_card


async def gacha_draw(
    session: AsyncSession,
    owner: str,
    card_type_id: int,
    clock: Clock,
    mint_service: MintService,
    token_ref: str | None = None,
) -> CardInstance:
    """
    Spend one ticket to draw a card of the given type.

    The template is supplied by the caller (normally from roll_gacha); only
    the stats are rolled here.

    Raises:
        StateError: If the player has no tickets, or the template does not
        ValidationError: If the card type id is out of range.
            match the pending roll when draws are bound to rolls.
        NotFoundError: If the template does not exist.
    """
    validate_card_type_id(card_type_id)
    profile = await require_profile(session, owner)
    if profile.gacha_tickets < 1:
        raise StateError(ErrorCode.INSUFFICIENT_TICKETS, "Insufficient gacha tickets")

    template = template_to_model(await require_template(session, card_type_id))

    if settings.bind_roll_to_draw and profile.pending_card_type_id != card_type_id:
        raise StateError(
            ErrorCode.ROLL_MISMATCH,
            f"Card type {card_type_id} does not match the pending roll",
        )

    tickets = checked_sub(profile.gacha_tickets, 1)

    context = SeedContext.capture(clock, owner)
    attack, health = roll_stats(template, derive_random_u64(context, context.slot))

    token_ref = token_ref or new_token_ref()
    validate_identity(token_ref, "token_ref")

    profile.gacha_tickets = tickets
    profile.pending_card_type_id = None
    db_card = await _create_card(
        session, owner, token_ref, card_type_id, attack, health, mint_service
    )

    logger.info(
        "Minted card type=%d ATK=%d HP=%d token=%s. Tickets remaining: %d",
        card_type_id,
        attack,
        health,
        token_ref,
        tickets,
    )
    return card_to_model(db_card)


async def purchase_pack(
    session: AsyncSession,
    owner: str,
    clock: Clock,
    mint_service: MintService,
) -> list[DrawResult]:
    """
    Buy a pack with currency and draw `pack_card_count` cards.

    Every drawn card is persisted as a CardInstance and minted.

    Raises:
        StateError: If the balance does not cover the pack price, or a
            rolled tier's pool is empty.
        NotFoundError: If a rolled card type has no template.
    """
    config = await require_game_config(session)
    profile = await require_profile(session, owner)

    pack_price = config.normal_pack_price
    if profile.currency_balance < pack_price:
        raise StateError(
            ErrorCode.INSUFFICIENT_BALANCE,
            f"Insufficient balance: need {pack_price}, have {profile.currency_balance}",
        )
    balance = checked_sub(profile.currency_balance, pack_price)

    context = SeedContext.capture(clock, owner)
    engine = await load_draw_engine(session)
    templates = {t.card_type_id: template_to_model(t) for t in await list_templates(session)}
    rolled = engine.draw_pack(context, templates, count=config.pack_card_count)

    profile.currency_balance = balance

    results: list[DrawResult] = []
    for result in rolled:
        token_ref = new_token_ref()
        await _create_card(
            session,
            owner,
            token_ref,
            result.card_type_id,
            result.attack,
            result.health,
            mint_service,
        )
        results.append(
            DrawResult(
                rarity=result.rarity,
                card_type_id=result.card_type_id,
                attack=result.attack,
                health=result.health,
                token_ref=token_ref,
            )
        )

    logger.info(
        "Pack purchased for %d by %s: %d cards. Balance: %d",
        pack_price,
        owner,
        len(results),
        balance,
    )
    return results

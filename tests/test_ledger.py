"""Tests for the player ledger and economy exchange."""

import pytest
from conftest import AUTHORITY, OTHER_PLAYER, PACK_PRICE, PLAYER, POOLS, TEMPLATES
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.config import settings
from menagerie.db.operations import (
    get_card,
    list_cards_by_owner,
    require_profile,
)
from menagerie.models.card import WithOwner
from menagerie.models.failure import (
    AuthorizationError,
    DuplicateRecordError,
    ErrorCode,
    ExternalServiceError,
    NotFoundError,
    NumericalOverflowError,
    StateError,
    ValidationError,
)
from menagerie.models.numeric import U64_MAX
from menagerie.services.catalog import initialize_game
from menagerie.services.collaborators import LocalMintService, LocalTokenTransfer
from menagerie.services.ledger import (
    add_gacha_tickets,
    buy_currency,
    buy_tickets,
    claim_starter_tickets,
    convert_to_currency,
    gacha_draw,
    purchase_pack,
    register_player,
    roll_gacha,
)
from menagerie.services.randomness import FixedClock

RANGES = {t[0]: ((t[4], t[5]), (t[6], t[7])) for t in TEMPLATES}


class FailingTransfer:
    async def transfer(self, from_account: str, to_account: str, amount: int) -> None:
        raise ExternalServiceError("token transfer", "connection refused")


class FailingMint:
    async def mint(self, owner: str, token_ref: str) -> None:
        raise ExternalServiceError("mint", "unavailable")


async def _fund(session: AsyncSession, owner: str, balance: int = 0, tickets: int = 0) -> None:
    profile = await require_profile(session, owner)
    profile.currency_balance = balance
    profile.gacha_tickets = tickets


class TestRegisterPlayer:
    async def test_new_profile_is_zeroed(self, session: AsyncSession) -> None:
        profile = await register_player(session, PLAYER, "Player One")

        assert profile.username == "Player One"
        assert profile.has_claimed_starter_pack is False
        assert profile.gacha_tickets == 0
        assert profile.currency_balance == 0
        assert profile.trophies == 0
        assert profile.win_streak == 0

    async def test_register_twice_fails(self, session: AsyncSession) -> None:
        await register_player(session, PLAYER, "Player One")

        with pytest.raises(DuplicateRecordError) as exc_info:
            await register_player(session, PLAYER, "Again")

        assert isinstance(exc_info.value, StateError)
        assert (await require_profile(session, PLAYER)).username == "Player One"

    async def test_empty_username(self, session: AsyncSession) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await register_player(session, PLAYER, "")

        assert exc_info.value.code == ErrorCode.EMPTY_STRING

    async def test_username_length_bound(self, session: AsyncSession) -> None:
        await register_player(session, PLAYER, "u" * 32)

        with pytest.raises(ValidationError) as exc_info:
            await register_player(session, OTHER_PLAYER, "u" * 33)

        assert exc_info.value.code == ErrorCode.STRING_TOO_LONG


class TestStarterTickets:
    async def test_claim_once(self, seeded_session: AsyncSession) -> None:
        profile = await claim_starter_tickets(seeded_session, PLAYER)

        assert profile.gacha_tickets == 10
        assert profile.has_claimed_starter_pack is True

    async def test_second_claim_fails(self, seeded_session: AsyncSession) -> None:
        await claim_starter_tickets(seeded_session, PLAYER)

        with pytest.raises(StateError) as exc_info:
            await claim_starter_tickets(seeded_session, PLAYER)

        assert exc_info.value.code == ErrorCode.STARTER_ALREADY_CLAIMED
        assert (await require_profile(seeded_session, PLAYER)).gacha_tickets == 10

    async def test_unregistered_player(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await claim_starter_tickets(seeded_session, "nobody")


class TestAddGachaTickets:
    async def test_authority_grants(self, seeded_session: AsyncSession) -> None:
        profile = await add_gacha_tickets(seeded_session, AUTHORITY, PLAYER, 5)

        assert profile.gacha_tickets == 5

    async def test_non_authority_rejected(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(AuthorizationError):
            await add_gacha_tickets(seeded_session, PLAYER, PLAYER, 5)

        assert (await require_profile(seeded_session, PLAYER)).gacha_tickets == 0

    async def test_overflow(self, seeded_session: AsyncSession) -> None:
        await _fund(seeded_session, PLAYER, tickets=U64_MAX)

        with pytest.raises(NumericalOverflowError):
            await add_gacha_tickets(seeded_session, AUTHORITY, PLAYER, 1)

        assert (await require_profile(seeded_session, PLAYER)).gacha_tickets == U64_MAX


class TestBuyCurrency:
    def test_conversion_floors(self) -> None:
        assert convert_to_currency(1_000_000_000, 1000) == 1000
        assert convert_to_currency(1_500_000, 1000) == 1
        assert convert_to_currency(999_999, 1000) == 0

    async def test_transfer_then_credit(
        self, seeded_session: AsyncSession, token_transfer: LocalTokenTransfer
    ) -> None:
        profile, credited = await buy_currency(
            seeded_session, PLAYER, 2_000_000_000, token_transfer
        )

        assert credited == 2000
        assert profile.currency_balance == 2000
        [record] = token_transfer.transfers
        assert record.from_account == PLAYER
        assert record.to_account == settings.treasury_account
        assert record.amount == 2_000_000_000

    async def test_zero_amount(
        self, seeded_session: AsyncSession, token_transfer: LocalTokenTransfer
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await buy_currency(seeded_session, PLAYER, 0, token_transfer)

        assert exc_info.value.code == ErrorCode.INVALID_AMOUNT
        assert token_transfer.transfers == []

    async def test_dust_amount_rejected(
        self, seeded_session: AsyncSession, token_transfer: LocalTokenTransfer
    ) -> None:
        """An amount that converts to zero currency moves nothing."""
        with pytest.raises(ValidationError):
            await buy_currency(seeded_session, PLAYER, 1, token_transfer)

        assert token_transfer.transfers == []

    async def test_transfer_failure_leaves_balance(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(ExternalServiceError) as exc_info:
            await buy_currency(seeded_session, PLAYER, 1_000_000_000, FailingTransfer())

        assert exc_info.value.status_code == 502
        assert (await require_profile(seeded_session, PLAYER)).currency_balance == 0


class TestBuyTickets:
    async def test_debits_cost(self, seeded_session: AsyncSession) -> None:
        await _fund(seeded_session, PLAYER, balance=100)

        profile = await buy_tickets(seeded_session, PLAYER, 5)

        assert profile.currency_balance == 50
        assert profile.gacha_tickets == 5

    async def test_exact_balance(self, seeded_session: AsyncSession) -> None:
        await _fund(seeded_session, PLAYER, balance=30)

        profile = await buy_tickets(seeded_session, PLAYER, 3)

        assert profile.currency_balance == 0

    async def test_insufficient_balance(self, seeded_session: AsyncSession) -> None:
        await _fund(seeded_session, PLAYER, balance=49)

        with pytest.raises(StateError) as exc_info:
            await buy_tickets(seeded_session, PLAYER, 5)

        assert exc_info.value.code == ErrorCode.INSUFFICIENT_BALANCE
        profile = await require_profile(seeded_session, PLAYER)
        assert profile.currency_balance == 49
        assert profile.gacha_tickets == 0

    async def test_zero_count(self, seeded_session: AsyncSession) -> None:
        with pytest.raises(ValidationError):
            await buy_tickets(seeded_session, PLAYER, 0)

    async def test_cost_overflow(self, seeded_session: AsyncSession) -> None:
        await _fund(seeded_session, PLAYER, balance=U64_MAX)

        with pytest.raises(NumericalOverflowError):
            await buy_tickets(seeded_session, PLAYER, U64_MAX)

        assert (await require_profile(seeded_session, PLAYER)).currency_balance == U64_MAX


class TestRollGacha:
    async def test_roll_comes_from_pool(
        self, seeded_session: AsyncSession, clock: FixedClock
    ) -> None:
        for _ in range(20):
            roll = await roll_gacha(seeded_session, PLAYER, clock)
            assert roll.card_type_id in POOLS[roll.rarity]
            clock.advance()

    async def test_roll_spends_nothing(
        self, seeded_session: AsyncSession, clock: FixedClock
    ) -> None:
        await _fund(seeded_session, PLAYER, balance=10, tickets=1)

        await roll_gacha(seeded_session, PLAYER, clock)

        profile = await require_profile(seeded_session, PLAYER)
        assert profile.gacha_tickets == 1
        assert profile.currency_balance == 10
        assert profile.pending_card_type_id is None

    async def test_same_slot_same_roll(
        self, seeded_session: AsyncSession, clock: FixedClock
    ) -> None:
        assert await roll_gacha(seeded_session, PLAYER, clock) == await roll_gacha(
            seeded_session, PLAYER, clock
        )

    async def test_empty_pools(self, session: AsyncSession, clock: FixedClock) -> None:
        await initialize_game(
            session, AUTHORITY, normal_pack_price=1, currency_rate=1, ticket_price=1
        )
        await register_player(session, PLAYER, "Player One")

        with pytest.raises(StateError) as exc_info:
            await roll_gacha(session, PLAYER, clock)

        assert exc_info.value.code == ErrorCode.EMPTY_RARITY_POOL


class TestGachaDraw:
    async def test_draw_spends_one_ticket(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=2)

        card = await gacha_draw(seeded_session, PLAYER, 3, clock, mint_service)

        assert (await require_profile(seeded_session, PLAYER)).gacha_tickets == 1
        (min_atk, max_atk), (min_hp, max_hp) = RANGES[3]
        assert min_atk <= card.attack <= max_atk
        assert min_hp <= card.health <= max_hp
        assert card.owner == PLAYER
        assert card.location == WithOwner(PLAYER)
        assert mint_service.minted == {card.token_ref: PLAYER}
        assert await get_card(seeded_session, card.token_ref) is not None

    async def test_explicit_token_ref(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=1)

        card = await gacha_draw(
            seeded_session, PLAYER, 1, clock, mint_service, token_ref="token-abc"
        )

        assert card.token_ref == "token-abc"

    async def test_no_tickets(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        with pytest.raises(StateError) as exc_info:
            await gacha_draw(seeded_session, PLAYER, 1, clock, mint_service)

        assert exc_info.value.code == ErrorCode.INSUFFICIENT_TICKETS
        assert await list_cards_by_owner(seeded_session, PLAYER) == []
        assert mint_service.minted == {}

    async def test_unknown_template(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=1)

        with pytest.raises(NotFoundError):
            await gacha_draw(seeded_session, PLAYER, 99, clock, mint_service)

        assert (await require_profile(seeded_session, PLAYER)).gacha_tickets == 1

    async def test_mint_failure_propagates(
        self, seeded_session: AsyncSession, clock: FixedClock
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=1)

        with pytest.raises(ExternalServiceError):
            await gacha_draw(seeded_session, PLAYER, 1, clock, FailingMint())


class TestBoundRollDraw:
    @pytest.fixture(autouse=True)
    def bind(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "bind_roll_to_draw", True)

    async def test_roll_then_draw(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=1)

        roll = await roll_gacha(seeded_session, PLAYER, clock)
        assert (await require_profile(seeded_session, PLAYER)).pending_card_type_id == (
            roll.card_type_id
        )

        card = await gacha_draw(seeded_session, PLAYER, roll.card_type_id, clock, mint_service)

        assert card.card_type_id == roll.card_type_id
        assert (await require_profile(seeded_session, PLAYER)).pending_card_type_id is None

    async def test_mismatched_draw_rejected(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=1)
        roll = await roll_gacha(seeded_session, PLAYER, clock)
        other = next(t[0] for t in TEMPLATES if t[0] != roll.card_type_id)

        with pytest.raises(StateError) as exc_info:
            await gacha_draw(seeded_session, PLAYER, other, clock, mint_service)

        assert exc_info.value.code == ErrorCode.ROLL_MISMATCH
        assert (await require_profile(seeded_session, PLAYER)).gacha_tickets == 1

    async def test_draw_without_roll_rejected(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, tickets=1)

        with pytest.raises(StateError) as exc_info:
            await gacha_draw(seeded_session, PLAYER, 1, clock, mint_service)

        assert exc_info.value.code == ErrorCode.ROLL_MISMATCH


class TestPurchasePack:
    async def test_pack_debits_price_and_mints_ten(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, balance=PACK_PRICE + 123)

        results = await purchase_pack(seeded_session, PLAYER, clock, mint_service)

        assert len(results) == 10
        assert (await require_profile(seeded_session, PLAYER)).currency_balance == 123
        for result in results:
            assert result.card_type_id in POOLS[result.rarity]
            (min_atk, max_atk), (min_hp, max_hp) = RANGES[result.card_type_id]
            assert min_atk <= result.attack <= max_atk
            assert min_hp <= result.health <= max_hp
            assert mint_service.minted[result.token_ref] == PLAYER

        owned = await list_cards_by_owner(seeded_session, PLAYER)
        assert {c.token_ref for c in owned} == {r.token_ref for r in results}

    async def test_exact_balance(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, balance=PACK_PRICE)

        await purchase_pack(seeded_session, PLAYER, clock, mint_service)

        assert (await require_profile(seeded_session, PLAYER)).currency_balance == 0

    async def test_insufficient_balance(
        self,
        seeded_session: AsyncSession,
        clock: FixedClock,
        mint_service: LocalMintService,
    ) -> None:
        await _fund(seeded_session, PLAYER, balance=PACK_PRICE - 1)

        with pytest.raises(StateError) as exc_info:
            await purchase_pack(seeded_session, PLAYER, clock, mint_service)

        assert exc_info.value.code == ErrorCode.INSUFFICIENT_BALANCE
        assert (await require_profile(seeded_session, PLAYER)).currency_balance == PACK_PRICE - 1
        assert await list_cards_by_owner(seeded_session, PLAYER) == []
        assert mint_service.minted == {}

from collections.abc import Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from menagerie.api.dependencies import get_clock, get_mint, get_token_transfer_service
from menagerie.db.addressing import card_instance_address
from menagerie.db.database import get_session, transaction
from menagerie.db.operations import insert_record
from menagerie.main import app
from menagerie.models.card import Rarity, TraitType
from menagerie.models.db import Base, CardInstanceDB
from menagerie.services.catalog import create_card_template, initialize_game, update_rarity_pool
from menagerie.services.collaborators import (
    LocalMintService,
    LocalTokenTransfer,
    reset_collaborators,
)
from menagerie.services.ledger import register_player
from menagerie.services.randomness import FixedClock

AUTHORITY = "authority"
PLAYER = "player-1"
OTHER_PLAYER = "player-2"

PACK_PRICE = 500
CURRENCY_RATE = 1000
TICKET_PRICE = 10

# (card_type_id, name, trait, rarity, min_atk, max_atk, min_hp, max_hp)
TEMPLATES = [
    (1, "Wolf", TraitType.WARRIOR, Rarity.COMMON, 1, 3, 10, 20),
    (2, "Hawk", TraitType.ARCHER, Rarity.COMMON, 2, 4, 5, 8),
    (3, "Viper", TraitType.ASSASSIN, Rarity.RARE, 5, 9, 5, 9),
    (4, "Dragon", TraitType.WARRIOR, Rarity.LEGENDARY, 20, 30, 40, 50),
]

POOLS = {Rarity.COMMON: [1, 2], Rarity.RARE: [3], Rarity.LEGENDARY: [4]}


@pytest.fixture(autouse=True)
def reset_default_collaborators():
    """Drop the process-wide collaborator singletons between tests."""
    reset_collaborators()
    yield
    reset_collaborators()


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """Session with an initialized game, four templates, filled pools and two players."""
    await initialize_game(
        session,
        AUTHORITY,
        normal_pack_price=PACK_PRICE,
        currency_rate=CURRENCY_RATE,
        ticket_price=TICKET_PRICE,
    )
    for card_type_id, name, trait, rarity, min_atk, max_atk, min_hp, max_hp in TEMPLATES:
        await create_card_template(
            session,
            AUTHORITY,
            card_type_id=card_type_id,
            name=name,
            trait_type=trait,
            rarity=rarity,
            min_attack=min_atk,
            max_attack=max_atk,
            min_health=min_hp,
            max_health=max_hp,
            description=f"A {rarity.value} {name.lower()}",
        )
    for rarity, card_type_ids in POOLS.items():
        await update_rarity_pool(session, AUTHORITY, rarity.discriminant, card_type_ids)
    await register_player(session, PLAYER, "Player One")
    await register_player(session, OTHER_PLAYER, "Player Two")
    await session.flush()
    return session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(current_slot=250_000_000, current_timestamp=1_700_000_000)


@pytest.fixture
def mint_service() -> LocalMintService:
    return LocalMintService()


@pytest.fixture
def token_transfer() -> LocalTokenTransfer:
    return LocalTokenTransfer()


@pytest.fixture
def make_card(session: AsyncSession) -> Callable[..., Awaitable[CardInstanceDB]]:
    """Factory inserting a card instance directly, bypassing draws."""

    async def _make_card(
        owner: str, token_ref: str, card_type_id: int = 1, attack: int = 2, health: int = 15
    ) -> CardInstanceDB:
        card = CardInstanceDB(
            address=card_instance_address(token_ref),
            token_ref=token_ref,
            card_type_id=card_type_id,
            attack=attack,
            health=health,
            owner=owner,
            escrow_listing=None,
        )
        await insert_record(session, card, "CardInstance", token_ref)
        return card

    return _make_card


@pytest.fixture
async def client(
    async_engine,
    clock: FixedClock,
    mint_service: LocalMintService,
    token_transfer: LocalTokenTransfer,
):
    """Async test client with a per-request transactional session and local collaborators."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with transaction(async_session) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_mint] = lambda: mint_service
    app.dependency_overrides[get_token_transfer_service] = lambda: token_transfer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def caller(identity: str) -> dict[str, str]:
    """Request headers identifying the caller."""
    return {"X-Caller-Identity": identity}


@pytest.fixture
async def game_client(client: AsyncClient) -> AsyncClient:
    """Client against a game initialized over HTTP, with templates, pools and two players."""
    response = await client.post(
        "/game/initialize",
        headers=caller(AUTHORITY),
        json={
            "normal_pack_price": PACK_PRICE,
            "currency_rate": CURRENCY_RATE,
            "ticket_price": TICKET_PRICE,
        },
    )
    assert response.status_code == 201

    for card_type_id, name, trait, rarity, min_atk, max_atk, min_hp, max_hp in TEMPLATES:
        response = await client.post(
            "/game/templates",
            headers=caller(AUTHORITY),
            json={
                "card_type_id": card_type_id,
                "name": name,
                "trait_type": trait.value,
                "rarity": rarity.value,
                "min_attack": min_atk,
                "max_attack": max_atk,
                "min_health": min_hp,
                "max_health": max_hp,
                "description": f"A {rarity.value} {name.lower()}",
            },
        )
        assert response.status_code == 201

    for rarity, card_type_ids in POOLS.items():
        response = await client.post(
            f"/game/pools/{rarity.discriminant}",
            headers=caller(AUTHORITY),
            json={"card_type_ids": card_type_ids},
        )
        assert response.status_code == 200

    for identity, username in ((PLAYER, "Player One"), (OTHER_PLAYER, "Player Two")):
        response = await client.post(
            "/players", headers=caller(identity), json={"username": username}
        )
        assert response.status_code == 201

    return client

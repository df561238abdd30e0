"""
Game administration endpoints.

Config initialization, the card-creator set, card templates and rarity
pools. Writes are authority-only except template creation, which authorized
creators may also perform.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from menagerie.api.dependencies import Caller
from menagerie.db import (
    list_templates,
    load_rarity_pool,
    require_game_config,
    require_template,
    template_to_model,
)
from menagerie.db.database import get_session
from menagerie.models.card import CardTemplate, Rarity, TraitType
from menagerie.models.db import GameConfigDB
from menagerie.models.rarity_pool import RarityPool
from menagerie.services.catalog import (
    add_card_creator,
    create_card_template,
    initialize_game,
    update_rarity_pool,
)
from menagerie.services.validation import validate_card_type_id

router = APIRouter(prefix="/game", tags=["game"])


class InitializeRequest(BaseModel):
    """Request model for game initialization. The caller becomes authority."""

    normal_pack_price: int = Field(..., description="Currency cost of one pack")
    currency_rate: int = Field(
        ..., description="Currency credited per 1_000_000_000 external units"
    )
    ticket_price: int = Field(..., description="Currency cost of one gacha ticket")


class GameConfigResponse(BaseModel):
    """Response model for the game config."""

    authority: str
    card_creators: list[str] = Field(default_factory=list)
    normal_pack_price: int
    pack_card_count: int
    currency_rate: int
    ticket_price: int


class AddCreatorRequest(BaseModel):
    creator: str


class CreatorsResponse(BaseModel):
    card_creators: list[str]


class CreateTemplateRequest(BaseModel):
    """Request model for a new card template."""

    card_type_id: int
    name: str
    trait_type: TraitType
    rarity: Rarity
    min_attack: int
    max_attack: int
    min_health: int
    max_health: int
    description: str
    image_uri: str = ""


class TemplateResponse(BaseModel):
    """Response model for a card template."""

    card_type_id: int
    name: str
    trait_type: TraitType
    rarity: Rarity
    min_attack: int
    max_attack: int
    min_health: int
    max_health: int
    description: str
    image_uri: str = ""


class TemplateListResponse(BaseModel):
    templates: list[TemplateResponse]
    count: int


class PoolUpdateRequest(BaseModel):
    card_type_ids: list[int] = Field(
        ...,
        description="Card type ids to append; ids already present are skipped",
        examples=[[1, 2, 3]],
    )


class PoolResponse(BaseModel):
    """Response model for a rarity pool."""

    rarity_discriminant: int
    rarity: Rarity | None
    card_type_ids: list[int]
    count: int


def _config_response(config: GameConfigDB) -> GameConfigResponse:
    return GameConfigResponse(
        authority=config.authority,
        card_creators=list(config.card_creators or []),
        normal_pack_price=config.normal_pack_price,
        pack_card_count=config.pack_card_count,
        currency_rate=config.currency_rate,
        ticket_price=config.ticket_price,
    )


def _template_response(template: CardTemplate) -> TemplateResponse:
    return TemplateResponse(
        card_type_id=template.card_type_id,
        name=template.name,
        trait_type=template.trait_type,
        rarity=template.rarity,
        min_attack=template.attack.minimum,
        max_attack=template.attack.maximum,
        min_health=template.health.minimum,
        max_health=template.health.maximum,
        description=template.description,
        image_uri=template.image_uri,
    )


def _pool_response(discriminant: int, pool: RarityPool) -> PoolResponse:
    return PoolResponse(
        rarity_discriminant=discriminant,
        rarity=pool.rarity,
        card_type_ids=list(pool.card_type_ids),
        count=len(pool),
    )


@router.post(
    "/initialize",
    response_model=GameConfigResponse,
    status_code=status.HTTP_201_CREATED,
)
async def initialize(
    request: InitializeRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> GameConfigResponse:
    """
    Create the game config with the caller as authority.

    Returns 409 if the game is already initialized.
    """
    config = await initialize_game(
        session,
        authority=caller,
        normal_pack_price=request.normal_pack_price,
        currency_rate=request.currency_rate,
        ticket_price=request.ticket_price,
    )
    return _config_response(config)


@router.get("/config", response_model=GameConfigResponse)
async def get_config(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> GameConfigResponse:
    """Get the game config. Returns 404 before initialization."""
    config = await require_game_config(session)
    return _config_response(config)


@router.post("/creators", response_model=CreatorsResponse)
async def add_creator(
    request: AddCreatorRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CreatorsResponse:
    """Add an authorized card creator. Authority only."""
    creators = await add_card_creator(session, caller, request.creator)
    return CreatorsResponse(card_creators=creators)


@router.post(
    "/templates",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_template(
    request: CreateTemplateRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TemplateResponse:
    """Register a card template. Authority or authorized creator only."""
    template = await create_card_template(
        session,
        caller,
        card_type_id=request.card_type_id,
        name=request.name,
        trait_type=request.trait_type,
        rarity=request.rarity,
        min_attack=request.min_attack,
        max_attack=request.max_attack,
        min_health=request.min_health,
        max_health=request.max_health,
        description=request.description,
        image_uri=request.image_uri,
    )
    return _template_response(template)


@router.get("/templates", response_model=TemplateListResponse)
async def get_templates(
    session: Annotated[AsyncSession, Depends(get_session)],
    rarity: Annotated[Rarity | None, Query()] = None,
) -> TemplateListResponse:
    """List card templates ordered by card type id."""
    templates = [
        _template_response(template_to_model(t)) for t in await list_templates(session, rarity)
    ]
    return TemplateListResponse(templates=templates, count=len(templates))


@router.get("/templates/{card_type_id}", response_model=TemplateResponse)
async def get_template(
    card_type_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TemplateResponse:
    """Get a card template. Returns 400 for an out-of-range id and 404 if it does not exist."""
    validate_card_type_id(card_type_id)
    db_template = await require_template(session, card_type_id)
    return _template_response(template_to_model(db_template))


@router.post("/pools/{rarity_discriminant}", response_model=PoolResponse)
async def update_pool(
    rarity_discriminant: int,
    request: PoolUpdateRequest,
    caller: Caller,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PoolResponse:
    """Append card types to a rarity pool. Authority only."""
    pool = await update_rarity_pool(session, caller, rarity_discriminant, request.card_type_ids)
    return _pool_response(rarity_discriminant, pool)


@router.get("/pools/{rarity_discriminant}", response_model=PoolResponse)
async def get_pool(
    rarity_discriminant: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PoolResponse:
    """Get a rarity pool. A pool that was never written is returned empty."""
    rarity = Rarity.from_discriminant(rarity_discriminant)
    pool = await load_rarity_pool(session, rarity)
    return _pool_response(rarity_discriminant, pool)

"""
Seed the game catalog from a JSON file or URL.

Initializes the game config if needed, then registers creators, card
templates and rarity pools. Each record is written in its own transaction,
so re-running the job against a partly seeded database only adds what is
missing.

Catalog format:
    {
        "config": {"normal_pack_price": 100, "currency_rate": 1000, "ticket_price": 10},
        "creators": ["creator-1"],
        "templates": [{"card_type_id": 1, "name": "Wolf", "trait_type": "warrior", ...}],
        "pools": {"common": [1, 2], "rare": [3], "legendary": [4]}
    }
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

import httpx
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from menagerie.db.database import async_session_factory, transaction
from menagerie.db.operations import get_game_config
from menagerie.models.card import Rarity, TraitType
from menagerie.models.failure import DuplicateRecordError, GameError
from menagerie.services.catalog import (
    add_card_creator,
    create_card_template,
    initialize_game,
    update_rarity_pool,
)

logger = logging.getLogger(__name__)


class ConfigEntry(BaseModel):
    normal_pack_price: int
    currency_rate: int
    ticket_price: int


class TemplateEntry(BaseModel):
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


class Catalog(BaseModel):
    """Parsed catalog file."""

    config: ConfigEntry | None = None
    creators: list[str] = Field(default_factory=list)
    templates: list[TemplateEntry] = Field(default_factory=list)
    pools: dict[Rarity, list[int]] = Field(default_factory=dict)


async def load_catalog(source: str, client: httpx.AsyncClient | None = None) -> Catalog:
    """
    Load a catalog from a local path or an http(s) URL.

    Raises:
        httpx.HTTPError: If the URL cannot be fetched.
        pydantic.ValidationError: If the document does not match the format.
    """
    if source.startswith(("http://", "https://")):
        if client is None:
            async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as owned:
                response = await owned.get(source)
        else:
            response = await client.get(source)
        response.raise_for_status()
        data = response.json()
    else:
        data = json.loads(Path(source).read_text(encoding="utf-8"))
    return Catalog.model_validate(data)


async def seed_catalog(
    catalog: Catalog,
    authority: str,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> dict[str, int]:
    """
    Write a catalog to the database as `authority`.

    Returns:
        Counts of records written: config, creators, templates, pools,
        plus skipped (already present) and failed templates.
    """
    results = {"config": 0, "creators": 0, "templates": 0, "pools": 0, "skipped": 0, "failed": 0}

    async with transaction(session_factory) as session:
        existing = await get_game_config(session)
    if existing is None:
        if catalog.config is None:
            raise ValueError("Game is not initialized and the catalog has no config section")
        async with transaction(session_factory) as session:
            await initialize_game(
                session,
                authority=authority,
                normal_pack_price=catalog.config.normal_pack_price,
                currency_rate=catalog.config.currency_rate,
                ticket_price=catalog.config.ticket_price,
            )
        results["config"] = 1

    for creator in catalog.creators:
        async with transaction(session_factory) as session:
            await add_card_creator(session, authority, creator)
        results["creators"] += 1

    for entry in catalog.templates:
        try:
            async with transaction(session_factory) as session:
                await create_card_template(session, authority, **entry.model_dump())
        except DuplicateRecordError:
            logger.info("Template %d already registered, skipping", entry.card_type_id)
            results["skipped"] += 1
        except GameError as e:
            logger.error("Failed to register template %d: %s", entry.card_type_id, e.message)
            results["failed"] += 1
        else:
            results["templates"] += 1

    for rarity, card_type_ids in catalog.pools.items():
        async with transaction(session_factory) as session:
            await update_rarity_pool(session, authority, rarity.discriminant, card_type_ids)
        results["pools"] += 1

    logger.info(
        "Catalog seeded: %d templates (%d skipped, %d failed), %d pools",
        results["templates"],
        results["skipped"],
        results["failed"],
        results["pools"],
    )
    return results


async def run_seed(source: str, authority: str) -> dict[str, int]:
    """Load a catalog and seed it."""
    logger.info("Loading catalog from %s...", source)
    catalog = await load_catalog(source)
    logger.info(
        "Loaded %d templates and %d pools", len(catalog.templates), len(catalog.pools)
    )
    return await seed_catalog(catalog, authority)


def main() -> None:
    """CLI entry point for seeding the catalog."""
    parser = argparse.ArgumentParser(description="Seed the Menagerie card catalog")
    parser.add_argument("source", help="Path or http(s) URL of the catalog JSON")
    parser.add_argument(
        "--authority",
        required=True,
        help="Identity that owns the game config (must match an existing config)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_seed(args.source, args.authority))


if __name__ == "__main__":
    main()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from menagerie.api import (
    decks_router,
    gacha_router,
    game_router,
    health_router,
    market_router,
    matches_router,
    players_router,
)
from menagerie.config import settings
from menagerie.db.database import init_db
from menagerie.models.failure import GameError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Create missing tables before serving."""
    await init_db()
    logger.info("%s ready (rarity bands %s)", settings.app_name, settings.rarity_bands)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("menagerie"),
    lifespan=lifespan,
)


@app.exception_handler(GameError)
async def game_error_handler(_request: Request, exc: GameError) -> JSONResponse:
    """Render every core failure as {"error": {"code", "category", "message"}}."""
    logger.info("Request rejected: %s (%s)", exc.code.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(decks_router)
app.include_router(gacha_router)
app.include_router(game_router)
app.include_router(health_router)
app.include_router(market_router)
app.include_router(matches_router)
app.include_router(players_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

from menagerie.api.decks import router as decks_router
from menagerie.api.gacha import router as gacha_router
from menagerie.api.game import router as game_router
from menagerie.api.health import router as health_router
from menagerie.api.market import router as market_router
from menagerie.api.matches import router as matches_router
from menagerie.api.players import router as players_router

__all__ = [
    "decks_router",
    "gacha_router",
    "game_router",
    "health_router",
    "market_router",
    "matches_router",
    "players_router",
]

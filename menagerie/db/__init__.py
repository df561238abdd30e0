from menagerie.db.addressing import Namespace, derive_address
from menagerie.db.database import get_session, init_db, transaction
from menagerie.db.operations import (
    card_to_model,
    get_card,
    get_deck,
    get_game_config,
    get_leaderboard,
    get_listing,
    get_profile,
    get_rarity_pool,
    get_template,
    insert_record,
    list_active_listings,
    list_cards_by_owner,
    list_decks,
    list_templates,
    load_rarity_pool,
    pool_to_model,
    profile_to_model,
    require_card,
    require_game_config,
    require_listing,
    require_profile,
    require_template,
    template_to_model,
)

__all__ = [
    "Namespace",
    "card_to_model",
    "derive_address",
    "get_card",
    "get_deck",
    "get_game_config",
    "get_leaderboard",
    "get_listing",
    "get_profile",
    "get_rarity_pool",
    "get_session",
    "get_template",
    "init_db",
    "insert_record",
    "list_active_listings",
    "list_cards_by_owner",
    "list_decks",
    "list_templates",
    "load_rarity_pool",
    "pool_to_model",
    "profile_to_model",
    "require_card",
    "require_game_config",
    "require_listing",
    "require_profile",
    "require_template",
    "template_to_model",
    "transaction",
]

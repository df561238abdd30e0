"""
Menagerie services.

Game economy logic: catalog administration, the player ledger, card draws,
the marketplace, match settlement and deck slots.
"""

from menagerie.services.catalog import (
    add_card_creator,
    create_card_template,
    initialize_game,
    is_authorized_creator,
    require_authority,
    update_rarity_pool,
)
from menagerie.services.collaborators import (
    HttpMintClient,
    HttpTokenTransferClient,
    LocalMintService,
    LocalTokenTransfer,
    MintService,
    TokenTransferService,
    get_mint_service,
    get_token_transfer,
    reset_collaborators,
)
from menagerie.services.decks import delete_deck, deck_to_model, list_decks, save_deck
from menagerie.services.draw_engine import (
    DrawEngine,
    RarityBands,
    Roll,
    roll_rarity,
    roll_stat,
    roll_stats,
    select_card,
)
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
from menagerie.services.marketplace import (
    buy_card,
    calculate_fee,
    cancel_listing,
    list_card,
    listing_to_model,
)
from menagerie.services.match_engine import MatchResult, record_match
from menagerie.services.randomness import (
    Clock,
    FixedClock,
    SeedContext,
    SystemClock,
    derive_random_u64,
)

__all__ = [
    # Catalog
    "add_card_creator",
    "create_card_template",
    "initialize_game",
    "is_authorized_creator",
    "require_authority",
    "update_rarity_pool",
    # Collaborators
    "HttpMintClient",
    "HttpTokenTransferClient",
    "LocalMintService",
    "LocalTokenTransfer",
    "MintService",
    "TokenTransferService",
    "get_mint_service",
    "get_token_transfer",
    "reset_collaborators",
    # Decks
    "deck_to_model",
    "delete_deck",
    "list_decks",
    "save_deck",
    # Draw engine
    "DrawEngine",
    "RarityBands",
    "Roll",
    "roll_rarity",
    "roll_stat",
    "roll_stats",
    "select_card",
    # Ledger
    "add_gacha_tickets",
    "buy_currency",
    "buy_tickets",
    "claim_starter_tickets",
    "convert_to_currency",
    "gacha_draw",
    "purchase_pack",
    "register_player",
    "roll_gacha",
    # Marketplace
    "buy_card",
    "calculate_fee",
    "cancel_listing",
    "list_card",
    "listing_to_model",
    # Match engine
    "MatchResult",
    "record_match",
    # Randomness
    "Clock",
    "FixedClock",
    "SeedContext",
    "SystemClock",
    "derive_random_u64",
]

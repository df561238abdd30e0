from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MENAGERIE_")

    app_name: str = "Menagerie"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/menagerie"

    # External collaborators. Empty URL selects the in-process implementation.
    token_service_url: str = ""
    mint_service_url: str = ""
    collaborator_timeout: float = 10.0

    # Account that receives external value on currency purchases
    treasury_account: str = "treasury"

    # Rarity band widths in draw order (Common, Rare, Legendary)
    rarity_bands: tuple[int, int, int] = (70, 27, 3)

    # When True, gacha_draw only accepts the card type produced by the
    # player's last roll_gacha call
    bind_roll_to_draw: bool = False

    @field_validator("rarity_bands")
    @classmethod
    def _bands_sum_to_100(cls, value: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(width < 0 for width in value):
            raise ValueError("rarity band widths must be non-negative")
        if sum(value) != 100:
            raise ValueError(f"rarity band widths must sum to 100, got {sum(value)}")
        return value


settings = Settings()


# =============================================================================
# PROTOCOL CONSTANTS
# =============================================================================

# Record field bounds
MAX_USERNAME_LEN = 32
MAX_TEMPLATE_NAME_LEN = 32
MAX_DESCRIPTION_LEN = 200
MAX_IMAGE_URI_LEN = 200
MAX_DECK_NAME_LEN = 32
MAX_IDENTITY_LEN = 64

# Collection bounds
MAX_CARD_CREATORS = 10
MAX_POOL_CARDS = 100
MAX_DECKS = 5
MAX_DECK_CARDS = 10

# Economy
FREE_STARTER_TICKETS = 10
PACK_CARD_COUNT = 10
LAMPORTS_PER_SOL = 1_000_000_000
MARKET_FEE_NUMERATOR = 25
MARKET_FEE_DENOMINATOR = 1000

# Match results
BASE_TROPHY_GAIN = 30
TROPHY_LOSS = 30
WIN_REWARD = 100

# Stat rolls in a pack use a salt offset so they don't correlate with the
# rarity roll for the same slot
STATS_SALT_OFFSET = 1000

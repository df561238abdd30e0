from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PlayerProfile:
    """
    A player's ledger snapshot.

    Attributes:
        owner: Owner identity (record key)
        username: Display name (max 32 chars)
        has_claimed_starter_pack: One-shot starter ticket flag
        gacha_tickets: Ticket balance
        currency_balance: In-game currency balance
        trophies: Trophy count (never negative)
        total_wins: Matches won
        total_losses: Matches lost
        win_streak: Consecutive wins, reset on a loss
    """

    owner: str
    username: str
    has_claimed_starter_pack: bool = False
    gacha_tickets: int = 0
    currency_balance: int = 0
    trophies: int = 0
    total_wins: int = 0
    total_losses: int = 0
    win_streak: int = 0

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class PlayerDeck:
    """
    One of a player's saved deck slots.

    A deleted slot keeps its record with an empty name, no cards and
    is_active False, and can be saved again.
    """

    owner: str
    deck_index: int
    deck_name: str
    card_refs: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True

    @property
    def card_count(self) -> int:
        return len(self.card_refs)

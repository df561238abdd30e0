"""
Deterministic record addressing.

Every record is stored under an address derived from a namespace tag and its
natural key. The address is the record's primary key, so "create if absent"
and duplicate detection are properties of the store, not of caller checks.
"""

import hashlib
from enum import Enum


class Namespace(str, Enum):
    """Record namespace tags."""

    GAME_CONFIG = "game_config"
    CARD_TEMPLATE = "card_template"
    RARITY_POOL = "rarity_pool"
    PLAYER_PROFILE = "player_profile"
    CARD_INSTANCE = "card_instance"
    PLAYER_DECK = "player_deck"
    LISTING = "listing"


def _encode_part(part: str | int) -> bytes:
    if isinstance(part, bool):
        raise TypeError("Address key parts must be str or int, not bool")
    if isinstance(part, int):
        if part < 0:
            raise ValueError(f"Address key integers must be non-negative: {part}")
        return b"i" + part.to_bytes(8, "little")
    encoded = part.encode("utf-8")
    # Length prefix keeps ("ab", "c") distinct from ("a", "bc")
    return b"s" + len(encoded).to_bytes(4, "little") + encoded


def derive_address(namespace: Namespace, *key: str | int) -> str:
    """
    Derive the storage address for a record.

    Pure function: the same namespace and key always give the same address,
    and different namespaces never collide on the same key.

    Args:
        namespace: Record namespace tag
        key: Natural key parts (identities, ids, slot indexes)

    Returns:
        Hex-encoded SHA-256 digest (64 chars)
    """
    digest = hashlib.sha256(namespace.value.encode("ascii"))
    for part in key:
        digest.update(_encode_part(part))
    return digest.hexdigest()


def game_config_address() -> str:
    return derive_address(Namespace.GAME_CONFIG)


def card_template_address(card_type_id: int) -> str:
    return derive_address(Namespace.CARD_TEMPLATE, card_type_id)


def rarity_pool_address(discriminant: int) -> str:
    return derive_address(Namespace.RARITY_POOL, discriminant)


def player_profile_address(owner: str) -> str:
    return derive_address(Namespace.PLAYER_PROFILE, owner)


def card_instance_address(token_ref: str) -> str:
    return derive_address(Namespace.CARD_INSTANCE, token_ref)


def player_deck_address(owner: str, slot: int) -> str:
    return derive_address(Namespace.PLAYER_DECK, owner, slot)


def listing_address(token_ref: str) -> str:
    return derive_address(Namespace.LISTING, token_ref)

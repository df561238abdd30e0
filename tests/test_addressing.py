"""Tests for deterministic record addressing."""

import hashlib

import pytest

from menagerie.db.addressing import (
    Namespace,
    card_instance_address,
    derive_address,
    listing_address,
    player_deck_address,
    player_profile_address,
    rarity_pool_address,
)


class TestDeriveAddress:
    def test_deterministic(self) -> None:
        """Same namespace and key always give the same address."""
        assert derive_address(Namespace.PLAYER_PROFILE, "alice") == derive_address(
            Namespace.PLAYER_PROFILE, "alice"
        )

    def test_is_hex_sha256(self) -> None:
        address = derive_address(Namespace.GAME_CONFIG)

        assert len(address) == 64
        assert address == hashlib.sha256(b"game_config").hexdigest()

    def test_namespaces_do_not_collide(self) -> None:
        """The same natural key in two namespaces gives two addresses."""
        assert card_instance_address("tok") != listing_address("tok")

    def test_distinct_keys(self) -> None:
        assert player_profile_address("alice") != player_profile_address("bob")

    def test_string_parts_are_length_prefixed(self) -> None:
        assert derive_address(Namespace.PLAYER_DECK, "ab", "c") != derive_address(
            Namespace.PLAYER_DECK, "a", "bc"
        )

    def test_int_and_str_parts_differ(self) -> None:
        assert derive_address(Namespace.CARD_TEMPLATE, 1) != derive_address(
            Namespace.CARD_TEMPLATE, "1"
        )

    def test_deck_slots_differ(self) -> None:
        assert player_deck_address("alice", 0) != player_deck_address("alice", 1)

    def test_rarity_pools_differ(self) -> None:
        addresses = {rarity_pool_address(d) for d in range(3)}
        assert len(addresses) == 3

    def test_negative_int_rejected(self) -> None:
        with pytest.raises(ValueError):
            derive_address(Namespace.CARD_TEMPLATE, -1)

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            derive_address(Namespace.CARD_TEMPLATE, True)

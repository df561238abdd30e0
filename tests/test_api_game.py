"""Tests for game administration endpoints."""

import pytest
from conftest import AUTHORITY, PLAYER, caller
from httpx import AsyncClient


class TestInitialize:
    async def test_initialize(self, client: AsyncClient) -> None:
        response = await client.post(
            "/game/initialize",
            headers=caller(AUTHORITY),
            json={"normal_pack_price": 500, "currency_rate": 1000, "ticket_price": 10},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["authority"] == AUTHORITY
        assert data["pack_card_count"] == 10
        assert data["card_creators"] == []

    async def test_initialize_twice(self, game_client: AsyncClient) -> None:
        response = await game_client.post(
            "/game/initialize",
            headers=caller(PLAYER),
            json={"normal_pack_price": 1, "currency_rate": 1, "ticket_price": 1},
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "duplicate_record"

        config = await game_client.get("/game/config")
        assert config.json()["authority"] == AUTHORITY

    async def test_config_before_initialize(self, client: AsyncClient) -> None:
        response = await client.get("/game/config")

        assert response.status_code == 404
        assert response.json() == {
            "error": {
                "code": "not_found",
                "category": "state",
                "message": "GameConfig not found: singleton",
            }
        }

    async def test_missing_caller_header(self, client: AsyncClient) -> None:
        response = await client.post(
            "/game/initialize",
            json={"normal_pack_price": 500, "currency_rate": 1000, "ticket_price": 10},
        )

        assert response.status_code == 422

    async def test_oversized_caller_header(self, client: AsyncClient) -> None:
        response = await client.post(
            "/game/initialize",
            headers=caller("x" * 65),
            json={"normal_pack_price": 500, "currency_rate": 1000, "ticket_price": 10},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "string_too_long"


class TestCreators:
    async def test_add_creator(self, game_client: AsyncClient) -> None:
        response = await game_client.post(
            "/game/creators", headers=caller(AUTHORITY), json={"creator": "artist"}
        )

        assert response.status_code == 200
        assert response.json() == {"card_creators": ["artist"]}

    async def test_non_authority(self, game_client: AsyncClient) -> None:
        response = await game_client.post(
            "/game/creators", headers=caller(PLAYER), json={"creator": "artist"}
        )

        assert response.status_code == 403
        assert response.json()["error"]["category"] == "authorization"


class TestTemplates:
    async def test_list_templates(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/game/templates")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 4
        assert [t["card_type_id"] for t in data["templates"]] == [1, 2, 3, 4]

    async def test_filter_by_rarity(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/game/templates", params={"rarity": "common"})

        assert [t["name"] for t in response.json()["templates"]] == ["Wolf", "Hawk"]

    async def test_get_template(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/game/templates/4")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Dragon"
        assert data["rarity"] == "legendary"
        assert (data["min_attack"], data["max_attack"]) == (20, 30)

    async def test_unknown_template(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/game/templates/99")

        assert response.status_code == 404

    @pytest.mark.parametrize("card_type_id", [-1, 2**32, 2**64])
    async def test_out_of_range_id(self, game_client: AsyncClient, card_type_id: int) -> None:
        response = await game_client.get(f"/game/templates/{card_type_id}")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["category"] == "validation"
        assert error["code"] == "invalid_amount"

    async def test_inverted_range(self, game_client: AsyncClient) -> None:
        response = await game_client.post(
            "/game/templates",
            headers=caller(AUTHORITY),
            json={
                "card_type_id": 50,
                "name": "Broken",
                "trait_type": "archer",
                "rarity": "rare",
                "min_attack": 9,
                "max_attack": 1,
                "min_health": 1,
                "max_health": 2,
                "description": "Broken card",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_stat_range"


class TestPools:
    async def test_get_pool(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/game/pools/0")

        assert response.json() == {
            "rarity_discriminant": 0,
            "rarity": "common",
            "card_type_ids": [1, 2],
            "count": 2,
        }

    async def test_append_dedupes(self, game_client: AsyncClient) -> None:
        response = await game_client.post(
            "/game/pools/0", headers=caller(AUTHORITY), json={"card_type_ids": [2, 3]}
        )

        assert response.json()["card_type_ids"] == [1, 2, 3]

    async def test_invalid_rarity(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/game/pools/7")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_rarity"

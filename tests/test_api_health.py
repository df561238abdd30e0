"""Tests for health check endpoints."""

from httpx import AsyncClient


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReady:
    async def test_not_ready_before_initialization(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {
            "status": "not ready",
            "database": "connected",
            "game_initialized": False,
        }

    async def test_ready_once_initialized(self, game_client: AsyncClient) -> None:
        response = await game_client.get("/ready")

        assert response.status_code == 200
        assert response.json()["game_initialized"] is True

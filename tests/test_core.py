"""Tests for the Redis store, revocation and health checks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import redis
from httpx import AsyncClient

from app.core.redis_client import RedisStore


def test_store_set_with_and_without_ttl():
    """Test RedisStore set uses SETEX only when a TTL is given."""
    mock_redis = MagicMock()
    store = RedisStore(redis_client=mock_redis)

    assert store.set("key", "1") is True
    mock_redis.set.assert_called_once_with("key", "1")

    mock_redis.reset_mock()
    assert store.set("key", "1", ttl=60) is True
    mock_redis.setex.assert_called_once_with("key", 60, "1")
    mock_redis.set.assert_not_called()


def test_store_exists():
    """Test RedisStore exists."""
    mock_redis = MagicMock()
    store = RedisStore(redis_client=mock_redis)

    mock_redis.exists.return_value = 1
    assert store.exists("key") is True

    mock_redis.exists.return_value = 0
    assert store.exists("key") is False


def test_store_claim():
    """Test RedisStore claim uses SET NX with expiry and fails open."""
    mock_redis = MagicMock()
    store = RedisStore(redis_client=mock_redis)

    mock_redis.set.return_value = True
    assert store.claim("marker", ttl=120) is True
    mock_redis.set.assert_called_once_with("marker", "1", nx=True, ex=120)

    mock_redis.set.return_value = None
    assert store.claim("marker", ttl=120) is False

    mock_redis.set.side_effect = redis.ConnectionError("down")
    assert store.claim("marker", ttl=120) is True


def test_store_delete():
    """Test RedisStore delete."""
    mock_redis = MagicMock()
    store = RedisStore(redis_client=mock_redis)

    assert store.delete("key") is True
    mock_redis.delete.assert_called_once_with("key")


def test_store_fails_soft():
    """Test RedisStore swallows connection errors."""
    mock_redis = MagicMock()
    mock_redis.setex.side_effect = redis.ConnectionError("down")
    mock_redis.exists.side_effect = redis.ConnectionError("down")
    mock_redis.delete.side_effect = redis.ConnectionError("down")
    store = RedisStore(redis_client=mock_redis)

    assert store.set("key", "1", ttl=60) is False
    assert store.exists("key") is False
    assert store.delete("key") is False


@pytest.mark.asyncio
async def test_logout_writes_blacklist_entry(client: AsyncClient, fake_redis):
    """Test logout stores the refresh token in the blacklist with a TTL."""
    response = await client.post("/api/auth/logout", headers={"Cookie": "refresh_token=abc"})

    assert response.status_code == 200
    assert fake_redis.data["blacklist:abc"] == "1"
    assert fake_redis.ttls["blacklist:abc"] == 86400 * 30


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    """Test health and ping endpoints."""
    health = await client.get("/api/health")
    ping = await client.get("/api/ping")

    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert ping.json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_detailed_health_reports_configuration(client: AsyncClient):
    """Test detailed health lists reminder and video settings."""
    with (
        patch("app.api.v1.endpoints.health.check_database_connection", new=AsyncMock(return_value=True)),
        patch("app.api.v1.endpoints.health.check_redis_connection", new=AsyncMock(return_value=False)),
    ):
        response = await client.get("/api/health/detailed")

    body = response.json()
    assert body["status"] == "degraded"
    assert body["database"] == "healthy"
    assert body["redis"] == "unhealthy"
    assert body["reminders"] == "disabled"
    assert body["video_provider"] == "none"

"""Redis client configuration and utilities."""

import redis

from app.config import settings

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client instance.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """
    Check if Redis connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        client = get_redis_client()
        client.ping()
        return True
    except Exception:
        return False


def close_redis_connection() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class RedisStore:
    """Fail-soft key/value helpers for the refresh token blacklist and reminder markers."""

    def __init__(self, redis_client: redis.Redis):
        """Initialize store with Redis client."""
        self.redis = redis_client

    def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> bool:
        """
        Set value for key.

        Args:
            key: Key name
            value: Value to store
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        try:
            if ttl:
                self.redis.setex(key, ttl, value)
            else:
                self.redis.set(key, value)
            return True
        except Exception:
            return False

    def claim(self, key: str, ttl: int) -> bool:
        """
        Atomically create ``key`` unless it already exists.

        Args:
            key: Marker key
            ttl: Time to live in seconds

        Returns:
            True if this caller created the marker. Also True when Redis is
            unreachable, so callers fail open.
        """
        try:
            return bool(self.redis.set(key, "1", nx=True, ex=ttl))
        except Exception:
            return True

    def delete(self, key: str) -> bool:
        """Delete key."""
        try:
            self.redis.delete(key)
            return True
        except Exception:
            return False

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        try:
            return bool(self.redis.exists(key))
        except Exception:
            return False

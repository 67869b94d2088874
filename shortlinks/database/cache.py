"""Redis cache layer for redirect lookups."""

import json
import logging
from typing import Optional, Dict, Any

import redis.asyncio as redis


class RedisCache:
    """Redis cache mapping short codes to link id and target URL.

    Cache failures are logged and reported as misses.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        timeout_seconds: float = 0.5,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached items
            timeout_seconds: Socket connect and read timeout per call
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if redis_url:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=self.timeout_seconds,
                socket_connect_timeout=self.timeout_seconds,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def get_link(self, short_code: str) -> Optional[Dict[str, Any]]:
        """Get cached link data for a short code.

        Args:
            short_code: The short code

        Returns:
            Dictionary with id and original_url, or None
        """
        if not self.enabled or not self.client:
            return None

        try:
            raw = await self.client.get(self.get_cache_key(short_code))
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache get error: {e}")
            return None

        if not raw:
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            self.logger.warning(f"Discarding malformed cache entry for {short_code}")
            return None

        if not isinstance(data, dict) or "id" not in data or "original_url" not in data:
            return None
        return data

    async def set_link(
        self,
        short_code: str,
        link_id: str,
        original_url: str,
        ttl: Optional[int] = None,
    ) -> bool:
        """Cache link data for a short code.

        Args:
            short_code: The short code
            link_id: Id of the link
            original_url: Redirect target
            ttl: Optional TTL override (seconds)

        Returns:
            True if successful
        """
        if not self.enabled or not self.client:
            return False

        value = json.dumps({"id": link_id, "original_url": original_url})
        try:
            await self.client.setex(self.get_cache_key(short_code), ttl or self.ttl_seconds, value)
            return True
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def delete(self, short_code: str) -> bool:
        """Drop the cache entry for a short code.

        Args:
            short_code: The short code

        Returns:
            True if deleted
        """
        if not self.enabled or not self.client:
            return False

        try:
            result = await self.client.delete(self.get_cache_key(short_code))
            return result > 0
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        """Check the Redis connection."""
        if not self.enabled or not self.client:
            return False

        try:
            return bool(await self.client.ping())
        except (redis.RedisError, OSError) as e:
            self.logger.error(f"Cache ping error: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, short_code: str) -> str:
        """Generate cache key for short code."""
        return f"shortlinks:code:{short_code}"

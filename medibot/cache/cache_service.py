"""Shared Redis cache for read-heavy public collections.

The cache is an optimisation only: when it is disabled or Redis is
unreachable every call degrades to a miss (or a no-op) and the error is
logged, so a request never fails because of the cache.
"""
import json
import logging
from typing import Optional, Any

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from medibot.core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    def __init__(self, url: str | None = None):
        self.redis_url = url or settings.REDIS_URL
        self.redis: Optional[aioredis.Redis] = None

    @property
    def enabled(self) -> bool:
        return settings.CACHE_ENABLED

    async def _client(self) -> Optional[aioredis.Redis]:
        if not self.enabled:
            return None
        if self.redis is None:
            # from_url is lazy; connection errors surface on the first command
            self.redis = aioredis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
            logger.info("Redis cache client created for %s", self.redis_url)
        return self.redis

    async def get_json(self, key: str) -> Any:
        """Cached value for ``key``, or None on a miss."""
        client = await self._client()
        if client is None:
            return None
        try:
            raw = await client.get(key)
        except RedisError as e:
            logger.error("Redis get failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        client = await self._client()
        if client is None:
            return
        try:
            await client.set(key, json.dumps(value), ex=ttl or settings.CACHE_TTL_SECONDS)
        except RedisError as e:
            logger.error("Redis set failed for %s: %s", key, e)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching ``pattern``; returns how many were removed."""
        client = await self._client()
        if client is None:
            return 0
        try:
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                await client.delete(*keys)
            return len(keys)
        except RedisError as e:
            logger.error("Redis delete failed for %s: %s", pattern, e)
            return 0

    async def close(self):
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None


redis_cache = RedisCache()

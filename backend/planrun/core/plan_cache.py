"""
Per-user cache of the training plan calendar view.
Uses Redis (key "training_plan_{user_id}", 15 min TTL); every plan write invalidates the key.
Redis errors never fail the caller: they are logged and the cache is skipped (fail open).
"""

from __future__ import annotations

import json
import logging

from redis.asyncio import from_url
from redis.exceptions import RedisError

from planrun.config import settings

logger = logging.getLogger(__name__)


class PlanCache:
    def __init__(
        self,
        redis_client=None,
        *,
        enabled: bool | None = None,
        ttl_seconds: int | None = None,
        key_prefix: str | None = None,
    ):
        self._client = redis_client
        self.enabled = settings.plan_cache_enabled if enabled is None else enabled
        self.ttl_seconds = ttl_seconds or settings.plan_cache_ttl_seconds
        self.key_prefix = key_prefix or settings.plan_cache_key_prefix

    def key(self, user_id: int) -> str:
        return f"{self.key_prefix}_{user_id}"

    def _get_client(self):
        """Return async Redis client (lazy connect). None if disabled or unavailable."""
        if not self.enabled:
            return None
        if self._client is not None:
            return self._client
        try:
            self._client = from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
        except (RedisError, ValueError) as e:
            logger.warning("Plan cache: Redis unavailable (%s), caching disabled", e)
            return None
        return self._client

    async def invalidate(self, user_id: int) -> None:
        client = self._get_client()
        if client is None:
            return
        try:
            await client.delete(self.key(user_id))
            logger.debug("Plan cache invalidated for user_id=%s", user_id)
        except RedisError as e:
            logger.warning("Plan cache: failed to invalidate user_id=%s: %s", user_id, e)

    async def get(self, user_id: int) -> dict | None:
        client = self._get_client()
        if client is None:
            return None
        try:
            raw = await client.get(self.key(user_id))
        except RedisError as e:
            logger.warning("Plan cache: read failed for user_id=%s: %s", user_id, e)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Plan cache: dropping unreadable entry for user_id=%s", user_id)
            return None

    async def set(self, user_id: int, view: dict) -> None:
        client = self._get_client()
        if client is None:
            return
        try:
            await client.set(self.key(user_id), json.dumps(view, ensure_ascii=False, default=str), ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning("Plan cache: write failed for user_id=%s: %s", user_id, e)

    async def close(self) -> None:
        """Close Redis connection (e.g. on worker shutdown)."""
        if self._client is not None:
            try:
                await self._client.aclose()
            except RedisError as e:
                logger.warning("Plan cache: error closing Redis: %s", e)
            self._client = None


# Lazy process-wide instance
_plan_cache: PlanCache | None = None


def get_plan_cache() -> PlanCache:
    global _plan_cache
    if _plan_cache is None:
        _plan_cache = PlanCache()
    return _plan_cache


async def close_plan_cache() -> None:
    global _plan_cache
    if _plan_cache is not None:
        await _plan_cache.close()
        _plan_cache = None

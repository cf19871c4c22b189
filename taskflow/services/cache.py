"""
Redis cache for per-scope dashboard counters.

Entries are stamped with a generation number. Every task mutation bumps the
generation, which orphans all previously cached counters; the TTL bounds how
long an entry written concurrently with a mutation can be served.
"""

from __future__ import annotations

import hashlib
import logging
from uuid import UUID

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from taskflow.schemas.query import ScopeName, TaskFilters
from taskflow.schemas.task import TaskStatsResponse

logger = logging.getLogger(__name__)

GENERATION_KEY = "taskflow:stats:generation"


def stats_redis_key(
    generation: int,
    identity_id: UUID,
    scope: ScopeName,
    filters: TaskFilters,
) -> str:
    digest = hashlib.sha1(filters.cache_key().encode("utf-8")).hexdigest()[:16]
    return f"taskflow:stats:{generation}:{identity_id}:{scope.value}:{digest}"


class StatsCache:
    def __init__(self, redis: aioredis.Redis, ttl_seconds: int) -> None:
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def _generation(self) -> int:
        value = await self.redis.get(GENERATION_KEY)
        return int(value) if value is not None else 0

    async def get(
        self,
        identity_id: UUID,
        scope: ScopeName,
        filters: TaskFilters,
    ) -> TaskStatsResponse | None:
        try:
            key = stats_redis_key(await self._generation(), identity_id, scope, filters)
            cached = await self.redis.get(key)
        except RedisError as exc:
            logger.warning("Stats cache read failed: %s", exc)
            return None
        if cached is None:
            return None
        return TaskStatsResponse.model_validate_json(cached)

    async def set(
        self,
        identity_id: UUID,
        scope: ScopeName,
        filters: TaskFilters,
        stats: TaskStatsResponse,
    ) -> None:
        try:
            key = stats_redis_key(await self._generation(), identity_id, scope, filters)
            await self.redis.setex(key, self.ttl_seconds, stats.model_dump_json())
        except RedisError as exc:
            logger.warning("Stats cache write failed: %s", exc)

    async def invalidate(self) -> None:
        try:
            await self.redis.incr(GENERATION_KEY)
        except RedisError as exc:
            logger.warning("Stats cache invalidation failed: %s", exc)

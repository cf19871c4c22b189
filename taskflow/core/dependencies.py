"""
FastAPI dependency injection functions.

Provides database sessions, the acting identity, Redis connections and the
workflow services.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.config import settings
from taskflow.core.database import get_db
from taskflow.core.exceptions import NotFound
from taskflow.models.identity import Identity
from taskflow.services.activity_service import ActivityService
from taskflow.services.cache import StatsCache
from taskflow.services.directory import IdentityDirectory
from taskflow.services.events import EventEmitter, get_event_emitter
from taskflow.services.query_service import TaskQueryService
from taskflow.services.review_service import ReviewService
from taskflow.services.task_service import TaskService

# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """
    Return a shared async Redis client.

    Uses a module-level pool so connections are reused across requests.
    """
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            str(settings.REDIS_URL),
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_pool


async def get_stats_cache(redis: aioredis.Redis = Depends(get_redis)) -> StatsCache:
    return StatsCache(redis, ttl_seconds=settings.STATS_CACHE_TTL_SECONDS)


def get_events() -> EventEmitter:
    return get_event_emitter()


# ---------------------------------------------------------------------------
# Acting identity
# ---------------------------------------------------------------------------

async def get_current_identity(
    identity_id: UUID | None = Header(default=None, alias="X-Identity-Id"),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """
    Resolve the acting identity from the X-Identity-Id header.

    Authentication happens upstream; this only looks the identity up in the
    directory. Raises 401 if the header is missing or the identity is
    unknown or inactive.
    """
    if identity_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "MISSING_IDENTITY", "message": "X-Identity-Id header required"},
        )

    try:
        return await IdentityDirectory(db).get_identity(identity_id)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "IDENTITY_NOT_FOUND", "message": "Identity not found or inactive"},
        )


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_task_service(
    db: AsyncSession = Depends(get_db),
    events: EventEmitter = Depends(get_events),
    cache: StatsCache = Depends(get_stats_cache),
) -> TaskService:
    return TaskService(db=db, events=events, cache=cache)


def get_review_service(
    db: AsyncSession = Depends(get_db),
    events: EventEmitter = Depends(get_events),
    cache: StatsCache = Depends(get_stats_cache),
) -> ReviewService:
    return ReviewService(db=db, events=events, cache=cache)


def get_query_service(
    db: AsyncSession = Depends(get_db),
    cache: StatsCache = Depends(get_stats_cache),
) -> TaskQueryService:
    return TaskQueryService(db=db, cache=cache)


def get_activity_service(db: AsyncSession = Depends(get_db)) -> ActivityService:
    return ActivityService(db=db)

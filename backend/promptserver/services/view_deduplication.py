"""View Deduplication — Redis and database implementations of ViewDeduplicator.

Invariants:
    - register_view() returns True exactly once per duplication key within the TTL window
    - Both backends use core/view_identity.duplication_key() so keys are interchangeable

Design Decisions:
    - Redis: SET key NX EX ttl, atomic check-and-mark in one round trip
    - Database fallback: look for a log row with the same viewer_key inside the window;
      the caller inserts the log row, which marks the key
"""

import logging
from datetime import datetime, timedelta, timezone

import redis.asyncio as aioredis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.view_identity import ViewIdentifier, duplication_key
from promptserver.models.prompt_view import PromptViewLog

logger = logging.getLogger(__name__)


class RedisViewDeduplicator:
    """Marks views in Redis with an expiring key."""

    def __init__(self, client: aioredis.Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    async def register_view(self, identifier: ViewIdentifier) -> bool:
        key = duplication_key(identifier)
        created = await self.client.set(key, "1", ex=self.ttl_seconds, nx=True)
        if not created:
            logger.debug(f"Duplicate view ignored: {key}")
        return bool(created)


class DatabaseViewDeduplicator:
    """Checks prompt_view_logs for a recent view by the same viewer."""

    def __init__(self, db: AsyncSession, ttl_seconds: int):
        self.db = db
        self.ttl_seconds = ttl_seconds

    async def register_view(self, identifier: ViewIdentifier) -> bool:
        key = duplication_key(identifier)
        since = datetime.now(timezone.utc) - timedelta(seconds=self.ttl_seconds)
        recent = await self.db.scalar(
            select(PromptViewLog.id)
            .where(PromptViewLog.viewer_key == key)
            .where(PromptViewLog.viewed_at >= since)
            .limit(1),
        )
        if recent is not None:
            logger.debug(f"Duplicate view ignored: {key}")
        return recent is None

"""Redis Client — optional async Redis connection used for view de-duplication.

Invariants:
    - At most one client per process (initialized in lifespan when redis_url is set)
    - get_redis() returns None when Redis is not configured; callers fall back to the DB

Design Decisions:
    - redis.asyncio over a sync client: never blocks the event loop
    - decode_responses=True: keys and values are plain strings
"""

import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

redis_client: aioredis.Redis | None = None


def init_redis(redis_url: str | None) -> aioredis.Redis | None:
    global redis_client
    if not redis_url:
        logger.info("Redis not configured, view de-duplication uses the database")
        redis_client = None
        return None
    redis_client = aioredis.from_url(redis_url, decode_responses=True)
    logger.info("Redis client initialized")
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> aioredis.Redis | None:
    return redis_client

"""API Dependencies — authentication, client identity and service wiring for routes.

Invariants:
    - get_current_user raises AuthenticationError (401) without a valid, unrevoked access token
    - get_optional_user returns None for anonymous callers and for rejected tokens
    - The view deduplicator is Redis-backed when configured, DB-backed otherwise
    - statistics_period(n) fills missing dates with the n days ending today (UTC)

Design Decisions:
    - HTTPBearer(auto_error=False): missing credentials surface as our 401 envelope,
      not FastAPI's default 403
"""

import logging
from datetime import date, datetime, timezone

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.client_ip import extract_client_ip
from promptserver.config import Settings, get_settings
from promptserver.core.commands import StatisticsPeriod
from promptserver.core.errors import AuthenticationError
from promptserver.core.repository_protocols import ViewDeduplicator
from promptserver.infrastructure.database import get_db
from promptserver.infrastructure.redis_client import get_redis
from promptserver.models.user import User
from promptserver.services.auth_service import AuthService
from promptserver.services.view_deduplication import (
    DatabaseViewDeduplicator, RedisViewDeduplicator,
)

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required", "AUTHENTICATION_REQUIRED")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return await auth.authenticate(token)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await auth.authenticate(credentials.credentials)
    except AuthenticationError as e:
        logger.debug(f"Treating caller as anonymous: {e.message}")
        return None


def get_client_ip(request: Request) -> str:
    remote = request.client.host if request.client else None
    return extract_client_ip(request.headers, remote)


def get_view_deduplicator(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ViewDeduplicator:
    client = get_redis()
    if client is not None:
        return RedisViewDeduplicator(client, settings.view_duplication_ttl_seconds)
    return DatabaseViewDeduplicator(db, settings.view_duplication_ttl_seconds)


def statistics_period(default_days: int):
    """Dependency factory: startDate/endDate query params resolved to a StatisticsPeriod."""

    def resolve(
        start_date: date | None = Query(None, alias="startDate"),
        end_date: date | None = Query(None, alias="endDate"),
    ) -> StatisticsPeriod:
        today = datetime.now(timezone.utc).date()
        return StatisticsPeriod.resolve(start_date, end_date, today, default_days)

    return resolve

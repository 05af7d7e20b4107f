"""Dashboard Statistics Service — entity totals with a period-over-period comparison.

Invariants:
    - total_count is the all-time count; the comparison counts rows created inside the period
    - Prompts exclude soft-deleted rows; users count only ACTIVE accounts
    - Team members are ACTIVE users assigned to any team

Design Decisions:
    - One _compare() helper takes a base COUNT statement and the created_at column,
      so each entity only states its filter
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import StatisticsPeriod
from promptserver.core.domain_types import UserStatus
from promptserver.core.view_statistics import (
    ComparisonResult, PeriodStatistics, period_bounds, previous_period,
)
from promptserver.models.favorite import Favorite
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.user import User

logger = logging.getLogger(__name__)


class DashboardStatisticsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def prompt_statistics(self, period: StatisticsPeriod) -> PeriodStatistics:
        stmt = (
            select(func.count(PromptTemplate.id))
            .where(PromptTemplate.deleted_at.is_(None))
        )
        return await self._compare(stmt, PromptTemplate.created_at, period)

    async def favorite_statistics(self, period: StatisticsPeriod) -> PeriodStatistics:
        stmt = select(func.count(Favorite.id))
        return await self._compare(stmt, Favorite.created_at, period)

    async def user_statistics(self, period: StatisticsPeriod) -> PeriodStatistics:
        stmt = select(func.count(User.id)).where(User.status == UserStatus.ACTIVE.value)
        return await self._compare(stmt, User.created_at, period)

    async def team_member_count(self) -> int:
        return await self.db.scalar(
            select(func.count(User.id))
            .where(User.status == UserStatus.ACTIVE.value)
            .where(User.team_id.is_not(None)),
        ) or 0

    async def _compare(self, stmt, created_at, period: StatisticsPeriod) -> PeriodStatistics:
        total = await self.db.scalar(stmt) or 0
        current = await self._count_between(stmt, created_at, period.start, period.end)
        prev_start, prev_end = previous_period(period.start, period.end)
        previous = await self._count_between(stmt, created_at, prev_start, prev_end)
        logger.debug(
            f"Dashboard count for {created_at.class_.__name__}: "
            f"total={total} current={current} previous={previous}",
        )
        return PeriodStatistics(
            total_count=total,
            comparison=ComparisonResult.of(current, previous),
            start=period.start,
            end=period.end,
        )

    async def _count_between(self, stmt, created_at, start, end) -> int:
        since, until = period_bounds(start, end)
        return await self.db.scalar(
            stmt.where(created_at >= since).where(created_at < until),
        ) or 0

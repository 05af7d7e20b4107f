"""View Statistics Service — top-viewed prompts, period totals and weekly dashboard numbers.

Invariants:
    - Periods are inclusive calendar days in UTC: [start 00:00, end+1 00:00)
    - Rankings count only log rows inside the period; all_time_views comes from the counter
    - Deleted prompts are excluded from rankings but their past views still count in totals
    - Weekly numbers compare the current Monday..Sunday week with the previous one
    - Distribution counts every active prompt; prompts never viewed fall in the first range
    - Batch tallies include every requested active prompt, unknown ids are skipped

Design Decisions:
    - Aggregation in SQL (GROUP BY over prompt_view_logs); pure math in core/view_statistics.py
"""

import logging
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select, func, case, and_
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import (
    PromptViewBatchQuery, StatisticsPeriod, ViewStatisticsQuery,
)
from promptserver.core.view_statistics import (
    DEFAULT_VIEW_COUNT_RANGES, ComparisonResult, DailyViewCount, PromptViewTally,
    TopViewedPrompt, ViewCountBucket, WeeklyViewStatistics,
    average_daily, fill_distribution, period_bounds, previous_period, week_bounds,
)
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.prompt_view import PromptViewLog, PromptViewCount
from promptserver.services.prompt_lookup import get_active_template

logger = logging.getLogger(__name__)


class ViewStatisticsService:
    """Aggregated view statistics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_views(
        self, start: date, end: date, category_ids: tuple[int, ...] = (),
    ) -> int:
        since, until = period_bounds(start, end)
        stmt = (
            select(func.count(PromptViewLog.id))
            .where(PromptViewLog.viewed_at >= since)
            .where(PromptViewLog.viewed_at < until)
        )
        if category_ids:
            stmt = (
                stmt.join(PromptTemplate, PromptViewLog.prompt_template_id == PromptTemplate.id)
                .where(PromptTemplate.category_id.in_(category_ids))
            )
        return await self.db.scalar(stmt) or 0

    async def top_viewed(self, query: ViewStatisticsQuery) -> list[TopViewedPrompt]:
        since, until = period_bounds(query.start, query.end)
        views = func.count(PromptViewLog.id).label("views")
        last_viewed = func.max(PromptViewLog.viewed_at).label("last_viewed")
        stmt = (
            select(PromptViewLog.prompt_template_id, views, last_viewed)
            .join(PromptTemplate, PromptViewLog.prompt_template_id == PromptTemplate.id)
            .where(PromptViewLog.viewed_at >= since)
            .where(PromptViewLog.viewed_at < until)
            .where(PromptTemplate.deleted_at.is_(None))
            .group_by(PromptViewLog.prompt_template_id)
            .order_by(views.desc(), PromptViewLog.prompt_template_id.asc())
            .limit(query.limit)
        )
        if query.category_ids:
            stmt = stmt.where(PromptTemplate.category_id.in_(query.category_ids))
        rows = (await self.db.execute(stmt)).all()
        if not rows:
            return []

        ids = [row.prompt_template_id for row in rows]
        templates = {
            t.id: t for t in (await self.db.execute(
                select(PromptTemplate).where(PromptTemplate.id.in_(ids)),
            )).scalars().all()
        }
        all_time = dict((await self.db.execute(
            select(PromptViewCount.prompt_template_id, PromptViewCount.total_view_count)
            .where(PromptViewCount.prompt_template_id.in_(ids)),
        )).all())

        ranking = []
        for rank, row in enumerate(rows, start=1):
            template = templates[row.prompt_template_id]
            ranking.append(TopViewedPrompt(
                rank=rank,
                prompt_uuid=str(template.uuid),
                title=template.title,
                category_name=template.category.display_name if template.category else None,
                total_views=row.views,
                all_time_views=all_time.get(template.id, row.views),
                average_daily_views=average_daily(row.views, query.start, query.end),
                author_name=template.author.name if template.author else None,
                last_viewed_at=row.last_viewed.isoformat() if row.last_viewed else None,
            ))
        return ranking

    async def total(self, query: ViewStatisticsQuery) -> ComparisonResult:
        """Views in the period compared with the preceding period of equal length."""
        current = await self.count_views(query.start, query.end, query.category_ids)
        prev_start, prev_end = previous_period(query.start, query.end)
        previous = await self.count_views(prev_start, prev_end, query.category_ids)
        return ComparisonResult.of(current, previous)

    async def weekly(self, today: date | None = None) -> WeeklyViewStatistics:
        today = today or datetime.now(timezone.utc).date()
        this_start, this_end = week_bounds(today)
        last_start, last_end = this_start - timedelta(days=7), this_start - timedelta(days=1)
        this_week = await self.count_views(this_start, this_end)
        last_week = await self.count_views(last_start, last_end)
        return WeeklyViewStatistics.of(this_week, last_week, today)

    # ─── Per-prompt and distribution ─────────────────────────────

    async def daily(self, prompt_uuid: UUID, period: StatisticsPeriod) -> list[DailyViewCount]:
        """Views per UTC day for one prompt; days without views are omitted."""
        template = await get_active_template(self.db, prompt_uuid)
        since, until = period_bounds(period.start, period.end)
        day = func.date(PromptViewLog.viewed_at).label("day")
        rows = (await self.db.execute(
            select(day, func.count(PromptViewLog.id))
            .where(PromptViewLog.prompt_template_id == template.id)
            .where(PromptViewLog.viewed_at >= since)
            .where(PromptViewLog.viewed_at < until)
            .group_by(day)
            .order_by(day),
        )).all()
        return [DailyViewCount(_as_date(value), count) for value, count in rows]

    async def distribution(self, category_ids: tuple[int, ...] = ()) -> list[ViewCountBucket]:
        """Active prompts per all-time view-count range."""
        total = func.coalesce(PromptViewCount.total_view_count, 0)
        bucket = case(
            *[
                (
                    total >= r.min_count if r.is_unbounded
                    else and_(total >= r.min_count, total <= r.max_count),
                    r.label,
                )
                for r in DEFAULT_VIEW_COUNT_RANGES
            ],
            else_="unknown",
        ).label("bucket")
        per_prompt = (
            select(bucket)
            .select_from(PromptTemplate)
            .outerjoin(PromptViewCount, PromptViewCount.prompt_template_id == PromptTemplate.id)
            .where(PromptTemplate.deleted_at.is_(None))
        )
        if category_ids:
            per_prompt = per_prompt.where(PromptTemplate.category_id.in_(category_ids))
        per_prompt = per_prompt.subquery()
        rows = (await self.db.execute(
            select(per_prompt.c.bucket, func.count()).group_by(per_prompt.c.bucket),
        )).all()
        return fill_distribution(dict(rows))

    async def batch(self, query: PromptViewBatchQuery) -> list[PromptViewTally]:
        """View counts for the requested prompts, most viewed first."""
        templates = (await self.db.execute(
            select(PromptTemplate)
            .where(PromptTemplate.uuid.in_(query.prompt_uuids))
            .where(PromptTemplate.deleted_at.is_(None)),
        )).scalars().all()
        if not templates:
            return []

        stmt = (
            select(PromptViewLog.prompt_template_id, func.count(PromptViewLog.id))
            .where(PromptViewLog.prompt_template_id.in_([t.id for t in templates]))
            .group_by(PromptViewLog.prompt_template_id)
        )
        if query.period is not None:
            since, until = period_bounds(query.period.start, query.period.end)
            stmt = stmt.where(PromptViewLog.viewed_at >= since).where(PromptViewLog.viewed_at < until)
        counts = dict((await self.db.execute(stmt)).all())

        tallies = [
            PromptViewTally(
                prompt_uuid=str(t.uuid),
                title=t.title,
                category_name=t.category.display_name if t.category else None,
                view_count=counts.get(t.id, 0),
            )
            for t in templates
        ]
        return sorted(tallies, key=lambda tally: (-tally.view_count, tally.title))


def _as_date(value) -> date:
    # SQLite returns DATE() as text
    return value if isinstance(value, date) else date.fromisoformat(value)

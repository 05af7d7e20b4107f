"""View Statistics Routes — top-viewed prompts, period totals, daily series and distributions.

Invariants:
    - Missing dates default to the last 7 days ending today (UTC); 30 for daily series
    - start after end -> 400 (ViewStatisticsQuery)
"""

from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import statistics_period
from promptserver.core.commands import (
    PromptViewBatchQuery, StatisticsPeriod, ViewStatisticsQuery,
)
from promptserver.core.domain_types import DEFAULT_STATISTICS_LIMIT
from promptserver.infrastructure.database import get_db
from promptserver.schemas.view import (
    DailyViewCountResponse, DailyViewStatisticsResponse, PromptViewBatchRequest,
    PromptViewTallyResponse, TopViewedPromptResponse, TopViewedPromptsResponse,
    TotalViewStatisticsResponse, ViewCountBucketResponse,
)
from promptserver.services.view_statistics_service import ViewStatisticsService

router = APIRouter(prefix="/api/v1/view-statistics", tags=["view-statistics"])

DEFAULT_PERIOD_DAYS = 7
DAILY_PERIOD_DAYS = 30


def _statistics_query(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    category_ids: list[int] | None = Query(None, alias="categoryIds"),
    limit: int = Query(DEFAULT_STATISTICS_LIMIT, le=100),
) -> ViewStatisticsQuery:
    end = end_date or datetime.now(timezone.utc).date()
    start = start_date or end - timedelta(days=DEFAULT_PERIOD_DAYS - 1)
    return ViewStatisticsQuery(
        start=start, end=end, category_ids=tuple(category_ids or ()), limit=limit,
    )


@router.get("/top-prompts", response_model=TopViewedPromptsResponse)
async def top_prompts(
    query: ViewStatisticsQuery = Depends(_statistics_query),
    db: AsyncSession = Depends(get_db),
):
    ranking = await ViewStatisticsService(db).top_viewed(query)
    return TopViewedPromptsResponse(
        start_date=query.start,
        end_date=query.end,
        prompts=[
            TopViewedPromptResponse(
                rank=p.rank,
                prompt_uuid=p.prompt_uuid,
                title=p.title,
                category_name=p.category_name,
                total_views=p.total_views,
                all_time_views=p.all_time_views,
                average_daily_views=p.average_daily_views,
                author_name=p.author_name,
                last_viewed_at=p.last_viewed_at,
            )
            for p in ranking
        ],
    )


@router.get("/total", response_model=TotalViewStatisticsResponse)
async def total_views(
    query: ViewStatisticsQuery = Depends(_statistics_query),
    db: AsyncSession = Depends(get_db),
):
    comparison = await ViewStatisticsService(db).total(query)
    return TotalViewStatisticsResponse(
        start_date=query.start,
        end_date=query.end,
        total_views=comparison.current,
        previous_period_views=comparison.previous,
        percentage_change=comparison.percentage_change,
    )


@router.get("/daily/{prompt_uuid}", response_model=DailyViewStatisticsResponse)
async def daily_views(
    prompt_uuid: UUID,
    period: StatisticsPeriod = Depends(statistics_period(DAILY_PERIOD_DAYS)),
    db: AsyncSession = Depends(get_db),
):
    days = await ViewStatisticsService(db).daily(prompt_uuid, period)
    return DailyViewStatisticsResponse(
        prompt_uuid=str(prompt_uuid),
        start_date=period.start,
        end_date=period.end,
        daily_views=[DailyViewCountResponse(view_date=d.day, view_count=d.view_count) for d in days],
    )


@router.get("/distribution", response_model=list[ViewCountBucketResponse])
async def view_count_distribution(
    category_ids: list[int] | None = Query(None, alias="categoryIds"),
    db: AsyncSession = Depends(get_db),
):
    buckets = await ViewStatisticsService(db).distribution(tuple(category_ids or ()))
    return [ViewCountBucketResponse(range=b.label, prompt_count=b.prompt_count) for b in buckets]


@router.post("/batch", response_model=list[PromptViewTallyResponse])
async def batch_view_counts(
    body: PromptViewBatchRequest,
    db: AsyncSession = Depends(get_db),
):
    """View counts for up to 100 prompts, in the period when one is given, else all time."""
    query = PromptViewBatchQuery(
        prompt_uuids=tuple(body.prompt_ids), start=body.start_date, end=body.end_date,
    )
    tallies = await ViewStatisticsService(db).batch(query)
    return [
        PromptViewTallyResponse(
            prompt_uuid=t.prompt_uuid,
            title=t.title,
            category_name=t.category_name,
            view_count=t.view_count,
        )
        for t in tallies
    ]

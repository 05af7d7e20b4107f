"""Dashboard Routes — weekly view numbers, entity counts, category statistics and recent prompts.

Invariants:
    - Entity statistics default to the last 7 days ending today (UTC)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import statistics_period
from promptserver.core.commands import StatisticsPeriod
from promptserver.infrastructure.database import get_db
from promptserver.schemas.category import CategoryStatisticsResponse
from promptserver.schemas.prompt import PromptSummaryResponse
from promptserver.schemas.view import (
    PeriodCountStatisticsResponse, TeamMemberStatisticsResponse, WeeklyViewStatisticsResponse,
)
from promptserver.services.category_service import CategoryService
from promptserver.services.dashboard_service import DashboardStatisticsService
from promptserver.services.prompt_query_service import PromptQueryService
from promptserver.services.view_statistics_service import ViewStatisticsService

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])

DEFAULT_PERIOD_DAYS = 7


@router.get("/view-statistics/weekly", response_model=WeeklyViewStatisticsResponse)
async def weekly_view_statistics(db: AsyncSession = Depends(get_db)):
    """This Monday..Sunday week against the previous one."""
    stats = await ViewStatisticsService(db).weekly()
    return WeeklyViewStatisticsResponse.from_stats(stats)


@router.get("/categories/root/statistics", response_model=CategoryStatisticsResponse)
async def root_category_statistics(db: AsyncSession = Depends(get_db)):
    rows = await CategoryService(db).root_statistics()
    return CategoryStatisticsResponse.from_rows(rows)


@router.get(
    "/categories/{root_id}/children/statistics",
    response_model=CategoryStatisticsResponse,
)
async def child_category_statistics(root_id: int, db: AsyncSession = Depends(get_db)):
    rows = await CategoryService(db).child_statistics(root_id)
    return CategoryStatisticsResponse.from_rows(rows)


@router.get("/prompts/recent", response_model=list[PromptSummaryResponse])
async def recent_prompts(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    summaries = await PromptQueryService(db).recent_public(limit)
    return [PromptSummaryResponse.from_summary(s) for s in summaries]


@router.get("/prompt-statistics", response_model=PeriodCountStatisticsResponse)
async def prompt_statistics(
    period: StatisticsPeriod = Depends(statistics_period(DEFAULT_PERIOD_DAYS)),
    db: AsyncSession = Depends(get_db),
):
    stats = await DashboardStatisticsService(db).prompt_statistics(period)
    return PeriodCountStatisticsResponse.from_stats(stats)


@router.get("/favorite-statistics", response_model=PeriodCountStatisticsResponse)
async def favorite_statistics(
    period: StatisticsPeriod = Depends(statistics_period(DEFAULT_PERIOD_DAYS)),
    db: AsyncSession = Depends(get_db),
):
    stats = await DashboardStatisticsService(db).favorite_statistics(period)
    return PeriodCountStatisticsResponse.from_stats(stats)


@router.get("/user-statistics", response_model=PeriodCountStatisticsResponse)
async def user_statistics(
    period: StatisticsPeriod = Depends(statistics_period(DEFAULT_PERIOD_DAYS)),
    db: AsyncSession = Depends(get_db),
):
    """Active accounts; the comparison counts sign-ups per period."""
    stats = await DashboardStatisticsService(db).user_statistics(period)
    return PeriodCountStatisticsResponse.from_stats(stats)


@router.get("/team-member-statistics", response_model=TeamMemberStatisticsResponse)
async def team_member_statistics(db: AsyncSession = Depends(get_db)):
    total = await DashboardStatisticsService(db).team_member_count()
    return TeamMemberStatisticsResponse(total_count=total)

"""View Schemas — view recording and view statistics payloads."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class RecordViewRequest(BaseModel):
    """Optional body; anonymous_id identifies a visitor without an account."""
    anonymous_id: str | None = Field(None, max_length=100)


class ViewRecordResponse(BaseModel):
    prompt_uuid: str
    total_view_count: int
    counted: bool


class ViewCountResponse(BaseModel):
    prompt_uuid: str
    total_view_count: int


class TopViewedPromptResponse(BaseModel):
    rank: int
    prompt_uuid: str
    title: str
    category_name: str | None
    total_views: int
    all_time_views: int
    average_daily_views: float
    author_name: str | None
    last_viewed_at: str | None


class TopViewedPromptsResponse(BaseModel):
    start_date: date
    end_date: date
    prompts: list[TopViewedPromptResponse]


class TotalViewStatisticsResponse(BaseModel):
    start_date: date
    end_date: date
    total_views: int
    previous_period_views: int
    percentage_change: float


class WeeklyViewStatisticsResponse(BaseModel):
    this_week_views: int
    last_week_views: int
    change_count: int
    change_rate: float
    this_week_start: date
    this_week_end: date
    last_week_start: date
    last_week_end: date
    is_increased: bool
    is_decreased: bool
    is_stable: bool

    @classmethod
    def from_stats(cls, stats) -> "WeeklyViewStatisticsResponse":
        return cls(
            this_week_views=stats.this_week_views,
            last_week_views=stats.last_week_views,
            change_count=stats.change_count,
            change_rate=stats.change_rate,
            this_week_start=stats.this_week_start,
            this_week_end=stats.this_week_end,
            last_week_start=stats.last_week_start,
            last_week_end=stats.last_week_end,
            is_increased=stats.is_increased,
            is_decreased=stats.is_decreased,
            is_stable=stats.is_stable,
        )


class DailyViewCountResponse(BaseModel):
    view_date: date
    view_count: int


class DailyViewStatisticsResponse(BaseModel):
    prompt_uuid: str
    start_date: date
    end_date: date
    daily_views: list[DailyViewCountResponse]


class ViewCountBucketResponse(BaseModel):
    range: str
    prompt_count: int


class PromptViewTallyResponse(BaseModel):
    prompt_uuid: str
    title: str
    category_name: str | None
    view_count: int


class PromptViewBatchRequest(BaseModel):
    prompt_ids: list[UUID]
    start_date: date | None = None
    end_date: date | None = None


class PeriodCountStatisticsResponse(BaseModel):
    """All-time total plus the period count against the preceding period."""
    start_date: date
    end_date: date
    total_count: int
    current_count: int
    previous_count: int
    percentage_change: float

    @classmethod
    def from_stats(cls, stats) -> "PeriodCountStatisticsResponse":
        return cls(
            start_date=stats.start,
            end_date=stats.end,
            total_count=stats.total_count,
            current_count=stats.comparison.current,
            previous_count=stats.comparison.previous,
            percentage_change=stats.comparison.percentage_change,
        )


class TeamMemberStatisticsResponse(BaseModel):
    total_count: int

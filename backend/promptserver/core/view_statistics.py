"""View Statistics — pure period arithmetic, comparisons and value objects for dashboards.

Invariants:
    - A period [start, end] covers whole UTC days: [start 00:00, end+1 00:00)
    - Percentage change vs a zero baseline: 100.0 if current > 0, else 0.0
    - Weekly change rate rounded to 2 decimals
    - Weeks run Monday..Sunday (ISO)
    - previous_period() has the same length as the input period and ends the day before it
    - View-count ranges are contiguous from 0; the last one is unbounded

Design Decisions:
    - Frozen dataclasses with of() factories: callers never compute rates inline
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from promptserver.core.errors import InvalidCommandError


def _change_rate(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100.0


def week_bounds(today: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing `today`."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def period_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open UTC datetime range covering the days start..end."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def previous_period(start: date, end: date) -> tuple[date, date]:
    days = (end - start).days + 1
    prev_end = start - timedelta(days=1)
    return prev_end - timedelta(days=days - 1), prev_end


@dataclass(frozen=True)
class ComparisonResult:
    current: int
    previous: int
    percentage_change: float

    @classmethod
    def of(cls, current: int, previous: int) -> "ComparisonResult":
        return cls(current, previous, _change_rate(current, previous))

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "previous": self.previous,
            "percentage_change": self.percentage_change,
        }


@dataclass(frozen=True)
class WeeklyViewStatistics:
    this_week_views: int
    last_week_views: int
    change_count: int
    change_rate: float
    this_week_start: date
    this_week_end: date
    last_week_start: date
    last_week_end: date

    @classmethod
    def of(cls, this_week: int, last_week: int, today: date) -> "WeeklyViewStatistics":
        start, end = week_bounds(today)
        return cls(
            this_week_views=this_week,
            last_week_views=last_week,
            change_count=this_week - last_week,
            change_rate=round(_change_rate(this_week, last_week), 2),
            this_week_start=start,
            this_week_end=end,
            last_week_start=start - timedelta(days=7),
            last_week_end=start - timedelta(days=1),
        )

    @property
    def is_increased(self) -> bool:
        return self.change_count > 0

    @property
    def is_decreased(self) -> bool:
        return self.change_count < 0

    @property
    def is_stable(self) -> bool:
        return self.change_count == 0


@dataclass(frozen=True)
class TopViewedPrompt:
    """One row of the top-viewed ranking. Ranks start at 1."""
    rank: int
    prompt_uuid: str
    title: str
    category_name: str | None
    total_views: int
    all_time_views: int
    average_daily_views: float
    author_name: str | None
    last_viewed_at: str | None = None

    def __post_init__(self):
        if self.rank <= 0:
            raise InvalidCommandError("Rank must be positive", "rank")
        if self.total_views < 0 or self.all_time_views < 0:
            raise InvalidCommandError("View counts must not be negative", "total_views")


def average_daily(views: int, start: date, end: date) -> float:
    days = (end - start).days + 1
    return round(views / days, 2) if days > 0 else 0.0


@dataclass(frozen=True)
class PeriodStatistics:
    """All-time total plus the period count compared with the preceding period."""
    total_count: int
    comparison: ComparisonResult
    start: date
    end: date

    def __post_init__(self):
        if self.total_count < 0:
            raise InvalidCommandError("Total count must not be negative", "total_count")


# ─── Distribution ────────────────────────────────────────────────

@dataclass(frozen=True)
class ViewCountRange:
    min_count: int
    max_count: int | None
    label: str

    def __post_init__(self):
        if self.min_count < 0:
            raise InvalidCommandError("Range minimum must not be negative", "min_count")
        if self.max_count is not None and self.max_count < self.min_count:
            raise InvalidCommandError("Range maximum is below its minimum", "max_count")

    @property
    def is_unbounded(self) -> bool:
        return self.max_count is None

    def contains(self, count: int) -> bool:
        return count >= self.min_count and (self.is_unbounded or count <= self.max_count)


DEFAULT_VIEW_COUNT_RANGES: tuple[ViewCountRange, ...] = (
    ViewCountRange(0, 10, "0-10"),
    ViewCountRange(11, 50, "11-50"),
    ViewCountRange(51, 100, "51-100"),
    ViewCountRange(101, 500, "101-500"),
    ViewCountRange(501, 1000, "501-1000"),
    ViewCountRange(1001, None, "1000+"),
)


@dataclass(frozen=True)
class ViewCountBucket:
    label: str
    prompt_count: int


def fill_distribution(
    counts_by_label: dict[str, int],
    ranges: tuple[ViewCountRange, ...] = DEFAULT_VIEW_COUNT_RANGES,
) -> list[ViewCountBucket]:
    """One bucket per range in range order; ranges without prompts report 0."""
    return [ViewCountBucket(r.label, counts_by_label.get(r.label, 0)) for r in ranges]


# ─── Per-prompt series ───────────────────────────────────────────

@dataclass(frozen=True)
class DailyViewCount:
    day: date
    view_count: int


@dataclass(frozen=True)
class PromptViewTally:
    prompt_uuid: str
    title: str
    category_name: str | None
    view_count: int

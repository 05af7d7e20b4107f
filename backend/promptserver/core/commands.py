"""Commands & Queries — immutable use-case inputs that validate themselves on construction.

Invariants:
    - Every command is a frozen dataclass; __post_init__ raises InvalidCommandError
    - RecordViewCommand requires a user id or a non-blank anonymous id, plus an IP
    - Category ids are positive; a category can never be its own parent
    - Page >= 0 and 1 <= size <= 100 for every paged query
    - Statistics periods never end before they start

Design Decisions:
    - Normalization (strip, de-dup, lower-case) happens here via object.__setattr__
      so services receive canonical values (ADR: one place to trust input)
    - Visibility/status stay raw strings on RegisterPromptCommand: their defaults
      depend on the author's team, which only the service knows
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from uuid import UUID

from promptserver.core.domain_types import (
    PromptStatus, PromptSortType, Visibility, FavoriteSortField, SortOrder,
    MAX_PAGE_SIZE, DEFAULT_STATISTICS_LIMIT, CATEGORY_NAME_MAX_LENGTH, MAX_BATCH_PROMPTS,
)
from promptserver.core.errors import InvalidCommandError
from promptserver.core.prompt_rules import (
    InputVariable, validate_title, validate_description, validate_content,
    validate_input_variables, normalize_tag_names,
)
from promptserver.core.user_rules import normalize_email, validate_password


def _require(condition: bool, message: str, field_name: str) -> None:
    if not condition:
        raise InvalidCommandError(message, field_name)


def _validate_paging(page: int, size: int) -> None:
    _require(page >= 0, "Page must not be negative", "page")
    _require(
        1 <= size <= MAX_PAGE_SIZE,
        f"Size must be between 1 and {MAX_PAGE_SIZE}", "size",
    )


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


# ─── Prompt commands ─────────────────────────────────────────────

@dataclass(frozen=True)
class RegisterPromptCommand:
    title: str
    description: str
    content: str
    author_id: int
    category_id: int
    tags: tuple[str, ...] = ()
    input_variables: tuple[InputVariable, ...] = ()
    visibility: str | None = None
    status: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "title", validate_title(self.title))
        _require(not _blank(self.description), "Description must not be blank", "description")
        validate_description(self.description)
        validate_content(self.content)
        _require(self.author_id is not None, "Author is required", "author_id")
        _require(
            self.category_id is not None and self.category_id > 0,
            "Category id must be positive", "category_id",
        )
        object.__setattr__(self, "tags", normalize_tag_names(self.tags))
        object.__setattr__(
            self, "input_variables", validate_input_variables(self.input_variables),
        )


@dataclass(frozen=True)
class UpdatePromptCommand:
    prompt_uuid: UUID
    editor_id: int
    title: str
    content: str
    category_id: int
    visibility: Visibility
    status: PromptStatus
    description: str | None = None
    tags: tuple[str, ...] = ()
    input_variables: tuple[InputVariable, ...] = ()

    def __post_init__(self):
        _require(self.prompt_uuid is not None, "Prompt id is required", "prompt_uuid")
        _require(self.editor_id is not None, "Editor is required", "editor_id")
        object.__setattr__(self, "title", validate_title(self.title))
        validate_description(self.description)
        validate_content(self.content)
        _require(
            self.category_id is not None and self.category_id > 0,
            "Category id must be positive", "category_id",
        )
        _require(isinstance(self.visibility, Visibility), "Visibility is required", "visibility")
        _require(isinstance(self.status, PromptStatus), "Status is required", "status")
        object.__setattr__(self, "tags", normalize_tag_names(self.tags))
        object.__setattr__(
            self, "input_variables", validate_input_variables(self.input_variables),
        )


@dataclass(frozen=True)
class DeletePromptCommand:
    prompt_uuid: UUID
    user_id: int

    def __post_init__(self):
        _require(self.prompt_uuid is not None, "Prompt id is required", "prompt_uuid")
        _require(self.user_id is not None, "User is required", "user_id")


# ─── View commands ───────────────────────────────────────────────

@dataclass(frozen=True)
class RecordViewCommand:
    """A single prompt view by a logged-in user or an anonymous visitor."""
    prompt_uuid: UUID
    ip_address: str
    user_id: int | None = None
    anonymous_id: str | None = None

    def __post_init__(self):
        _require(self.prompt_uuid is not None, "Prompt id is required", "prompt_uuid")
        _require(not _blank(self.ip_address), "IP address must not be blank", "ip_address")
        if self.user_id is None and _blank(self.anonymous_id):
            raise InvalidCommandError(
                "Either userId or anonymousId must be provided", "user_id",
            )

    @classmethod
    def for_user(cls, prompt_uuid: UUID, user_id: int, ip_address: str) -> "RecordViewCommand":
        return cls(prompt_uuid=prompt_uuid, ip_address=ip_address, user_id=user_id)

    @classmethod
    def for_guest(
        cls, prompt_uuid: UUID, anonymous_id: str, ip_address: str,
    ) -> "RecordViewCommand":
        return cls(prompt_uuid=prompt_uuid, ip_address=ip_address, anonymous_id=anonymous_id)

    @property
    def is_logged_in_user(self) -> bool:
        return self.user_id is not None

    @property
    def is_anonymous_user(self) -> bool:
        return self.user_id is None and not _blank(self.anonymous_id)


# ─── Category commands ───────────────────────────────────────────

@dataclass(frozen=True)
class CreateCategoryCommand:
    name: str
    display_name: str
    description: str | None = None
    parent_category_id: int | None = None

    def __post_init__(self):
        _require(not _blank(self.name), "Category name must not be blank", "name")
        _require(
            not _blank(self.display_name), "Display name must not be blank", "display_name",
        )
        for field_name in ("name", "display_name"):
            _require(
                len(getattr(self, field_name).strip()) <= CATEGORY_NAME_MAX_LENGTH,
                f"Must be at most {CATEGORY_NAME_MAX_LENGTH} characters", field_name,
            )
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "display_name", self.display_name.strip())


@dataclass(frozen=True)
class UpdateCategoryCommand:
    category_id: int
    display_name: str
    description: str | None = None
    parent_category_id: int | None = None

    def __post_init__(self):
        _require(self.category_id is not None, "Category id is required", "category_id")
        _require(
            not _blank(self.display_name), "Display name must not be blank", "display_name",
        )
        if self.parent_category_id is not None and self.parent_category_id == self.category_id:
            raise InvalidCommandError(
                "A category cannot be its own parent", "parent_category_id",
                code="CIRCULAR_REFERENCE",
            )
        object.__setattr__(self, "display_name", self.display_name.strip())


# ─── Auth commands ───────────────────────────────────────────────

@dataclass(frozen=True)
class SignUpCommand:
    email: str
    password: str
    name: str

    def __post_init__(self):
        object.__setattr__(self, "email", normalize_email(self.email))
        validate_password(self.password)
        _require(not _blank(self.name), "Name must not be blank", "name")
        object.__setattr__(self, "name", self.name.strip())


@dataclass(frozen=True)
class LoginCommand:
    email: str
    password: str
    ip_address: str | None = None
    user_agent: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "email", normalize_email(self.email))
        _require(bool(self.password), "Password must not be blank", "password")


# ─── Queries ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class PromptSearchQuery:
    """Public prompt search. Status defaults to PUBLISHED."""
    title: str | None = None
    description: str | None = None
    tag: str | None = None
    category_id: int | None = None
    status: PromptStatus = PromptStatus.PUBLISHED
    sort_type: PromptSortType = PromptSortType.LATEST_MODIFIED
    page: int = 0
    size: int = 20

    def __post_init__(self):
        _validate_paging(self.page, self.size)
        if self.category_id is not None:
            _require(self.category_id > 0, "Category id must be positive", "category_id")


@dataclass(frozen=True)
class MyPromptSearchQuery:
    user_id: int
    status_filters: tuple[PromptStatus, ...] = ()
    visibility_filters: tuple[Visibility, ...] = ()
    search_keyword: str | None = None
    sort_type: PromptSortType = PromptSortType.LATEST_MODIFIED
    page: int = 0
    size: int = 20

    def __post_init__(self):
        _require(self.user_id is not None, "User is required", "user_id")
        _validate_paging(self.page, self.size)


@dataclass(frozen=True)
class FavoriteSearchQuery:
    user_id: int
    search_keyword: str | None = None
    sort: FavoriteSortField = FavoriteSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC
    page: int = 0
    size: int = 20

    def __post_init__(self):
        _require(self.user_id is not None, "User is required", "user_id")
        _validate_paging(self.page, self.size)


@dataclass(frozen=True)
class ViewStatisticsQuery:
    """Period for view statistics; limit <= 0 falls back to the default."""
    start: date
    end: date
    category_ids: tuple[int, ...] = field(default_factory=tuple)
    limit: int = DEFAULT_STATISTICS_LIMIT

    def __post_init__(self):
        _require(
            self.start is not None and self.end is not None,
            "Start and end dates are required", "start",
        )
        _require(self.start <= self.end, "Start date must not be after end date", "start")
        if self.limit is None or self.limit <= 0:
            object.__setattr__(self, "limit", DEFAULT_STATISTICS_LIMIT)


@dataclass(frozen=True)
class StatisticsPeriod:
    """Inclusive day range for dashboard and per-prompt statistics."""
    start: date
    end: date

    def __post_init__(self):
        _require(
            self.start is not None and self.end is not None,
            "Start and end dates are required", "start",
        )
        _require(self.start <= self.end, "Start date must not be after end date", "start")

    @classmethod
    def resolve(
        cls, start: date | None, end: date | None, today: date, default_days: int,
    ) -> "StatisticsPeriod":
        """Missing end -> today; missing start -> default_days ending at end."""
        end = end or today
        return cls(start or end - timedelta(days=default_days - 1), end)


@dataclass(frozen=True)
class PromptViewBatchQuery:
    """View counts for several prompts; the period is optional but all-or-nothing."""
    prompt_uuids: tuple[UUID, ...]
    start: date | None = None
    end: date | None = None

    def __post_init__(self):
        uuids = tuple(dict.fromkeys(self.prompt_uuids or ()))
        _require(bool(uuids), "At least one prompt id is required", "prompt_ids")
        _require(
            len(uuids) <= MAX_BATCH_PROMPTS,
            f"At most {MAX_BATCH_PROMPTS} prompt ids per request", "prompt_ids",
        )
        _require(
            (self.start is None) == (self.end is None),
            "Start and end dates must be given together", "start",
        )
        if self.start is not None:
            _require(self.start <= self.end, "Start date must not be after end date", "start")
        object.__setattr__(self, "prompt_uuids", uuids)

    @property
    def period(self) -> StatisticsPeriod | None:
        if self.start is None:
            return None
        return StatisticsPeriod(self.start, self.end)

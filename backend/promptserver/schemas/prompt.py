"""Prompt Schemas — prompt template, version and engagement payloads.

Invariants:
    - Register accepts raw visibility/status strings (lenient parse with defaults)
    - Update requires valid Visibility and PromptStatus values (strict, 400 otherwise)
    - Responses expose uuids only, never internal integer ids of prompts or users

Design Decisions:
    - from_* classmethods keep ORM -> schema mapping next to the schema it builds
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from promptserver.core.domain_types import (
    PromptStatus, Visibility,
    TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH, CONTENT_MAX_LENGTH,
)
from promptserver.core.prompt_rules import InputVariable


class InputVariableSchema(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: str = Field("string", max_length=50)
    description: str | None = Field(None, max_length=500)
    required: bool = False
    default_value: str | None = None

    def to_domain(self) -> InputVariable:
        return InputVariable(
            name=self.name, type=self.type, description=self.description,
            required=self.required, default_value=self.default_value,
        )

    @classmethod
    def from_stored(cls, data: dict) -> "InputVariableSchema":
        var = InputVariable.from_dict(data)
        return cls(
            name=var.name, type=var.type, description=var.description,
            required=var.required, default_value=var.default_value,
        )


# --- Requests -----------------------------------------------------------------

class PromptCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    category_id: int
    tags: list[str] = Field(default_factory=list)
    input_variables: list[InputVariableSchema] = Field(default_factory=list)
    visibility: str | None = None
    status: str | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty or whitespace")
        return v


class PromptUpdateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    category_id: int
    visibility: Visibility
    status: PromptStatus
    tags: list[str] = Field(default_factory=list)
    input_variables: list[InputVariableSchema] = Field(default_factory=list)


# --- Nested views -------------------------------------------------------------

class CategorySummary(BaseModel):
    id: int
    name: str
    display_name: str


class AuthorSummary(BaseModel):
    uuid: UUID
    name: str


class EngagementStatsResponse(BaseModel):
    view_count: int = 0
    favorite_count: int = 0
    like_count: int = 0


def _category(template) -> CategorySummary | None:
    c = template.category
    return CategorySummary(id=c.id, name=c.name, display_name=c.display_name) if c else None


def _author(template) -> AuthorSummary | None:
    a = template.author
    return AuthorSummary(uuid=a.uuid, name=a.name) if a else None


def _variables(version) -> list[InputVariableSchema]:
    if version is None:
        return []
    return [InputVariableSchema.from_stored(v) for v in version.input_variables or []]


# --- Responses ----------------------------------------------------------------

class PromptResponse(BaseModel):
    """Returned by register and update."""
    uuid: UUID
    title: str
    description: str | None
    content: str
    category_id: int | None
    tags: list[str]
    input_variables: list[InputVariableSchema]
    visibility: str
    status: str
    version_number: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_result(cls, template, version) -> "PromptResponse":
        return cls(
            uuid=template.uuid,
            title=template.title,
            description=template.description,
            content=version.content,
            category_id=template.category_id,
            tags=[t.name for t in template.tags],
            input_variables=_variables(version),
            visibility=template.visibility,
            status=template.status,
            version_number=version.version_number,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class PromptDetailResponse(BaseModel):
    uuid: UUID
    title: str
    description: str | None
    content: str | None
    input_variables: list[InputVariableSchema]
    version_number: int | None
    author: AuthorSummary | None
    category: CategorySummary | None
    tags: list[str]
    visibility: str
    status: str
    stats: EngagementStatsResponse
    is_favorite: bool
    is_liked: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_detail(cls, detail) -> "PromptDetailResponse":
        t, v = detail.template, detail.version
        return cls(
            uuid=t.uuid,
            title=t.title,
            description=t.description,
            content=v.content if v else None,
            input_variables=_variables(v),
            version_number=v.version_number if v else None,
            author=_author(t),
            category=_category(t),
            tags=[tag.name for tag in t.tags],
            visibility=t.visibility,
            status=t.status,
            stats=EngagementStatsResponse(
                view_count=detail.stats.view_count,
                favorite_count=detail.stats.favorite_count,
                like_count=detail.stats.like_count,
            ),
            is_favorite=detail.is_favorite,
            is_liked=detail.is_liked,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )


class PromptSummaryResponse(BaseModel):
    uuid: UUID
    title: str
    description: str | None
    author: AuthorSummary | None
    category: CategorySummary | None
    tags: list[str]
    visibility: str
    status: str
    stats: EngagementStatsResponse
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_summary(cls, summary) -> "PromptSummaryResponse":
        t = summary.template
        return cls(
            uuid=t.uuid,
            title=t.title,
            description=t.description,
            author=_author(t),
            category=_category(t),
            tags=[tag.name for tag in t.tags],
            visibility=t.visibility,
            status=t.status,
            stats=EngagementStatsResponse(
                view_count=summary.stats.view_count,
                favorite_count=summary.stats.favorite_count,
                like_count=summary.stats.like_count,
            ),
            created_at=t.created_at,
            updated_at=t.updated_at,
        )


class PromptDeleteResponse(BaseModel):
    uuid: UUID
    title: str
    previous_status: str
    deleted_at: datetime


class PromptVersionResponse(BaseModel):
    uuid: UUID
    version_number: int
    content: str
    changes: str | None
    input_variables: list[InputVariableSchema]
    action_type: str
    created_at: datetime

    @classmethod
    def from_version(cls, version) -> "PromptVersionResponse":
        return cls(
            uuid=version.uuid,
            version_number=version.version_number,
            content=version.content,
            changes=version.changes,
            input_variables=_variables(version),
            action_type=version.action_type,
            created_at=version.created_at,
        )


class MyPromptStatisticsResponse(BaseModel):
    total_count: int
    draft_count: int
    published_count: int
    archived_count: int


class BookmarkedPromptResponse(BaseModel):
    """A prompt in the caller's favorites or likes, with the time it was marked."""
    uuid: UUID
    title: str
    description: str | None
    author: AuthorSummary | None
    category: CategorySummary | None
    tags: list[str]
    visibility: str
    status: str
    marked_at: datetime

    @classmethod
    def from_row(cls, row) -> "BookmarkedPromptResponse":
        t, marked_at = row
        return cls(
            uuid=t.uuid,
            title=t.title,
            description=t.description,
            author=_author(t),
            category=_category(t),
            tags=[tag.name for tag in t.tags],
            visibility=t.visibility,
            status=t.status,
            marked_at=marked_at,
        )


class FavoriteActionResponse(BaseModel):
    prompt_uuid: UUID
    favorited: bool
    favorite_count: int


class LikeStatusResponse(BaseModel):
    prompt_uuid: UUID
    liked: bool
    like_count: int


class CountResponse(BaseModel):
    count: int


class TagResponse(BaseModel):
    id: int
    name: str

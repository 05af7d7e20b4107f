"""Category Schemas — create/update payloads and category views."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from promptserver.core.domain_types import CATEGORY_NAME_MAX_LENGTH


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=CATEGORY_NAME_MAX_LENGTH)
    display_name: str = Field(min_length=1, max_length=CATEGORY_NAME_MAX_LENGTH)
    description: str | None = Field(None, max_length=500)
    parent_category_id: int | None = Field(None, gt=0)


class CategoryUpdateRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=CATEGORY_NAME_MAX_LENGTH)
    description: str | None = Field(None, max_length=500)
    parent_category_id: int | None = Field(None, gt=0)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str | None
    is_system: bool
    parent_category_id: int | None
    created_at: datetime
    updated_at: datetime


class CategoryStatisticsItem(BaseModel):
    category_id: int
    name: str
    display_name: str
    prompt_count: int


class CategoryStatisticsResponse(BaseModel):
    categories: list[CategoryStatisticsItem]
    total_prompt_count: int

    @classmethod
    def from_rows(cls, rows) -> "CategoryStatisticsResponse":
        items = [
            CategoryStatisticsItem(
                category_id=c.id, name=c.name,
                display_name=c.display_name, prompt_count=count,
            )
            for c, count in rows
        ]
        return cls(categories=items, total_prompt_count=sum(i.prompt_count for i in items))

"""My Prompt Routes — the caller's own prompts, favorites and statistics.

Invariants:
    - Every endpoint requires authentication
    - Registered before prompts.router so /my is not parsed as a prompt uuid
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import get_current_user
from promptserver.core.commands import MyPromptSearchQuery, FavoriteSearchQuery
from promptserver.core.domain_types import (
    FavoriteSortField, PromptSortType, PromptStatus, SortOrder, Visibility, MAX_PAGE_SIZE,
)
from promptserver.core.errors import InvalidCommandError
from promptserver.infrastructure.database import get_db
from promptserver.models.user import User
from promptserver.schemas.common import PageResponse
from promptserver.schemas.prompt import (
    PromptSummaryResponse, MyPromptStatisticsResponse, BookmarkedPromptResponse,
    CountResponse,
)
from promptserver.services.favorite_service import FavoriteService
from promptserver.services.like_service import LikeService
from promptserver.services.prompt_query_service import PromptQueryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/prompts/my", tags=["my-prompts"])


def _parse_filters(values: list[str] | None, enum_cls, field_name: str) -> tuple:
    """Strict parse for explicit filters: an unknown value is a client error."""
    parsed = []
    for value in values or []:
        item = enum_cls.from_string(value)
        if item is None:
            raise InvalidCommandError(f"Unknown {field_name}: {value}", field_name)
        parsed.append(item)
    return tuple(parsed)


@router.get("", response_model=PageResponse[PromptSummaryResponse])
async def list_my_prompts(
    status_filters: list[str] | None = Query(None, alias="status"),
    visibility_filters: list[str] | None = Query(None, alias="visibility"),
    keyword: str | None = Query(None, max_length=200),
    sort_type: str | None = Query(None, alias="sortType"),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = MyPromptSearchQuery(
        user_id=user.id,
        status_filters=_parse_filters(status_filters, PromptStatus, "status"),
        visibility_filters=_parse_filters(visibility_filters, Visibility, "visibility"),
        search_keyword=keyword,
        sort_type=PromptSortType.from_string(sort_type, PromptSortType.LATEST_MODIFIED),
        page=page,
        size=size,
    )
    result = await PromptQueryService(db).my_prompts(query)
    return PageResponse.from_page(result, PromptSummaryResponse.from_summary)


@router.get("/statistics", response_model=MyPromptStatisticsResponse)
async def my_statistics(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return MyPromptStatisticsResponse(**await PromptQueryService(db).my_statistics(user.id))


@router.get("/like-statistics", response_model=CountResponse)
async def my_like_statistics(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Total likes received across the caller's prompts."""
    return CountResponse(count=await LikeService(db).total_received(user.id))


@router.get("/favorites", response_model=PageResponse[BookmarkedPromptResponse])
async def my_favorites(
    keyword: str | None = Query(None, max_length=200),
    sort: str | None = Query(None),
    order: str | None = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = FavoriteSearchQuery(
        user_id=user.id,
        search_keyword=keyword,
        sort=FavoriteSortField.from_string(sort, FavoriteSortField.CREATED_AT),
        order=SortOrder.from_string(order, SortOrder.DESC),
        page=page,
        size=size,
    )
    result = await FavoriteService(db).list_favorites(query)
    return PageResponse.from_page(result, BookmarkedPromptResponse.from_row)


@router.get("/favorites/count", response_model=CountResponse)
async def my_favorite_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await FavoriteService(db).count_favorites(user.id))

"""Like Routes — like/unlike, like status and the caller's liked prompts.

Invariants:
    - Registered before prompts.router so /liked is not parsed as a prompt uuid
    - like-status works for anonymous callers (liked=false)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import get_current_user, get_optional_user
from promptserver.core.domain_types import MAX_PAGE_SIZE
from promptserver.infrastructure.database import get_db
from promptserver.models.user import User
from promptserver.schemas.common import PageResponse
from promptserver.schemas.prompt import BookmarkedPromptResponse, LikeStatusResponse
from promptserver.services.like_service import LikeService, LikeStatus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/prompts", tags=["likes"])


def _status(result: LikeStatus) -> LikeStatusResponse:
    return LikeStatusResponse(
        prompt_uuid=result.prompt_uuid, liked=result.liked, like_count=result.like_count,
    )


@router.get("/liked", response_model=PageResponse[BookmarkedPromptResponse])
async def liked_prompts(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await LikeService(db).liked_prompts(user.id, page, size)
    return PageResponse.from_page(result, BookmarkedPromptResponse.from_row)


@router.post("/{prompt_uuid}/like", response_model=LikeStatusResponse)
async def like_prompt(
    prompt_uuid: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _status(await LikeService(db).like(user, prompt_uuid))


@router.delete("/{prompt_uuid}/like", response_model=LikeStatusResponse)
async def unlike_prompt(
    prompt_uuid: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _status(await LikeService(db).unlike(user, prompt_uuid))


@router.get("/{prompt_uuid}/like-status", response_model=LikeStatusResponse)
async def like_status(
    prompt_uuid: UUID,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return _status(await LikeService(db).status(prompt_uuid, viewer))

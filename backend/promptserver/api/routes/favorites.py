"""Favorite Routes — add/remove a prompt from the caller's favorites."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import get_current_user
from promptserver.infrastructure.database import get_db
from promptserver.models.user import User
from promptserver.schemas.prompt import FavoriteActionResponse
from promptserver.services.favorite_service import FavoriteService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/prompts", tags=["favorites"])


@router.post(
    "/{prompt_uuid}/favorite", response_model=FavoriteActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_favorite(
    prompt_uuid: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await FavoriteService(db).add(user, prompt_uuid)
    return FavoriteActionResponse(prompt_uuid=prompt_uuid, favorited=True, favorite_count=count)


@router.delete("/{prompt_uuid}/favorite", response_model=FavoriteActionResponse)
async def remove_favorite(
    prompt_uuid: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await FavoriteService(db).remove(user, prompt_uuid)
    return FavoriteActionResponse(prompt_uuid=prompt_uuid, favorited=False, favorite_count=count)

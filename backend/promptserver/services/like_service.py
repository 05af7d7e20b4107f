"""Like Service — like/unlike prompts, like status and liked-prompt listings.

Invariants:
    - One like per (user, prompt): a second like raises DuplicateResourceError (409)
    - Unliking a prompt that is not liked raises ResourceNotFoundError (404)
    - Like counts are always COUNT(*) over prompt_likes
    - Anonymous callers get liked=False with the public count
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.errors import DuplicateResourceError, ResourceNotFoundError
from promptserver.core.pagination import Page
from promptserver.infrastructure.database import unique_violation_as_conflict
from promptserver.models.prompt_like import PromptLike
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.user import User
from promptserver.services.pagination import paginate
from promptserver.services.prompt_lookup import (
    get_active_template, ensure_can_view, like_count,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LikeStatus:
    prompt_uuid: UUID
    liked: bool
    like_count: int


class LikeService:
    """Like commands and queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, user_id: int, prompt_id: int) -> PromptLike | None:
        return await self.db.scalar(
            select(PromptLike)
            .where(PromptLike.user_id == user_id)
            .where(PromptLike.prompt_template_id == prompt_id),
        )

    async def like(self, user: User, prompt_uuid: UUID) -> LikeStatus:
        template = await get_active_template(self.db, prompt_uuid)
        ensure_can_view(template, user)
        if await self._find(user.id, template.id) is not None:
            raise DuplicateResourceError("Like", "Prompt is already liked")
        self.db.add(PromptLike(user_id=user.id, prompt_template_id=template.id))
        async with unique_violation_as_conflict(self.db, "Like", "Prompt is already liked"):
            await self.db.commit()
        logger.info("Prompt liked", extra={"user_id": user.id, "prompt_uuid": prompt_uuid})
        return LikeStatus(prompt_uuid, True, await like_count(self.db, template.id))

    async def unlike(self, user: User, prompt_uuid: UUID) -> LikeStatus:
        template = await get_active_template(self.db, prompt_uuid)
        like = await self._find(user.id, template.id)
        if like is None:
            raise ResourceNotFoundError("Like", str(prompt_uuid))
        await self.db.delete(like)
        await self.db.commit()
        logger.info("Prompt unliked", extra={"user_id": user.id, "prompt_uuid": prompt_uuid})
        return LikeStatus(prompt_uuid, False, await like_count(self.db, template.id))

    async def status(self, prompt_uuid: UUID, viewer: User | None) -> LikeStatus:
        template = await get_active_template(self.db, prompt_uuid)
        ensure_can_view(template, viewer)
        liked = viewer is not None and await self._find(viewer.id, template.id) is not None
        return LikeStatus(prompt_uuid, liked, await like_count(self.db, template.id))

    async def liked_prompts(self, user_id: int, page: int, size: int) -> Page:
        """Page of (PromptTemplate, liked_at) rows, newest like first."""
        stmt = (
            select(PromptTemplate, PromptLike.created_at)
            .join(PromptLike, PromptLike.prompt_template_id == PromptTemplate.id)
            .where(PromptLike.user_id == user_id)
            .where(PromptTemplate.deleted_at.is_(None))
            .order_by(PromptLike.created_at.desc(), PromptLike.id.desc())
        )
        return await paginate(self.db, stmt, page, size, scalars=False)

    async def total_received(self, user_id: int) -> int:
        """Likes received across all of the user's active prompts."""
        return await self.db.scalar(
            select(func.count(PromptLike.id))
            .join(PromptTemplate, PromptLike.prompt_template_id == PromptTemplate.id)
            .where(PromptTemplate.created_by == user_id)
            .where(PromptTemplate.deleted_at.is_(None)),
        ) or 0

"""Favorite Service — add/remove favorites and list a user's favorites.

Invariants:
    - One favorite per (user, prompt): a second add raises DuplicateResourceError (409)
    - Removing a favorite that does not exist raises ResourceNotFoundError (404)
    - Add/remove return the prompt's favorite count after the change
    - Favorite listings skip logically deleted prompts

Design Decisions:
    - Pre-check plus unique constraint: a request that loses the race hits the
      constraint on commit, which is also reported as 409
"""

import logging
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import FavoriteSearchQuery
from promptserver.core.domain_types import FavoriteSortField, SortOrder
from promptserver.core.errors import DuplicateResourceError, ResourceNotFoundError
from promptserver.core.pagination import Page
from promptserver.infrastructure.database import unique_violation_as_conflict
from promptserver.models.favorite import Favorite
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.user import User
from promptserver.services.pagination import paginate
from promptserver.services.prompt_lookup import (
    get_active_template, ensure_can_view, favorite_count, matches_keyword,
)

logger = logging.getLogger(__name__)


class FavoriteService:
    """Favorite commands and the caller's favorite listings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, user_id: int, prompt_id: int) -> Favorite | None:
        return await self.db.scalar(
            select(Favorite)
            .where(Favorite.user_id == user_id)
            .where(Favorite.prompt_template_id == prompt_id),
        )

    async def add(self, user: User, prompt_uuid: UUID) -> int:
        template = await get_active_template(self.db, prompt_uuid)
        ensure_can_view(template, user)
        if await self._find(user.id, template.id) is not None:
            raise DuplicateResourceError("Favorite", "Prompt is already in favorites")
        self.db.add(Favorite(user_id=user.id, prompt_template_id=template.id))
        async with unique_violation_as_conflict(
            self.db, "Favorite", "Prompt is already in favorites",
        ):
            await self.db.commit()
        logger.info(
            "Favorite added", extra={"user_id": user.id, "prompt_uuid": prompt_uuid},
        )
        return await favorite_count(self.db, template.id)

    async def remove(self, user: User, prompt_uuid: UUID) -> int:
        template = await get_active_template(self.db, prompt_uuid)
        favorite = await self._find(user.id, template.id)
        if favorite is None:
            raise ResourceNotFoundError("Favorite", str(prompt_uuid))
        await self.db.delete(favorite)
        await self.db.commit()
        logger.info(
            "Favorite removed", extra={"user_id": user.id, "prompt_uuid": prompt_uuid},
        )
        return await favorite_count(self.db, template.id)

    async def list_favorites(self, query: FavoriteSearchQuery) -> Page:
        """Page of (PromptTemplate, favorited_at) rows."""
        stmt = (
            select(PromptTemplate, Favorite.created_at)
            .join(Favorite, Favorite.prompt_template_id == PromptTemplate.id)
            .where(Favorite.user_id == query.user_id)
            .where(PromptTemplate.deleted_at.is_(None))
        )
        if query.search_keyword and query.search_keyword.strip():
            stmt = stmt.where(matches_keyword(
                query.search_keyword.strip(),
                PromptTemplate.title, PromptTemplate.description,
            ))
        column = (
            PromptTemplate.title if query.sort == FavoriteSortField.TITLE
            else Favorite.created_at
        )
        ordered = column.asc() if query.order == SortOrder.ASC else column.desc()
        stmt = stmt.order_by(ordered, Favorite.id.desc())
        return await paginate(self.db, stmt, query.page, query.size, scalars=False)

    async def count_favorites(self, user_id: int) -> int:
        return await self.db.scalar(
            select(func.count(Favorite.id))
            .join(PromptTemplate, Favorite.prompt_template_id == PromptTemplate.id)
            .where(Favorite.user_id == user_id)
            .where(PromptTemplate.deleted_at.is_(None)),
        ) or 0

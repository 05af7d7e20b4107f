"""Prompt Query Service — prompt detail, versions, search, "my prompts" and statistics.

Invariants:
    - Deleted templates never appear in any result
    - Public search only returns PUBLIC templates; status filter defaults to PUBLISHED
    - "My prompts" returns every visibility the author owns, filtered on request
    - Engagement counts (views, favorites, likes) are computed for the returned page only

Design Decisions:
    - Search runs as escaped case-insensitive LIKE over title/description plus tag membership
      (ADR: no external search engine; the RDBMS is the only store)
    - Counts fetched with one grouped query per counter instead of per-row queries
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import PromptSearchQuery, MyPromptSearchQuery
from promptserver.core.domain_types import PromptSortType, PromptStatus, Visibility
from promptserver.core.errors import ResourceNotFoundError
from promptserver.core.pagination import Page
from promptserver.models.favorite import Favorite
from promptserver.models.prompt_like import PromptLike
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.prompt_version import PromptVersion
from promptserver.models.prompt_view import PromptViewCount
from promptserver.models.tag import Tag
from promptserver.models.user import User
from promptserver.services.pagination import paginate
from promptserver.services.prompt_lookup import (
    get_active_template, ensure_can_view, get_current_version,
    favorite_count, like_count, view_count, matches_keyword,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngagementStats:
    view_count: int = 0
    favorite_count: int = 0
    like_count: int = 0


@dataclass(frozen=True)
class PromptDetail:
    template: PromptTemplate
    version: PromptVersion | None
    stats: EngagementStats
    is_favorite: bool = False
    is_liked: bool = False


@dataclass(frozen=True)
class PromptSummary:
    template: PromptTemplate
    stats: EngagementStats = field(default_factory=EngagementStats)


def _order_by(query, sort_type: PromptSortType):
    if sort_type == PromptSortType.TITLE:
        return query.order_by(PromptTemplate.title.asc(), PromptTemplate.id.asc())
    return query.order_by(PromptTemplate.updated_at.desc(), PromptTemplate.id.desc())


def _active():
    return select(PromptTemplate).where(PromptTemplate.deleted_at.is_(None))


class PromptQueryService:
    """Read-side prompt use cases."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Single prompt ───────────────────────────────────────────

    async def get_detail(self, prompt_uuid: UUID, viewer: User | None) -> PromptDetail:
        template = await get_active_template(self.db, prompt_uuid)
        ensure_can_view(template, viewer)
        version = await get_current_version(self.db, template)
        stats = EngagementStats(
            view_count=await view_count(self.db, template.id),
            favorite_count=await favorite_count(self.db, template.id),
            like_count=await like_count(self.db, template.id),
        )
        is_favorite = is_liked = False
        if viewer is not None:
            is_favorite = await self.db.scalar(
                select(Favorite.id)
                .where(Favorite.user_id == viewer.id)
                .where(Favorite.prompt_template_id == template.id),
            ) is not None
            is_liked = await self.db.scalar(
                select(PromptLike.id)
                .where(PromptLike.user_id == viewer.id)
                .where(PromptLike.prompt_template_id == template.id),
            ) is not None
        return PromptDetail(template, version, stats, is_favorite, is_liked)

    async def list_versions(
        self, prompt_uuid: UUID, viewer: User | None,
    ) -> tuple[PromptTemplate, list[PromptVersion]]:
        template = await get_active_template(self.db, prompt_uuid)
        ensure_can_view(template, viewer)
        result = await self.db.execute(
            select(PromptVersion)
            .where(PromptVersion.prompt_template_id == template.id)
            .order_by(PromptVersion.version_number.desc()),
        )
        return template, list(result.scalars().all())

    async def get_version(
        self, prompt_uuid: UUID, version_number: int, viewer: User | None,
    ) -> tuple[PromptTemplate, PromptVersion]:
        template = await get_active_template(self.db, prompt_uuid)
        ensure_can_view(template, viewer)
        version = await self.db.scalar(
            select(PromptVersion)
            .where(PromptVersion.prompt_template_id == template.id)
            .where(PromptVersion.version_number == version_number),
        )
        if version is None:
            raise ResourceNotFoundError(
                "PromptVersion", f"{prompt_uuid}@{version_number}",
            )
        return template, version

    # ─── Listings ────────────────────────────────────────────────

    async def search(self, query: PromptSearchQuery) -> Page:
        stmt = (
            _active()
            .where(PromptTemplate.visibility == Visibility.PUBLIC.value)
            .where(PromptTemplate.status == query.status.value)
        )
        if query.title and query.title.strip():
            stmt = stmt.where(matches_keyword(query.title.strip(), PromptTemplate.title))
        if query.description and query.description.strip():
            stmt = stmt.where(
                matches_keyword(query.description.strip(), PromptTemplate.description),
            )
        if query.tag and query.tag.strip():
            stmt = stmt.where(PromptTemplate.tags.any(Tag.name == query.tag.strip()))
        if query.category_id is not None:
            stmt = stmt.where(PromptTemplate.category_id == query.category_id)

        page = await paginate(self.db, _order_by(stmt, query.sort_type), query.page, query.size)
        return await self._with_stats(page)

    async def my_prompts(self, query: MyPromptSearchQuery) -> Page:
        stmt = _active().where(PromptTemplate.created_by == query.user_id)
        if query.status_filters:
            stmt = stmt.where(
                PromptTemplate.status.in_([s.value for s in query.status_filters]),
            )
        if query.visibility_filters:
            stmt = stmt.where(
                PromptTemplate.visibility.in_([v.value for v in query.visibility_filters]),
            )
        if query.search_keyword and query.search_keyword.strip():
            stmt = stmt.where(matches_keyword(
                query.search_keyword.strip(),
                PromptTemplate.title, PromptTemplate.description,
            ))
        page = await paginate(self.db, _order_by(stmt, query.sort_type), query.page, query.size)
        return await self._with_stats(page)

    async def recent_public(self, limit: int = 10) -> list[PromptSummary]:
        """Most recently modified published PUBLIC prompts (dashboard)."""
        stmt = (
            _active()
            .where(PromptTemplate.visibility == Visibility.PUBLIC.value)
            .where(PromptTemplate.status == PromptStatus.PUBLISHED.value)
        )
        page = await paginate(
            self.db, _order_by(stmt, PromptSortType.LATEST_MODIFIED), 0, limit,
        )
        return (await self._with_stats(page)).content

    async def my_statistics(self, user_id: int) -> dict[str, int]:
        result = await self.db.execute(
            select(PromptTemplate.status, func.count(PromptTemplate.id))
            .where(PromptTemplate.created_by == user_id)
            .where(PromptTemplate.deleted_at.is_(None))
            .group_by(PromptTemplate.status),
        )
        counts = {status: count for status, count in result.all()}
        return {
            "total_count": sum(counts.values()),
            "draft_count": counts.get(PromptStatus.DRAFT.value, 0),
            "published_count": counts.get(PromptStatus.PUBLISHED.value, 0),
            "archived_count": counts.get(PromptStatus.ARCHIVED.value, 0),
        }

    # ─── Engagement ──────────────────────────────────────────────

    async def _with_stats(self, page: Page) -> Page:
        ids = [t.id for t in page.content]
        stats = await engagement_stats(self.db, ids)
        return page.map(lambda t: PromptSummary(t, stats.get(t.id, EngagementStats())))


async def engagement_stats(db: AsyncSession, prompt_ids: list[int]) -> dict[int, EngagementStats]:
    """View/favorite/like counts for a batch of templates."""
    if not prompt_ids:
        return {}
    views = dict((await db.execute(
        select(PromptViewCount.prompt_template_id, PromptViewCount.total_view_count)
        .where(PromptViewCount.prompt_template_id.in_(prompt_ids)),
    )).all())
    favorites = dict((await db.execute(
        select(Favorite.prompt_template_id, func.count(Favorite.id))
        .where(Favorite.prompt_template_id.in_(prompt_ids))
        .group_by(Favorite.prompt_template_id),
    )).all())
    likes = dict((await db.execute(
        select(PromptLike.prompt_template_id, func.count(PromptLike.id))
        .where(PromptLike.prompt_template_id.in_(prompt_ids))
        .group_by(PromptLike.prompt_template_id),
    )).all())
    return {
        pid: EngagementStats(
            view_count=views.get(pid, 0),
            favorite_count=favorites.get(pid, 0),
            like_count=likes.get(pid, 0),
        )
        for pid in prompt_ids
    }

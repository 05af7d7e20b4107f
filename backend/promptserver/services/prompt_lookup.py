"""Prompt Lookup — shared loaders, access checks and counters for prompt use cases.

Invariants:
    - Logically deleted templates are indistinguishable from missing ones (404)
    - Templates a viewer may not see also answer 404, never 403
    - Only the author may modify or delete a template (403)
    - Keyword filters match literally: % and _ in user input are escaped
"""

from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.domain_types import Visibility
from promptserver.core.errors import PermissionDeniedError, ResourceNotFoundError
from promptserver.core.prompt_rules import can_view_prompt
from promptserver.models.favorite import Favorite
from promptserver.models.prompt_like import PromptLike
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.prompt_version import PromptVersion
from promptserver.models.prompt_view import PromptViewCount
from promptserver.models.user import User


def matches_keyword(keyword: str, *columns):
    """Case-insensitive substring match of keyword on any of the columns."""
    return or_(*(column.icontains(keyword, autoescape=True) for column in columns))


async def get_active_template(db: AsyncSession, prompt_uuid: UUID) -> PromptTemplate:
    template = await db.scalar(
        select(PromptTemplate)
        .where(PromptTemplate.uuid == prompt_uuid)
        .where(PromptTemplate.deleted_at.is_(None))
        .execution_options(populate_existing=True),
    )
    if template is None:
        raise ResourceNotFoundError("Prompt", str(prompt_uuid))
    return template


def ensure_can_view(template: PromptTemplate, viewer: User | None) -> None:
    visible = can_view_prompt(
        Visibility(template.visibility),
        owner_id=template.created_by,
        owner_team_id=template.author.team_id if template.author else None,
        viewer_id=viewer.id if viewer else None,
        viewer_team_id=viewer.team_id if viewer else None,
    )
    if not visible:
        raise ResourceNotFoundError("Prompt", str(template.uuid))


def ensure_owner(template: PromptTemplate, user_id: int) -> None:
    if template.created_by != user_id:
        raise PermissionDeniedError("Only the author can modify this prompt")


async def get_current_version(db: AsyncSession, template: PromptTemplate) -> PromptVersion | None:
    if template.current_version_id is None:
        return None
    return await db.get(PromptVersion, template.current_version_id)


async def favorite_count(db: AsyncSession, prompt_id: int) -> int:
    return await db.scalar(
        select(func.count(Favorite.id)).where(Favorite.prompt_template_id == prompt_id),
    ) or 0


async def like_count(db: AsyncSession, prompt_id: int) -> int:
    return await db.scalar(
        select(func.count(PromptLike.id)).where(PromptLike.prompt_template_id == prompt_id),
    ) or 0


async def view_count(db: AsyncSession, prompt_id: int) -> int:
    return await db.scalar(
        select(PromptViewCount.total_view_count)
        .where(PromptViewCount.prompt_template_id == prompt_id),
    ) or 0

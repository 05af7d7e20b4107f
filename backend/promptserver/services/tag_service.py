"""Tag Service — find-or-create tags by name and keyword search.

Invariants:
    - Input names are already normalized (core/prompt_rules.normalize_tag_names)
    - Returned tags follow input order
    - Keyword search is a literal, case-insensitive substring match (% and _ are not wildcards)
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.infrastructure.database import unique_violation_as_conflict
from promptserver.models.tag import Tag


async def get_or_create_tags(db: AsyncSession, names: tuple[str, ...]) -> list[Tag]:
    """Resolve each name to a Tag row, inserting missing ones (flushed, not committed)."""
    if not names:
        return []
    result = await db.execute(select(Tag).where(Tag.name.in_(names)))
    by_name = {tag.name: tag for tag in result.scalars().all()}
    for name in names:
        if name not in by_name:
            tag = Tag(name=name)
            db.add(tag)
            by_name[name] = tag
    async with unique_violation_as_conflict(
        db, "Tag", "Tag was created concurrently, retry the request",
    ):
        await db.flush()
    return [by_name[name] for name in names]


async def search_tags(db: AsyncSession, keyword: str | None, limit: int = 20) -> list[Tag]:
    query = select(Tag).order_by(Tag.name).limit(limit)
    if keyword and keyword.strip():
        query = query.where(Tag.name.icontains(keyword.strip(), autoescape=True))
    result = await db.execute(query)
    return list(result.scalars().all())

"""Query Pagination — run a SELECT as one page plus a total count."""

from sqlalchemy import Select, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.pagination import Page


async def paginate(
    db: AsyncSession, query: Select, page: int, size: int, scalars: bool = True,
) -> Page:
    """Count without ORDER BY, then fetch rows for `page` (zero-based)."""
    total = await db.scalar(
        select(func.count()).select_from(query.order_by(None).subquery()),
    ) or 0
    result = await db.execute(query.limit(size).offset(page * size))
    rows = list(result.scalars().all()) if scalars else [tuple(r) for r in result.all()]
    return Page(content=rows, page=page, size=size, total_elements=total)

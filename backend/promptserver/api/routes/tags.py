"""Tag Routes — tag lookup for autocomplete."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.infrastructure.database import get_db
from promptserver.schemas.prompt import TagResponse
from promptserver.services.tag_service import search_tags

router = APIRouter(prefix="/api/v1/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse])
async def list_tags(
    keyword: str | None = Query(None, max_length=50),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    tags = await search_tags(db, keyword, limit)
    return [TagResponse(id=t.id, name=t.name) for t in tags]

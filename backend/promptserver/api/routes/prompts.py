"""Prompt Routes — register, read, update, delete, versions and public search.

Invariants:
    - /advanced-search is declared before /{prompt_uuid}
    - Detail and version reads accept anonymous callers; visibility enforced by the service
    - Update/delete require the author
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import get_current_user, get_optional_user
from promptserver.core.commands import (
    RegisterPromptCommand, UpdatePromptCommand, DeletePromptCommand, PromptSearchQuery,
)
from promptserver.core.domain_types import PromptSortType, PromptStatus, MAX_PAGE_SIZE
from promptserver.infrastructure.database import get_db
from promptserver.models.user import User
from promptserver.schemas.common import PageResponse
from promptserver.schemas.prompt import (
    PromptCreateRequest, PromptUpdateRequest, PromptResponse,
    PromptDetailResponse, PromptSummaryResponse, PromptDeleteResponse,
    PromptVersionResponse,
)
from promptserver.services.prompt_command_service import PromptCommandService
from promptserver.services.prompt_query_service import PromptQueryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/prompts", tags=["prompts"])


def _commands(db: AsyncSession = Depends(get_db)) -> PromptCommandService:
    return PromptCommandService(db)


def _queries(db: AsyncSession = Depends(get_db)) -> PromptQueryService:
    return PromptQueryService(db)


@router.post(
    "", response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_prompt(
    body: PromptCreateRequest,
    user: User = Depends(get_current_user),
    service: PromptCommandService = Depends(_commands),
):
    result = await service.register(RegisterPromptCommand(
        title=body.title,
        description=body.description,
        content=body.content,
        author_id=user.id,
        category_id=body.category_id,
        tags=tuple(body.tags),
        input_variables=tuple(v.to_domain() for v in body.input_variables),
        visibility=body.visibility,
        status=body.status,
    ))
    return PromptResponse.from_result(result.template, result.version)


@router.get("/advanced-search", response_model=PageResponse[PromptSummaryResponse])
async def advanced_search(
    title: str | None = Query(None, max_length=200),
    description: str | None = Query(None, max_length=1000),
    tag: str | None = Query(None, max_length=50),
    category_id: int | None = Query(None, alias="categoryId", gt=0),
    status_filter: str | None = Query(None, alias="status"),
    sort_type: str | None = Query(None, alias="sortType"),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    service: PromptQueryService = Depends(_queries),
):
    """Search PUBLIC prompts. Unknown status/sortType fall back to PUBLISHED/LATEST_MODIFIED."""
    query = PromptSearchQuery(
        title=title,
        description=description,
        tag=tag,
        category_id=category_id,
        status=PromptStatus.from_string(status_filter, PromptStatus.PUBLISHED),
        sort_type=PromptSortType.from_string(sort_type, PromptSortType.LATEST_MODIFIED),
        page=page,
        size=size,
    )
    result = await service.search(query)
    return PageResponse.from_page(result, PromptSummaryResponse.from_summary)


@router.get("/{prompt_uuid}", response_model=PromptDetailResponse)
async def get_prompt(
    prompt_uuid: UUID,
    viewer: User | None = Depends(get_optional_user),
    service: PromptQueryService = Depends(_queries),
):
    return PromptDetailResponse.from_detail(await service.get_detail(prompt_uuid, viewer))


@router.put("/{prompt_uuid}", response_model=PromptResponse)
async def update_prompt(
    prompt_uuid: UUID,
    body: PromptUpdateRequest,
    user: User = Depends(get_current_user),
    service: PromptCommandService = Depends(_commands),
):
    result = await service.update(UpdatePromptCommand(
        prompt_uuid=prompt_uuid,
        editor_id=user.id,
        title=body.title,
        description=body.description,
        content=body.content,
        category_id=body.category_id,
        visibility=body.visibility,
        status=body.status,
        tags=tuple(body.tags),
        input_variables=tuple(v.to_domain() for v in body.input_variables),
    ))
    return PromptResponse.from_result(result.template, result.version)


@router.delete("/{prompt_uuid}", response_model=PromptDeleteResponse)
async def delete_prompt(
    prompt_uuid: UUID,
    user: User = Depends(get_current_user),
    service: PromptCommandService = Depends(_commands),
):
    deleted = await service.delete(DeletePromptCommand(prompt_uuid=prompt_uuid, user_id=user.id))
    return PromptDeleteResponse(
        uuid=deleted.uuid,
        title=deleted.title,
        previous_status=deleted.previous_status.value,
        deleted_at=deleted.deleted_at,
    )


@router.get("/{prompt_uuid}/versions", response_model=list[PromptVersionResponse])
async def list_versions(
    prompt_uuid: UUID,
    viewer: User | None = Depends(get_optional_user),
    service: PromptQueryService = Depends(_queries),
):
    """All versions, newest first."""
    _, versions = await service.list_versions(prompt_uuid, viewer)
    return [PromptVersionResponse.from_version(v) for v in versions]


@router.get("/{prompt_uuid}/versions/{version_number}", response_model=PromptVersionResponse)
async def get_version(
    prompt_uuid: UUID,
    version_number: int,
    viewer: User | None = Depends(get_optional_user),
    service: PromptQueryService = Depends(_queries),
):
    _, version = await service.get_version(prompt_uuid, version_number, viewer)
    return PromptVersionResponse.from_version(version)

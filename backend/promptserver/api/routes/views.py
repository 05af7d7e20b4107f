"""View Routes — record a prompt view and read its total view count (wrapped or bare).

Invariants:
    - Logged-in callers are identified by user id; anonymous callers must send an
      anonymous_id in the body or the anonymous_id cookie (400 otherwise)
    - Client IP comes from forwarding headers, then the socket peer
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import (
    get_client_ip, get_optional_user, get_view_deduplicator,
)
from promptserver.core.commands import RecordViewCommand
from promptserver.core.repository_protocols import ViewDeduplicator
from promptserver.infrastructure.database import get_db
from promptserver.models.user import User
from promptserver.schemas.view import RecordViewRequest, ViewRecordResponse, ViewCountResponse
from promptserver.services.view_service import ViewService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/prompts", tags=["views"])

ANONYMOUS_ID_COOKIE = "anonymous_id"


@router.post("/{prompt_uuid}/view", response_model=ViewRecordResponse)
async def record_view(
    prompt_uuid: UUID,
    request: Request,
    body: RecordViewRequest | None = Body(None),
    viewer: User | None = Depends(get_optional_user),
    deduplicator: ViewDeduplicator = Depends(get_view_deduplicator),
    db: AsyncSession = Depends(get_db),
):
    ip_address = get_client_ip(request)
    if viewer is not None:
        command = RecordViewCommand.for_user(prompt_uuid, viewer.id, ip_address)
    else:
        anonymous_id = (body.anonymous_id if body else None) or request.cookies.get(
            ANONYMOUS_ID_COOKIE,
        )
        command = RecordViewCommand.for_guest(prompt_uuid, anonymous_id, ip_address)

    result = await ViewService(db, deduplicator).record_view(command)
    return ViewRecordResponse(
        prompt_uuid=str(result.prompt_uuid),
        total_view_count=result.total_view_count,
        counted=result.counted,
    )


@router.get("/{prompt_uuid}/view-count", response_model=ViewCountResponse)
async def view_count(
    prompt_uuid: UUID,
    deduplicator: ViewDeduplicator = Depends(get_view_deduplicator),
    db: AsyncSession = Depends(get_db),
):
    count = await ViewService(db, deduplicator).get_view_count(prompt_uuid)
    return ViewCountResponse(prompt_uuid=str(prompt_uuid), total_view_count=count)


@router.get("/{prompt_uuid}/view-count/total", response_model=int)
async def total_view_count(
    prompt_uuid: UUID,
    deduplicator: ViewDeduplicator = Depends(get_view_deduplicator),
    db: AsyncSession = Depends(get_db),
):
    """Bare integer form of the view count, for widgets that only need the number."""
    return await ViewService(db, deduplicator).get_view_count(prompt_uuid)

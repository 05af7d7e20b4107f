"""View Service — record prompt views and read total view counts.

Invariants:
    - A view counts only if the deduplicator reports it as new
    - Counted views insert one PromptViewLog row and bump PromptViewCount by exactly one
    - Views on missing or deleted prompts raise ResourceNotFoundError (404)
    - Returned total is the count after this request

Design Decisions:
    - Counter row created lazily on first counted view
    - Increment done with an UPDATE expression, not read-modify-write
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import RecordViewCommand
from promptserver.core.repository_protocols import ViewDeduplicator
from promptserver.core.view_identity import ViewIdentifier, duplication_key
from promptserver.models.prompt_view import PromptViewLog, PromptViewCount
from promptserver.services.prompt_lookup import get_active_template, view_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewRecordResult:
    prompt_uuid: UUID
    total_view_count: int
    counted: bool


class ViewService:
    """View recording and counting."""

    def __init__(self, db: AsyncSession, deduplicator: ViewDeduplicator):
        self.db = db
        self.deduplicator = deduplicator

    async def record_view(self, command: RecordViewCommand) -> ViewRecordResult:
        template = await get_active_template(self.db, command.prompt_uuid)
        identifier = ViewIdentifier(
            prompt_id=template.id,
            ip_address=command.ip_address,
            user_id=command.user_id,
            anonymous_id=command.anonymous_id,
        )
        counted = await self.deduplicator.register_view(identifier)
        if counted:
            self.db.add(PromptViewLog(
                prompt_template_id=template.id,
                user_id=command.user_id,
                anonymous_id=command.anonymous_id,
                ip_address=command.ip_address,
                viewer_key=duplication_key(identifier),
            ))
            await self._increment(template.id)
            await self.db.commit()
            logger.info(
                "View recorded",
                extra={
                    "prompt_uuid": command.prompt_uuid,
                    "viewer": identifier.viewer_type.value,
                },
            )
        return ViewRecordResult(
            prompt_uuid=command.prompt_uuid,
            total_view_count=await view_count(self.db, template.id),
            counted=counted,
        )

    async def _increment(self, prompt_id: int) -> None:
        result = await self.db.execute(
            update(PromptViewCount)
            .where(PromptViewCount.prompt_template_id == prompt_id)
            .values(total_view_count=PromptViewCount.total_view_count + 1),
        )
        if result.rowcount == 0:
            self.db.add(PromptViewCount(prompt_template_id=prompt_id, total_view_count=1))

    async def get_view_count(self, prompt_uuid: UUID) -> int:
        template = await get_active_template(self.db, prompt_uuid)
        return await view_count(self.db, template.id)

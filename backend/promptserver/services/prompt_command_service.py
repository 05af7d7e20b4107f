"""Prompt Command Service — register, update and logically delete prompt templates.

Invariants:
    - Registration writes the template, version 1 (CREATE) and tag links in one transaction
    - current_version_id always points at the highest version_number
    - A new version is appended only when content, input variables or status change
    - Only the author may update or delete (403); deleted templates answer 404
    - Delete is logical: deleted_at/deleted_by set, rows and versions kept

Design Decisions:
    - Versions are append-only: editing never rewrites history (ADR: auditability)
    - Relationship objects (author, category, tags) assigned directly so responses
      render without extra queries after commit
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.core.commands import (
    RegisterPromptCommand, UpdatePromptCommand, DeletePromptCommand,
)
from promptserver.core.domain_types import PromptStatus, PromptVersionActionType
from promptserver.core.errors import ResourceNotFoundError
from promptserver.core.prompt_rules import (
    parse_visibility, parse_status, resolve_version_action,
)
from promptserver.models.category import Category
from promptserver.models.prompt_template import PromptTemplate
from promptserver.models.prompt_version import PromptVersion
from promptserver.models.user import User
from promptserver.services.prompt_lookup import (
    get_active_template, ensure_owner, get_current_version,
)
from promptserver.services.tag_service import get_or_create_tags

logger = logging.getLogger(__name__)

INITIAL_VERSION_CHANGES = "Initial version"


@dataclass(frozen=True)
class PromptWithVersion:
    template: PromptTemplate
    version: PromptVersion


@dataclass(frozen=True)
class DeletedPrompt:
    uuid: str
    title: str
    previous_status: PromptStatus
    deleted_at: datetime
    deleted_by: int


class PromptCommandService:
    """Write-side prompt use cases."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_category(self, category_id: int) -> Category:
        category = await self.db.get(Category, category_id)
        if category is None:
            raise ResourceNotFoundError("Category", str(category_id))
        return category

    async def register(self, command: RegisterPromptCommand) -> PromptWithVersion:
        author = await self.db.get(User, command.author_id)
        if author is None:
            raise ResourceNotFoundError("User", str(command.author_id))
        category = await self._require_category(command.category_id)
        tags = await get_or_create_tags(self.db, command.tags)

        template = PromptTemplate(
            title=command.title,
            description=command.description,
            created_by=author.id,
            category_id=category.id,
            visibility=parse_visibility(command.visibility, author.team_id is not None).value,
            status=parse_status(command.status).value,
        )
        template.author = author
        template.category = category
        template.tags = tags
        self.db.add(template)
        await self.db.flush()

        version = PromptVersion(
            prompt_template_id=template.id,
            version_number=1,
            content=command.content,
            changes=INITIAL_VERSION_CHANGES,
            input_variables=[v.to_dict() for v in command.input_variables],
            action_type=PromptVersionActionType.CREATE.value,
            created_by=author.id,
        )
        self.db.add(version)
        await self.db.flush()
        template.current_version_id = version.id
        await self.db.commit()

        logger.info(
            "Prompt registered",
            extra={"prompt_uuid": template.uuid, "user_id": author.id},
        )
        return PromptWithVersion(template, version)

    async def update(self, command: UpdatePromptCommand) -> PromptWithVersion:
        template = await get_active_template(self.db, command.prompt_uuid)
        ensure_owner(template, command.editor_id)
        category = await self._require_category(command.category_id)
        current = await get_current_version(self.db, template)

        previous_status = PromptStatus(template.status)
        new_variables = [v.to_dict() for v in command.input_variables]
        needs_version = (
            current is None
            or current.content != command.content
            or (current.input_variables or []) != new_variables
            or previous_status != command.status
        )

        template.title = command.title
        template.description = command.description
        template.category_id = category.id
        template.category = category
        template.visibility = command.visibility.value
        template.status = command.status.value
        template.tags = await get_or_create_tags(self.db, command.tags)
        template.updated_at = datetime.now(timezone.utc)

        if needs_version:
            action = resolve_version_action(previous_status, command.status)
            current = await self._append_version(template, command, new_variables, action)

        await self.db.commit()
        logger.info(
            "Prompt updated",
            extra={"prompt_uuid": template.uuid, "user_id": command.editor_id},
        )
        return PromptWithVersion(template, current)

    async def _append_version(
        self,
        template: PromptTemplate,
        command: UpdatePromptCommand,
        variables: list[dict],
        action: PromptVersionActionType,
    ) -> PromptVersion:
        latest = await self.db.scalar(
            select(func.max(PromptVersion.version_number))
            .where(PromptVersion.prompt_template_id == template.id),
        ) or 0
        version = PromptVersion(
            prompt_template_id=template.id,
            version_number=latest + 1,
            content=command.content,
            changes=action.value.capitalize(),
            input_variables=variables,
            action_type=action.value,
            created_by=command.editor_id,
        )
        self.db.add(version)
        await self.db.flush()
        template.current_version_id = version.id
        return version

    async def delete(self, command: DeletePromptCommand) -> DeletedPrompt:
        template = await get_active_template(self.db, command.prompt_uuid)
        ensure_owner(template, command.user_id)

        now = datetime.now(timezone.utc)
        template.deleted_at = now
        template.deleted_by = command.user_id
        await self.db.commit()

        logger.info(
            "Prompt deleted",
            extra={"prompt_uuid": template.uuid, "user_id": command.user_id},
        )
        return DeletedPrompt(
            uuid=str(template.uuid),
            title=template.title,
            previous_status=PromptStatus(template.status),
            deleted_at=now,
            deleted_by=command.user_id,
        )

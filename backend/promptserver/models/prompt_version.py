"""PromptVersion ORM — immutable revision of a template's content and variables.

Invariants:
    - (prompt_template_id, version_number) is unique; numbers start at 1 and only grow
    - Rows are never updated after insert
    - input_variables is a JSON list of InputVariable.to_dict() entries

Design Decisions:
    - JSON column for input_variables: schema varies per prompt, never queried by field
"""

from uuid import UUID as PyUUID, uuid4
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from promptserver.db.base import Base


class PromptVersion(Base):
    __tablename__ = "prompt_versions"
    __table_args__ = (
        UniqueConstraint(
            "prompt_template_id", "version_number", name="uq_prompt_version_number",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[PyUUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, unique=True, default=uuid4,
    )
    prompt_template_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prompt_templates.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    changes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    input_variables: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    action_type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

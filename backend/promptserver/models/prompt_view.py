"""Prompt View ORM — per-view log rows and the running total per prompt.

Invariants:
    - One PromptViewLog row per counted (non-duplicate) view
    - viewer_key is the duplication key of the viewer (see core/view_identity.py)
    - PromptViewCount.total_view_count equals the number of log rows for the prompt

Design Decisions:
    - Log table feeds period statistics; count table keeps detail reads O(1)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from promptserver.db.base import Base


class PromptViewLog(Base):
    __tablename__ = "prompt_view_logs"
    __table_args__ = (
        Index("ix_prompt_view_logs_viewer_key_viewed_at", "viewer_key", "viewed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    prompt_template_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prompt_templates.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    anonymous_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)
    viewer_key: Mapped[str] = mapped_column(String(255), nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )


class PromptViewCount(Base):
    __tablename__ = "prompt_view_counts"

    prompt_template_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prompt_templates.id", ondelete="CASCADE"),
        primary_key=True,
    )
    total_view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

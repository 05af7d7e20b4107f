"""Tag ORM — free-form labels shared across prompt templates.

Invariants:
    - name is unique and already trimmed
    - prompt_template_tags rows are removed with either side
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Table
from sqlalchemy.orm import Mapped, mapped_column

from promptserver.db.base import Base

prompt_template_tags = Table(
    "prompt_template_tags",
    Base.metadata,
    Column(
        "prompt_template_id", Integer,
        ForeignKey("prompt_templates.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "tag_id", Integer,
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

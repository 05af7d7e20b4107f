"""PromptLike ORM — a user's like on a prompt template.

Invariants:
    - At most one like per (user_id, prompt_template_id)
    - Like counts are always derived with COUNT(*), never stored
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from promptserver.db.base import Base


class PromptLike(Base):
    __tablename__ = "prompt_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "prompt_template_id", name="uq_like_user_prompt"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    prompt_template_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prompt_templates.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

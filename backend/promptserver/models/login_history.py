"""LoginHistory ORM — audit trail of login attempts.

Invariants:
    - One row per attempt, SUCCESS or FAILED
    - user_id is NULL for attempts against unknown emails (email still recorded)
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from promptserver.db.base import Base


class LoginHistory(Base):
    __tablename__ = "login_histories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    login_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

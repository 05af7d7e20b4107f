"""PromptTemplate ORM — aggregate root for a reusable prompt and its metadata.

Invariants:
    - uuid is the only identifier exposed through the API
    - current_version_id points at the latest PromptVersion (NULL only mid-registration)
    - deleted_at set means logically deleted: invisible to every read path
    - visibility / status hold Visibility / PromptStatus values

Design Decisions:
    - current_version_id without FK: avoids a template<->version cycle in DDL
    - tags/author/category loaded with selectin: every read path renders them
"""

from uuid import UUID as PyUUID, uuid4
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from promptserver.db.base import Base
from promptserver.models.tag import prompt_template_tags


class PromptTemplate(Base):
    __tablename__ = "prompt_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[PyUUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, unique=True, default=uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    current_version_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    created_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    visibility: Mapped[str] = mapped_column(
        String(20), nullable=False, default="PRIVATE",
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="DRAFT",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    deleted_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    tags: Mapped[list["Tag"]] = relationship(
        "Tag", secondary=prompt_template_tags, lazy="selectin",
        order_by="Tag.name",
    )
    author: Mapped["User"] = relationship("User", lazy="selectin")
    category: Mapped["Category | None"] = relationship("Category", lazy="selectin")

"""Initial schema — users, auth, categories, tags, prompts, versions, engagement, views.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
        _updated_at(),
    )

    op.create_table(
        "login_histories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("login_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_login_histories_user_id", "login_histories", ["user_id"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(1024), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    op.create_table(
        "token_blacklist",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("jti", sa.String(64), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_system", sa.Boolean, nullable=False, server_default="false"),
        sa.Column(
            "parent_category_id", sa.Integer,
            sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True,
        ),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_categories_parent_category_id", "categories", ["parent_category_id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        _created_at(),
    )

    op.create_table(
        "prompt_templates",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("current_version_id", sa.Integer, nullable=True),
        sa.Column(
            "category_id", sa.Integer,
            sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("visibility", sa.String(20), nullable=False, server_default="PRIVATE"),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        _created_at(),
        _updated_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.Integer, nullable=True),
    )
    op.create_index("ix_prompt_templates_category_id", "prompt_templates", ["category_id"])
    op.create_index("ix_prompt_templates_created_by", "prompt_templates", ["created_by"])

    op.create_table(
        "prompt_template_tags",
        sa.Column(
            "prompt_template_id", sa.Integer,
            sa.ForeignKey("prompt_templates.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "tag_id", sa.Integer,
            sa.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True,
        ),
    )

    op.create_table(
        "prompt_versions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column(
            "prompt_template_id", sa.Integer,
            sa.ForeignKey("prompt_templates.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("version_number", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("changes", sa.String(500), nullable=True),
        sa.Column("input_variables", sa.JSON, nullable=False),
        sa.Column("action_type", sa.String(20), nullable=False),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        _created_at(),
        sa.UniqueConstraint(
            "prompt_template_id", "version_number", name="uq_prompt_version_number",
        ),
    )
    op.create_index("ix_prompt_versions_prompt_template_id", "prompt_versions", ["prompt_template_id"])

    for table, constraint in (
        ("favorites", "uq_favorite_user_prompt"),
        ("prompt_likes", "uq_like_user_prompt"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column(
                "prompt_template_id", sa.Integer,
                sa.ForeignKey("prompt_templates.id", ondelete="CASCADE"), nullable=False,
            ),
            _created_at(),
            sa.UniqueConstraint("user_id", "prompt_template_id", name=constraint),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_prompt_template_id", table, ["prompt_template_id"])

    op.create_table(
        "prompt_view_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "prompt_template_id", sa.Integer,
            sa.ForeignKey("prompt_templates.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.Column("anonymous_id", sa.String(100), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=False),
        sa.Column("viewer_key", sa.String(255), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_prompt_view_logs_prompt_template_id", "prompt_view_logs", ["prompt_template_id"])
    op.create_index("ix_prompt_view_logs_viewed_at", "prompt_view_logs", ["viewed_at"])
    op.create_index(
        "ix_prompt_view_logs_viewer_key_viewed_at", "prompt_view_logs", ["viewer_key", "viewed_at"],
    )

    op.create_table(
        "prompt_view_counts",
        sa.Column(
            "prompt_template_id", sa.Integer,
            sa.ForeignKey("prompt_templates.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("total_view_count", sa.Integer, nullable=False, server_default="0"),
        _updated_at(),
    )


def downgrade() -> None:
    for table in (
        "prompt_view_counts", "prompt_view_logs", "prompt_likes", "favorites",
        "prompt_versions", "prompt_template_tags", "prompt_templates", "tags",
        "categories", "token_blacklist", "refresh_tokens", "login_histories",
        "users", "teams",
    ):
        op.drop_table(table)

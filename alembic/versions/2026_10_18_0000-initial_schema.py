"""initial schema

Revision ID: 2026_10_18_0000
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates users, spaces, space_members, prompts, prompt_favorites,
prompt_usage_signals and notifications.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "2026_10_18_0000"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create initial database schema."""

    # ========================================================================
    # users
    # ========================================================================
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("avatar", sa.String(1024), nullable=True),
        sa.Column("ai_credits", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("last_credit_reset", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("NOW()")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.CheckConstraint("ai_credits >= 0", name="ck_ai_credits_non_negative"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # ========================================================================
    # spaces + membership set
    # ========================================================================
    op.create_table(
        "spaces",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="PRIVATE"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("join_code", sa.String(16), nullable=True),
        sa.Column("created_by", UUID(as_uuid=True), nullable=False),
        sa.Column("icon", sa.String(50), nullable=False, server_default="Folder"),
        sa.Column("color", sa.String(50), nullable=False, server_default="text-white"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.CheckConstraint("type IN ('PRIVATE', 'TEAM', 'PUBLIC')", name="ck_space_type_valid"),
        sa.UniqueConstraint("join_code", name="uq_spaces_join_code"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_spaces_created_by", ondelete="CASCADE"),
    )
    op.create_index("idx_spaces_created_by", "spaces", ["created_by"])

    op.create_table(
        "space_members",
        sa.Column("space_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.ForeignKeyConstraint(["space_id"], ["spaces.id"], name="fk_space_members_space", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_space_members_user", ondelete="CASCADE"),
    )
    op.create_index("idx_space_members_user_id", "space_members", ["user_id"])

    # ========================================================================
    # prompts + favorites set
    # ========================================================================
    op.create_table(
        "prompts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("variables", ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("space_id", UUID(as_uuid=True), nullable=False),
        sa.Column("author_id", UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.ForeignKeyConstraint(["space_id"], ["spaces.id"], name="fk_prompts_space", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], name="fk_prompts_author", ondelete="CASCADE"),
    )
    op.create_index("idx_prompts_space_created_at", "prompts", ["space_id", "created_at"])
    op.create_index("idx_prompts_author_id", "prompts", ["author_id"])

    op.create_table(
        "prompt_favorites",
        sa.Column("prompt_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], name="fk_prompt_favorites_prompt", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_prompt_favorites_user", ondelete="CASCADE"),
    )
    op.create_index("idx_prompt_favorites_user_id", "prompt_favorites", ["user_id"])

    # ========================================================================
    # prompt_usage_signals (append-only, one per user/prompt/day)
    # ========================================================================
    op.create_table(
        "prompt_usage_signals",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("prompt_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("signal", sa.String(20), nullable=False),
        sa.Column("note", sa.String(500), nullable=True),
        sa.Column("signal_day", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.CheckConstraint("signal IN ('WORKED', 'DIDNT_WORK', 'NOT_SURE')", name="ck_usage_signal_kind_valid"),
        sa.UniqueConstraint("user_id", "prompt_id", "signal_day", name="uq_usage_signal_user_prompt_day"),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], name="fk_usage_signals_prompt", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_usage_signals_user", ondelete="CASCADE"),
    )
    op.create_index(
        "idx_usage_signals_prompt_created_at", "prompt_usage_signals", ["prompt_id", "created_at"]
    )

    # ========================================================================
    # notifications
    # ========================================================================
    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("recipient_id", UUID(as_uuid=True), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="INFO"),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.CheckConstraint("type IN ('JOIN', 'SYSTEM', 'INFO')", name="ck_notification_type_valid"),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], name="fk_notifications_recipient", ondelete="CASCADE"),
    )
    op.create_index(
        "idx_notifications_recipient_created_at", "notifications", ["recipient_id", "created_at"]
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("notifications")
    op.drop_table("prompt_usage_signals")
    op.drop_table("prompt_favorites")
    op.drop_table("prompts")
    op.drop_table("space_members")
    op.drop_table("spaces")
    op.drop_table("users")

"""
Database Models - SQLAlchemy ORM models with strict typing.

All columns use Mapped[] type annotations.
"""

from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    ARRAY,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class User(Base):
    """
    ORM model for users table.

    Holds credentials and the daily AI credit state.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Daily AI credits (lazily reset on the first touch of a new calendar day)
    ai_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    last_credit_reset: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utc_now
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("ai_credits >= 0", name="ck_ai_credits_non_negative"),
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<User(id={self.id}, email={self.email}, ai_credits={self.ai_credits})>"


class Space(Base):
    """ORM model for spaces (groups) table."""

    __tablename__ = "spaces"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="PRIVATE")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    join_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_by: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="Folder")
    color: Mapped[str] = mapped_column(String(50), nullable=False, default="text-white")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("type IN ('PRIVATE', 'TEAM', 'PUBLIC')", name="ck_space_type_valid"),
        UniqueConstraint("join_code", name="uq_spaces_join_code"),
        Index("idx_spaces_created_by", "created_by"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Space(id={self.id}, name={self.name}, type={self.type})>"


class SpaceMember(Base):
    """
    ORM model for space_members table.

    Membership is a set: the composite primary key makes each
    (space, user) pair appear at most once.
    """

    __tablename__ = "space_members"

    space_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("spaces.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (Index("idx_space_members_user_id", "user_id"),)


class Prompt(Base):
    """ORM model for prompts table."""

    __tablename__ = "prompts"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    variables: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    space_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("idx_prompts_space_created_at", "space_id", "created_at"),
        Index("idx_prompts_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Prompt(id={self.id}, title={self.title}, space_id={self.space_id})>"


class PromptFavorite(Base):
    """
    ORM model for prompt_favorites table.

    The set of users who favorited a prompt; one row per (prompt, user).
    """

    __tablename__ = "prompt_favorites"

    prompt_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("prompts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (Index("idx_prompt_favorites_user_id", "user_id"),)


class PromptUsageSignal(Base):
    """
    ORM model for prompt_usage_signals table.

    Append-only feedback ledger. signal_day is the server-local calendar
    day of created_at; the unique constraint allows one signal per user,
    prompt and day.
    """

    __tablename__ = "prompt_usage_signals"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    prompt_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    signal: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)
    signal_day: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        CheckConstraint(
            "signal IN ('WORKED', 'DIDNT_WORK', 'NOT_SURE')", name="ck_usage_signal_kind_valid"
        ),
        UniqueConstraint(
            "user_id",
            "prompt_id",
            "signal_day",
            name="uq_usage_signal_user_prompt_day",
        ),
        Index("idx_usage_signals_prompt_created_at", "prompt_id", "created_at"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<PromptUsageSignal(id={self.id}, prompt_id={self.prompt_id}, "
            f"user_id={self.user_id}, signal={self.signal})>"
        )


class Notification(Base):
    """ORM model for notifications table."""

    __tablename__ = "notifications"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    recipient_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="INFO")
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("type IN ('JOIN', 'SYSTEM', 'INFO')", name="ck_notification_type_valid"),
        Index("idx_notifications_recipient_created_at", "recipient_id", "created_at"),
    )

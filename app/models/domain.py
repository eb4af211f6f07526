"""
Domain Models - Internal business logic models using dataclasses.

All service results are strongly typed immutable dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from app.models.api import NotificationType, SignalKind, SpaceRole, SpaceType


@dataclass(frozen=True)
class CreditBalance:
    """Immutable credit balance after a ledger operation."""

    user_id: UUID
    ai_credits: int
    last_credit_reset: datetime


@dataclass(frozen=True)
class UserProfile:
    """Immutable user profile with resolved credits."""

    user_id: UUID
    name: str
    email: str
    avatar: str | None
    ai_credits: int


@dataclass(frozen=True)
class AuthResult:
    """Profile plus the bearer token issued for it."""

    profile: UserProfile
    token: str


@dataclass(frozen=True)
class UsageSummary:
    """Derived aggregate of a prompt's usage signals (never stored)."""

    worked: int = 0
    didnt_work: int = 0
    last_worked_at: datetime | None = None


@dataclass(frozen=True)
class SignalHistoryEntry:
    """One usage signal as exposed in a prompt's history."""

    signal: SignalKind
    note: str | None
    created_at: datetime


@dataclass(frozen=True)
class SpaceData:
    """Immutable space snapshot from the caller's point of view."""

    space_id: UUID
    name: str
    type: SpaceType
    description: str | None
    join_code: str | None
    member_count: int
    prompt_count: int
    role: SpaceRole
    icon: str
    color: str


@dataclass(frozen=True)
class PromptData:
    """Immutable prompt snapshot with the caller's favorite flag."""

    prompt_id: UUID
    title: str
    content: str
    description: str | None
    space_id: UUID
    author_id: UUID
    version: int
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)
    variables: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FavoriteState:
    """A user's favorite flag on a prompt and the size of its favorite set."""

    prompt_id: UUID
    is_favorite: bool
    favorite_count: int


@dataclass(frozen=True)
class NotificationData:
    """Immutable notification snapshot."""

    notification_id: UUID
    recipient_id: UUID
    message: str
    type: NotificationType
    read: bool
    created_at: datetime

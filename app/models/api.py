"""
API Models - Pydantic models for request/response validation.

All request and response bodies are strongly typed.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class SignalKind(str, Enum):
    """Usage signal enumeration."""

    WORKED = "WORKED"
    DIDNT_WORK = "DIDNT_WORK"
    NOT_SURE = "NOT_SURE"


class SpaceType(str, Enum):
    """Space visibility enumeration."""

    PRIVATE = "PRIVATE"
    TEAM = "TEAM"
    PUBLIC = "PUBLIC"


class SpaceRole(str, Enum):
    """Caller's role within a space."""

    OWNER = "OWNER"
    MEMBER = "MEMBER"


class NotificationType(str, Enum):
    """Notification type enumeration."""

    JOIN = "JOIN"
    SYSTEM = "SYSTEM"
    INFO = "INFO"


# ============================================================================
# Auth / Credit Models
# ============================================================================


class RegisterRequest(BaseModel):
    """POST /api/auth/register request body."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Normalize email and require an @."""
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must contain @")
        return v


class LoginRequest(BaseModel):
    """POST /api/auth/login request body."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored lowercase."""
        return v.strip().lower()


class UserResponse(BaseModel):
    """User profile with resolved credits."""

    id: UUID
    name: str
    email: str
    avatar: str | None = None
    ai_credits: int


class AuthResponse(BaseModel):
    """Register/login response."""

    user: UserResponse
    token: str


class RewardCreditRequest(BaseModel):
    """POST /api/auth/reward-credit request body.

    Range checking happens in the credit service so that an out-of-range
    amount is reported as an invalid reward, not a schema error.
    """

    amount: int


class CreditBalanceResponse(BaseModel):
    """Deduct/reward response."""

    success: bool = True
    ai_credits: int


# ============================================================================
# Space Models
# ============================================================================


class CreateSpaceRequest(BaseModel):
    """POST /api/groups/create request body."""

    name: str = Field(..., min_length=1, max_length=255)
    type: SpaceType = SpaceType.PRIVATE
    description: str | None = Field(None, max_length=2000)


class JoinSpaceRequest(BaseModel):
    """POST /api/groups/join request body."""

    group_code: str = Field(..., min_length=1, max_length=32)

    @field_validator("group_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Join codes are stored uppercase."""
        return v.strip().upper()


class UpdateSpaceRequest(BaseModel):
    """PUT /api/groups/{space_id} request body."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    type: SpaceType | None = None


class SpaceResponse(BaseModel):
    """Space as seen by the caller."""

    id: UUID
    name: str
    type: SpaceType
    description: str | None = None
    join_code: str | None = None
    member_count: int
    prompt_count: int
    role: SpaceRole
    icon: str
    color: str


# ============================================================================
# Prompt Models
# ============================================================================


class CreatePromptRequest(BaseModel):
    """POST /api/prompts/create request body."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    space_id: UUID
    variables: list[str] = Field(default_factory=list)


class UpdatePromptRequest(BaseModel):
    """PUT /api/prompts/{prompt_id} request body (partial update)."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    description: str | None = None
    tags: list[str] | None = None
    variables: list[str] | None = None


class PromptResponse(BaseModel):
    """Prompt with the caller's favorite flag."""

    id: UUID
    title: str
    content: str
    description: str | None = None
    tags: list[str]
    space_id: UUID
    author_id: UUID
    version: int
    variables: list[str]
    is_favorite: bool
    created_at: datetime
    updated_at: datetime


class FavoriteToggleResponse(BaseModel):
    """PUT /api/prompts/{prompt_id}/favorite response."""

    id: UUID
    is_favorite: bool
    favorite_count: int


# ============================================================================
# Usage Signal Models
# ============================================================================


class SubmitSignalRequest(BaseModel):
    """POST /api/prompts/{prompt_id}/usage request body."""

    signal: str = Field(..., min_length=1, max_length=20)
    note: str | None = Field(None, max_length=500)


class UsageSummaryResponse(BaseModel):
    """Aggregated usage signals for a prompt."""

    worked: int
    didnt_work: int
    last_worked_at: datetime | None = None


class SignalHistoryItem(BaseModel):
    """A single usage signal in a prompt's history."""

    signal: SignalKind
    note: str | None = None
    created_at: datetime


# ============================================================================
# Notification / Misc Models
# ============================================================================


class NotificationResponse(BaseModel):
    """Notification as returned to its recipient."""

    id: UUID
    recipient_id: UUID
    message: str
    type: NotificationType
    read: bool
    created_at: datetime


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str
    database: str
    timestamp: str

"""
API Routes - Account, credit and usage signal endpoints.

All requests/responses use Pydantic models.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.db.models import User
from app.db.session import get_db
from app.exceptions import (
    AuthenticationError,
    DailyCreditLimitError,
    DataIntegrityError,
    DuplicateSignalError,
    InvalidRewardAmountError,
    InvalidSignalError,
    PromptNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from app.models.api import (
    AuthResponse,
    CreditBalanceResponse,
    LoginRequest,
    RegisterRequest,
    RewardCreditRequest,
    SignalHistoryItem,
    SubmitSignalRequest,
    UsageSummaryResponse,
    UserResponse,
)
from app.models.domain import AuthResult, UsageSummary, UserProfile
from app.services.auth import UserAuthService
from app.services.credits import CreditService
from app.services.usage_signals import UsageSignalService

router = APIRouter()


def _user_response(profile: UserProfile) -> UserResponse:
    return UserResponse(
        id=profile.user_id,
        name=profile.name,
        email=profile.email,
        avatar=profile.avatar,
        ai_credits=profile.ai_credits,
    )


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(user=_user_response(result.profile), token=result.token)


def _summary_response(summary: UsageSummary) -> UsageSummaryResponse:
    return UsageSummaryResponse(
        worked=summary.worked,
        didnt_work=summary.didnt_work,
        last_worked_at=summary.last_worked_at,
    )


# =============================================================================
# Account Endpoints
# =============================================================================


@router.post(
    "/api/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """
    Register a new user.

    New users start with a full daily credit balance.
    """
    service = UserAuthService(db)

    try:
        result = await service.register(request.name, request.email, request.password)
    except UserAlreadyExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        ) from exc

    return _auth_response(result)


@router.post("/api/auth/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """
    Log in with email and password.

    Resolves today's credits before returning the profile.
    """
    service = UserAuthService(db)

    try:
        result = await service.login(request.email, request.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from exc

    return _auth_response(result)


@router.get("/api/auth/me", response_model=UserResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Get the caller's profile with credits resolved for today."""
    service = CreditService(db)

    try:
        profile = await service.get_profile(user.id)
    except UserNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from exc

    return _user_response(profile)


# =============================================================================
# Credit Endpoints
# =============================================================================


@router.post("/api/auth/deduct-credit", response_model=CreditBalanceResponse)
async def deduct_credit(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CreditBalanceResponse:
    """
    Spend one AI credit.

    Returns 429 once the daily balance is exhausted.
    """
    service = CreditService(db)

    try:
        balance = await service.deduct(user.id)
    except UserNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from exc
    except DailyCreditLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(exc),
        ) from exc

    return CreditBalanceResponse(ai_credits=balance.ai_credits)


@router.post("/api/auth/reward-credit", response_model=CreditBalanceResponse)
async def reward_credit(
    request: RewardCreditRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CreditBalanceResponse:
    """Grant reward credits (1 to max_reward_per_call per call)."""
    service = CreditService(db)

    try:
        balance = await service.reward(user.id, request.amount)
    except InvalidRewardAmountError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid reward amount",
        ) from exc
    except UserNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from exc

    return CreditBalanceResponse(ai_credits=balance.ai_credits)


# =============================================================================
# Usage Signal Endpoints
# =============================================================================


@router.post(
    "/api/prompts/{prompt_id}/usage",
    response_model=UsageSummaryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_usage_signal(
    prompt_id: UUID,
    request: SubmitSignalRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UsageSummaryResponse:
    """
    Record whether a prompt worked for the caller.

    One signal per user per prompt per calendar day.
    Returns the prompt's updated usage summary.
    """
    service = UsageSignalService(db)

    try:
        summary = await service.submit_signal(prompt_id, user.id, request.signal, request.note)
    except InvalidSignalError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
    except PromptNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        ) from exc
    except DuplicateSignalError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You already submitted feedback for this prompt today",
        ) from exc
    except DataIntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database integrity error",
        ) from exc

    return _summary_response(summary)


@router.get("/api/prompts/{prompt_id}/usage/summary", response_model=UsageSummaryResponse)
async def get_usage_summary(
    prompt_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UsageSummaryResponse:
    """Aggregated WORKED/DIDNT_WORK counts and the last time the prompt worked."""
    service = UsageSignalService(db)
    summary = await service.get_summary(prompt_id)
    return _summary_response(summary)


@router.get("/api/prompts/{prompt_id}/usage/history", response_model=list[SignalHistoryItem])
async def get_usage_history(
    prompt_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[SignalHistoryItem]:
    """Most recent usage signals of a prompt, newest first."""
    service = UsageSignalService(db)
    entries = await service.get_history(prompt_id)
    return [
        SignalHistoryItem(signal=entry.signal, note=entry.note, created_at=entry.created_at)
        for entry in entries
    ]

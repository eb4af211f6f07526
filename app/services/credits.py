"""
Credit Service - Daily AI credit ledger.

Each user holds a balance that is lazily reset to the daily limit the
first time it is touched on a new calendar day (server-local date).
Deductions take one credit; rewards add a bounded amount.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.config import settings
from app.db.models import User
from app.exceptions import DailyCreditLimitError, InvalidRewardAmountError, UserNotFoundError
from app.models.domain import CreditBalance, UserProfile
from app.observability import metrics, trace_operation
from app.services.calendar_day import is_new_calendar_day, local_now

logger = get_logger(__name__)


def profile_from_user(user: User) -> UserProfile:
    """Build an immutable profile snapshot from a user row."""
    return UserProfile(
        user_id=user.id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
        ai_credits=user.ai_credits,
    )


def _to_balance(user: User) -> CreditBalance:
    return CreditBalance(
        user_id=user.id,
        ai_credits=user.ai_credits,
        last_credit_reset=user.last_credit_reset,
    )


class CreditService:
    """
    Daily credit ledger over the users table.

    Mutations follow the pattern:
    1. Lock the user row (SELECT FOR UPDATE)
    2. Apply the lazy daily reset
    3. Validate and mutate the balance
    4. Flush and commit
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize credit service with database session."""
        self.session = session

    def _apply_daily_reset(self, user: User, now: datetime) -> bool:
        """Reset the balance in memory if this is the first touch today."""
        if not is_new_calendar_day(user.last_credit_reset, now):
            return False

        previous = user.ai_credits
        user.ai_credits = settings.daily_credit_limit
        user.last_credit_reset = now
        metrics.record_daily_reset()
        logger.info(
            "daily_credits_reset",
            user_id=str(user.id),
            previous_credits=previous,
            ai_credits=user.ai_credits,
        )
        return True

    async def check_and_reset_daily(self, user: User) -> User:
        """
        Reset the user's credits if the stored reset date is not today.

        Idempotent within a calendar day: a second call is a no-op.
        """
        if self._apply_daily_reset(user, local_now()):
            await self.session.flush()
            await self.session.commit()
        return user

    async def deduct(self, user_id: UUID) -> CreditBalance:
        """
        Take one AI credit from the user.

        Raises:
            UserNotFoundError: User doesn't exist
            DailyCreditLimitError: No credits left today (balance unchanged)
        """
        with trace_operation("credit_deduct", user_id=user_id):
            user = await self._lock_user_for_update(user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            self._apply_daily_reset(user, local_now())

            if user.ai_credits <= 0:
                # A reset always leaves a positive balance, so nothing is pending here
                await self.session.rollback()
                metrics.record_deduction(success=False)
                logger.warning("daily_credit_limit_reached", user_id=str(user_id))
                raise DailyCreditLimitError(user_id, settings.daily_credit_limit)

            user.ai_credits = user.ai_credits - 1
            await self.session.flush()
            await self.session.commit()

        metrics.record_deduction(success=True)
        logger.info("credit_deducted", user_id=str(user_id), ai_credits=user.ai_credits)
        return _to_balance(user)

    async def reward(self, user_id: UUID, amount: int) -> CreditBalance:
        """
        Grant reward credits to the user.

        The per-call amount is bounded, the resulting balance is not:
        repeated rewards may push it above the daily limit.

        Raises:
            InvalidRewardAmountError: amount not in 1..max_reward_per_call
            UserNotFoundError: User doesn't exist
        """
        if isinstance(amount, bool) or not 0 < amount <= settings.max_reward_per_call:
            metrics.record_reward(success=False, amount=0)
            logger.warning("invalid_reward_amount", user_id=str(user_id), amount=amount)
            raise InvalidRewardAmountError(amount, settings.max_reward_per_call)

        with trace_operation("credit_reward", user_id=user_id, amount=amount):
            user = await self._lock_user_for_update(user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            self._apply_daily_reset(user, local_now())
            user.ai_credits = user.ai_credits + amount
            await self.session.flush()
            await self.session.commit()

        metrics.record_reward(success=True, amount=amount)
        logger.info(
            "credit_rewarded", user_id=str(user_id), amount=amount, ai_credits=user.ai_credits
        )
        return _to_balance(user)

    async def get_profile(self, user_id: UUID) -> UserProfile:
        """
        Get the user's profile with credits resolved for today.

        Raises:
            UserNotFoundError: User doesn't exist
        """
        user = await self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        user = await self.check_and_reset_daily(user)
        return profile_from_user(user)

    async def _lock_user_for_update(self, user_id: UUID) -> User | None:
        """
        Lock user row for update (SELECT FOR UPDATE).

        populate_existing overwrites an instance already in the identity map,
        so the balance is the one read under the lock.
        """
        stmt = (
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

"""
Usage Signal Service - Per-prompt feedback ledger and aggregation.

Users tell whether a prompt WORKED, DIDNT_WORK or they are NOT_SURE, at
most once per prompt per local calendar day. Signals are append-only;
summaries are recomputed from the ledger on every request.
"""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.config import settings
from app.db.models import Prompt, PromptUsageSignal
from app.exceptions import (
    DataIntegrityError,
    DuplicateSignalError,
    InvalidSignalError,
    PromptNotFoundError,
)
from app.models.api import SignalKind
from app.models.domain import SignalHistoryEntry, UsageSummary
from app.observability import metrics, trace_operation
from app.services.calendar_day import local_date, local_now, start_of_local_day

logger = get_logger(__name__)

DAILY_UNIQUE_CONSTRAINT = "uq_usage_signal_user_prompt_day"


def build_summary(rows: Iterable[tuple[str, int, datetime | None]]) -> UsageSummary:
    """
    Fold (signal, count, max created_at) groups into a summary.

    NOT_SURE groups are ignored; last_worked_at comes from the WORKED group only.
    """
    worked = 0
    didnt_work = 0
    last_worked_at: datetime | None = None

    for signal, count, latest in rows:
        if signal == SignalKind.WORKED.value:
            worked = count
            last_worked_at = latest
        elif signal == SignalKind.DIDNT_WORK.value:
            didnt_work = count

    return UsageSummary(worked=worked, didnt_work=didnt_work, last_worked_at=last_worked_at)


def _coerce_signal(signal: SignalKind | str) -> SignalKind:
    try:
        return SignalKind(signal)
    except ValueError as e:
        raise InvalidSignalError(f"unknown signal kind {signal!r}") from e


class UsageSignalService:
    """Usage signal ledger for prompts."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize usage signal service with database session."""
        self.session = session

    async def submit_signal(
        self,
        prompt_id: UUID,
        user_id: UUID,
        signal: SignalKind | str,
        note: str | None = None,
    ) -> UsageSummary:
        """
        Record a user's signal for a prompt and return the fresh summary.

        The same-day lookup gives the error message; the unique constraint on
        (user_id, prompt_id, signal_day) catches concurrent submissions that
        both pass the lookup.

        Raises:
            InvalidSignalError: Unknown signal kind or note too long
            PromptNotFoundError: Prompt doesn't exist
            DuplicateSignalError: User already signalled this prompt today
        """
        kind = _coerce_signal(signal)
        if note is not None and len(note) > settings.signal_note_max_length:
            raise InvalidSignalError(
                f"note exceeds {settings.signal_note_max_length} characters"
            )

        with trace_operation(
            "usage_signal_submit", prompt_id=prompt_id, user_id=user_id, signal=kind.value
        ):
            prompt = await self.session.get(Prompt, prompt_id)
            if prompt is None:
                raise PromptNotFoundError(prompt_id)

            now = local_now()
            existing = await self._find_signal_since(
                prompt_id, user_id, start_of_local_day(now)
            )
            if existing is not None:
                metrics.record_duplicate_signal("check")
                logger.info(
                    "usage_signal_duplicate",
                    prompt_id=str(prompt_id),
                    user_id=str(user_id),
                    existing_signal_id=str(existing.id),
                )
                raise DuplicateSignalError(prompt_id, user_id)

            record = PromptUsageSignal(
                prompt_id=prompt_id,
                user_id=user_id,
                signal=kind.value,
                note=note,
                signal_day=local_date(now),
                created_at=now,
            )
            self.session.add(record)

            try:
                await self.session.flush()
                await self.session.commit()
            except IntegrityError as e:
                await self.session.rollback()
                if DAILY_UNIQUE_CONSTRAINT in str(e.orig):
                    metrics.record_duplicate_signal("constraint")
                    logger.info(
                        "usage_signal_duplicate_race",
                        prompt_id=str(prompt_id),
                        user_id=str(user_id),
                    )
                    raise DuplicateSignalError(prompt_id, user_id) from e
                logger.error(
                    "usage_signal_integrity_error", prompt_id=str(prompt_id), error=str(e)
                )
                raise DataIntegrityError(f"Usage signal insert failed: {e.orig}") from e

        metrics.record_usage_signal(kind.value)
        logger.info(
            "usage_signal_recorded",
            prompt_id=str(prompt_id),
            user_id=str(user_id),
            signal=kind.value,
        )
        return await self.get_summary(prompt_id)

    async def get_summary(self, prompt_id: UUID) -> UsageSummary:
        """Aggregate all signals of a prompt by kind."""
        stmt = (
            select(
                PromptUsageSignal.signal,
                func.count(PromptUsageSignal.id),
                func.max(PromptUsageSignal.created_at),
            )
            .where(PromptUsageSignal.prompt_id == prompt_id)
            .group_by(PromptUsageSignal.signal)
        )
        result = await self.session.execute(stmt)
        return build_summary(result.all())

    async def get_history(self, prompt_id: UUID) -> list[SignalHistoryEntry]:
        """Newest-first signals of a prompt, capped at signal_history_limit."""
        stmt = (
            select(
                PromptUsageSignal.signal,
                PromptUsageSignal.note,
                PromptUsageSignal.created_at,
            )
            .where(PromptUsageSignal.prompt_id == prompt_id)
            .order_by(PromptUsageSignal.created_at.desc())
            .limit(settings.signal_history_limit)
        )
        result = await self.session.execute(stmt)
        return [
            SignalHistoryEntry(signal=SignalKind(signal), note=note, created_at=created_at)
            for signal, note, created_at in result.all()
        ]

    async def _find_signal_since(
        self, prompt_id: UUID, user_id: UUID, since: datetime
    ) -> PromptUsageSignal | None:
        """Find the user's signal for a prompt created at or after since."""
        stmt = (
            select(PromptUsageSignal)
            .where(
                PromptUsageSignal.prompt_id == prompt_id,
                PromptUsageSignal.user_id == user_id,
                PromptUsageSignal.created_at >= since,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

"""Upvote Toggle Engine — per-user toggle on a question's ranking signal.

Invariants:
    - upvotes == number of question_upvotes rows for the question after every toggle
    - A user is a member of upvoted_by at most once (composite primary key)
    - Toggling twice by the same user restores the prior state
    - Membership change and counter change commit together or not at all
    - Toggles on different questions never wait on each other

Design Decisions:
    - Two layers of serialization per question: an in-process asyncio.Lock keyed by
      question id, and a row lock (SELECT ... FOR UPDATE) inside the transaction for
      multi-worker deployments
    - Direction decided by the rowcount of a conditional DELETE, never by a value read
      earlier; the counter moves relatively (upvotes = upvotes + delta)
    - Lock registry is a WeakValueDictionary: a lock lives only while someone holds it
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID
from weakref import WeakValueDictionary

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from qbank.core.domain_types import QuestionId, UserId
from qbank.core.errors import ConcurrencyError, ErrorContext, ResourceNotFoundError
from qbank.models.question import Question
from qbank.models.question_upvote import QuestionUpvote

logger = logging.getLogger(__name__)

_question_locks: "WeakValueDictionary[UUID, asyncio.Lock]" = WeakValueDictionary()


def _lock_for(question_id: UUID) -> asyncio.Lock:
    lock = _question_locks.get(question_id)
    if lock is None:
        lock = asyncio.Lock()
        _question_locks[question_id] = lock
    return lock


@dataclass(frozen=True)
class ToggleOutcome:
    upvotes: int
    upvoted: bool


class UpvoteToggleEngine:
    """Atomic add-or-remove of a user in a question's upvoted_by set."""

    def __init__(self, db: AsyncSession, lock_timeout_seconds: float = 5.0):
        self._db = db
        self._lock_timeout = lock_timeout_seconds

    async def toggle(self, question_id: QuestionId | UUID, user_id: UserId) -> int:
        """Flip the caller's upvote and return the post-toggle count."""
        outcome = await self.toggle_with_state(question_id, user_id)
        return outcome.upvotes

    async def toggle_with_state(
        self, question_id: QuestionId | UUID, user_id: UserId,
    ) -> ToggleOutcome:
        context = ErrorContext(question_id=str(question_id), user_id=user_id)
        lock = _lock_for(question_id)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self._lock_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Upvote lock wait timed out",
                extra={"question_id": question_id, "user_id": user_id},
            )
            raise ConcurrencyError(
                "Question is busy, retry the upvote", context,
            )
        try:
            outcome = await self._toggle_in_transaction(question_id, user_id, context)
        finally:
            lock.release()
        logger.info(
            "Upvote toggled",
            extra={"question_id": question_id, "user_id": user_id, "total": outcome.upvotes},
        )
        return outcome

    async def count(self, question_id: QuestionId | UUID) -> int:
        result = await self._db.execute(
            select(Question.upvotes).where(Question.id == question_id),
        )
        upvotes = result.scalar_one_or_none()
        if upvotes is None:
            raise ResourceNotFoundError(
                "Question", str(question_id),
                ErrorContext(question_id=str(question_id)),
            )
        return upvotes

    async def _toggle_in_transaction(
        self, question_id: UUID, user_id: str, context: ErrorContext,
    ) -> ToggleOutcome:
        db = self._db
        try:
            locked = await db.execute(
                select(Question.id)
                .where(Question.id == question_id)
                .with_for_update(),
            )
            if locked.scalar_one_or_none() is None:
                raise ResourceNotFoundError("Question", str(question_id), context)

            removed = await db.execute(
                delete(QuestionUpvote)
                .where(
                    QuestionUpvote.question_id == question_id,
                    QuestionUpvote.user_id == user_id,
                )
                .execution_options(synchronize_session=False),
            )
            if removed.rowcount == 1:
                delta = -1
            else:
                await db.execute(
                    insert(QuestionUpvote).values(
                        question_id=question_id, user_id=user_id,
                    ),
                )
                delta = 1

            await db.execute(
                update(Question)
                .where(Question.id == question_id)
                .values(
                    upvotes=Question.upvotes + delta,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False),
            )
            upvotes = (await db.execute(
                select(Question.upvotes).where(Question.id == question_id),
            )).scalar_one()
            await db.commit()
        except BaseException:
            await db.rollback()
            raise
        return ToggleOutcome(upvotes=upvotes, upvoted=delta > 0)

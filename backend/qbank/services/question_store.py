"""Question Store — CRUD, filtered listing, substring search and category scan.

Invariants:
    - Every write validates through core.question_rules before touching the DB
    - Every write bumps updated_at; create sets created_at
    - list(): total counts the filter independent of paging; page/limit are not clamped
    - search(): case-insensitive literal substring (unstripped) over question_text OR company OR topic
    - Reads use populate_existing so rows changed by bulk statements are never served stale

Design Decisions:
    - Store owns commit: each operation is one transaction, matching one request
    - delete() removes upvote rows explicitly, so it holds on backends without FK enforcement
    - Deterministic ordering: every sort ends with id as tie-breaker so paging is stable
    - distinct_values() is a full distinct scan per column, exposed through CategoryIndex
"""

import builtins
import logging
from datetime import datetime, timezone
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from qbank.core.domain_types import QuestionId, SortOrder, UserId
from qbank.core.errors import BadRequestError, ErrorContext, ResourceNotFoundError
from qbank.core.query_builder import ListQuery, QuestionFilter, page_count
from qbank.core.question_rules import validate_new_question, validate_question_patch
from qbank.core.repository_protocols import Categories, QuestionPage
from qbank.models.question import Question
from qbank.models.question_upvote import QuestionUpvote

logger = logging.getLogger(__name__)

_ORDERINGS = {
    SortOrder.LATEST: (Question.created_at.desc(), Question.id.desc()),
    SortOrder.OLDEST: (Question.created_at.asc(), Question.id.asc()),
    SortOrder.UPVOTES: (
        Question.upvotes.desc(), Question.created_at.desc(), Question.id.desc(),
    ),
}


def _apply_filter(stmt: Select, criteria: QuestionFilter) -> Select:
    for column, value in criteria.equality_terms().items():
        stmt = stmt.where(getattr(Question, column) == value)
    if criteria.from_date is not None:
        stmt = stmt.where(Question.created_at >= criteria.from_date)
    if criteria.to_date is not None:
        stmt = stmt.where(Question.created_at <= criteria.to_date)
    return stmt


def _escape_like(term: str) -> str:
    return (
        term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


class QuestionStore:
    """Persistence operations over the questions table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def create(
        self, fields: Mapping[str, Any], submitted_by: UserId | None = None,
    ) -> Question:
        """Validate and persist a new question with zero upvotes."""
        clean = validate_new_question(fields)
        now = datetime.now(timezone.utc)
        question = Question(
            question_text=clean["question_text"],
            company=clean["company"],
            topic=clean["topic"],
            role=clean["role"],
            difficulty=clean["difficulty"].value,
            submitted_by=submitted_by,
            upvotes=0,
            created_at=now,
            updated_at=now,
        )
        self._db.add(question)
        await self._db.commit()
        await self._db.refresh(question)
        logger.info(
            "Question created",
            extra={"question_id": question.id, "user_id": submitted_by},
        )
        return question

    async def get_by_id(self, question_id: QuestionId | UUID) -> Question:
        result = await self._db.execute(
            select(Question)
            .where(Question.id == question_id)
            .execution_options(populate_existing=True),
        )
        question = result.scalar_one_or_none()
        if question is None:
            raise ResourceNotFoundError(
                "Question", str(question_id),
                ErrorContext(question_id=str(question_id)),
            )
        return question

    async def list(self, query: ListQuery) -> QuestionPage:
        """One page of questions matching every supplied filter field."""
        count_stmt = _apply_filter(
            select(func.count()).select_from(Question), query.filter,
        )
        total = (await self._db.execute(count_stmt)).scalar_one()

        stmt = (
            _apply_filter(select(Question), query.filter)
            .order_by(*_ORDERINGS[query.sort])
            .offset(query.page.skip)
            .limit(query.page.limit)
            .execution_options(populate_existing=True)
        )
        items = (await self._db.execute(stmt)).scalars().all()
        return QuestionPage(
            items=items,
            total=total,
            page=query.page.page,
            limit=query.page.limit,
            pages=page_count(total, query.page.limit),
        )

    async def update(
        self, question_id: QuestionId | UUID, patch: Mapping[str, Any],
    ) -> Question:
        """Apply question_text/topic/difficulty changes; company and role stay put."""
        question = await self.get_by_id(question_id)
        clean = validate_question_patch(patch)
        for name, value in clean.items():
            setattr(question, name, value.value if name == "difficulty" else value)
        question.updated_at = datetime.now(timezone.utc)
        await self._db.commit()
        logger.info(
            "Question updated",
            extra={"question_id": question_id, "operation": ",".join(clean) or "touch"},
        )
        return question

    async def delete(self, question_id: QuestionId | UUID) -> None:
        """Remove the question and its upvote rows permanently."""
        await self._db.execute(
            delete(QuestionUpvote).where(QuestionUpvote.question_id == question_id),
        )
        removed = await self._db.execute(
            delete(Question).where(Question.id == question_id),
        )
        if removed.rowcount == 0:
            await self._db.rollback()
            raise ResourceNotFoundError(
                "Question", str(question_id),
                ErrorContext(question_id=str(question_id)),
            )
        await self._db.commit()
        logger.info("Question deleted", extra={"question_id": question_id})

    async def search(self, term: str | None) -> builtins.list[Question]:
        """Newest-first matches of `term` taken literally, surrounding spaces included.

        A term that is empty or whitespace-only is rejected; otherwise it is
        matched unstripped, so " graph" does not match "Paragraph".
        """
        if term is None or not term.strip():
            raise BadRequestError("Search query is required")
        pattern = f"%{_escape_like(term)}%"
        stmt = (
            select(Question)
            .where(or_(
                Question.question_text.ilike(pattern, escape="\\"),
                Question.company.ilike(pattern, escape="\\"),
                Question.topic.ilike(pattern, escape="\\"),
            ))
            .order_by(*_ORDERINGS[SortOrder.LATEST])
            .execution_options(populate_existing=True)
        )
        return list((await self._db.execute(stmt)).scalars().all())

    async def distinct_values(self) -> Categories:
        """Distinct topics, companies and roles across every question."""
        return Categories(
            topics=await self._distinct(Question.topic),
            companies=await self._distinct(Question.company),
            roles=await self._distinct(Question.role),
        )

    async def upvoter_ids(self, question_id: QuestionId | UUID) -> set[str]:
        result = await self._db.execute(
            select(QuestionUpvote.user_id)
            .where(QuestionUpvote.question_id == question_id),
        )
        return set(result.scalars().all())

    async def _distinct(self, column) -> builtins.list[str]:
        result = await self._db.execute(
            select(column).distinct().order_by(column),
        )
        return list(result.scalars().all())

"""Question ORM — persists one crowd-sourced interview question.

Invariants:
    - id is UUID primary key, assigned at creation, never changed
    - question_text, company, topic, role, difficulty are non-nullable
    - difficulty restricted to Easy/Medium/Hard by a check constraint
    - upvotes >= 0 and equals the number of QuestionUpvote rows
    - submitted_by is a weak reference: plain string, no FK, may dangle
    - company, topic, role, submitted_by are unbounded Text: only question_rules limits them

Design Decisions:
    - upvoted_by modelled as a child table (question_upvotes) rather than an array column:
      the composite primary key enforces unique membership on every backend
    - upvotes denormalized on the row: upvote-sorted listings never aggregate
    - Indexes mirror the listing filters: company, topic, difficulty, (company, topic, role)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Index, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from qbank.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Question(Base):
    """Question entity — the sole aggregate of the question bank."""
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint(
            "difficulty IN ('Easy', 'Medium', 'Hard')",
            name="ck_questions_difficulty",
        ),
        CheckConstraint("upvotes >= 0", name="ck_questions_upvotes_non_negative"),
        Index("ix_questions_company", "company"),
        Index("ix_questions_topic", "topic"),
        Index("ix_questions_difficulty", "difficulty"),
        Index("ix_questions_company_topic_role", "company", "topic", "role"),
        Index("ix_questions_created_at", "created_at"),
        Index("ix_questions_upvotes", "upvotes"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    company: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(10), nullable=False)
    submitted_by: Mapped[str | None] = mapped_column(
        Text, nullable=True,
    )
    upvotes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
        onupdate=_utcnow,
    )

    upvoters: Mapped[list["QuestionUpvote"]] = relationship(
        "QuestionUpvote", back_populates="question",
        cascade="all, delete-orphan", passive_deletes=True,
        lazy="selectin",
    )

    @property
    def upvoted_by(self) -> set[str]:
        return {u.user_id for u in self.upvoters}

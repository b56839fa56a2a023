"""QuestionUpvote ORM — one row per (question, user) upvote membership.

Invariants:
    - Composite primary key (question_id, user_id): a user upvotes a question at most once
    - Rows are created and removed only by the upvote toggle engine
    - ON DELETE CASCADE: upvote history is discarded with its question
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from qbank.db.base import Base


class QuestionUpvote(Base):
    """Membership of a user in a question's upvoted_by set."""
    __tablename__ = "question_upvotes"

    question_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("questions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(Text, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    question: Mapped["Question"] = relationship(
        "Question", back_populates="upvoters",
    )

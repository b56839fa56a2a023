"""Question Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Wire format is camelCase (questionText, submittedBy, upvotedBy, createdAt, ...)
    - QuestionCreate: every field required, strings stripped, questionText >= 10 chars
    - QuestionUpdate: every field optional; company/role accepted but never applied
    - QuestionListParams: sort/difficulty restricted to known values, page >= 1, 1 <= limit <= 100
    - Dates in QuestionListParams must parse as ISO-8601

Design Decisions:
    - Literal types over str enums for query params: the query builder coerces, schemas only gate
    - field_validator for side-effect-free transforms (strip) — keeps models pure
"""

from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from qbank.core.domain_types import Difficulty, MIN_QUESTION_TEXT_LENGTH
from qbank.core.query_builder import parse_date

_REQUIRED = {
    "question_text": "Question text is required",
    "company": "Company is required",
    "topic": "Topic is required",
    "role": "Role is required",
}
_TOO_SHORT = f"Question must be at least {MIN_QUESTION_TEXT_LENGTH} characters"


class QuestionCreate(BaseModel):
    """Question submission — all five fields required."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question_text: str
    company: str
    topic: str
    role: str
    difficulty: Difficulty

    @field_validator("question_text", "company", "topic", "role")
    @classmethod
    def strip_and_require(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(_REQUIRED[info.field_name])
        if info.field_name == "question_text" and len(v) < MIN_QUESTION_TEXT_LENGTH:
            raise ValueError(_TOO_SHORT)
        return v

    def to_fields(self) -> dict:
        return self.model_dump()


class QuestionUpdate(BaseModel):
    """Partial question edit — only questionText/topic/difficulty are applied."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question_text: str | None = None
    company: str | None = None
    topic: str | None = None
    role: str | None = None
    difficulty: Difficulty | None = None

    @field_validator("question_text")
    @classmethod
    def check_question_text(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if len(v) < MIN_QUESTION_TEXT_LENGTH:
            raise ValueError(_TOO_SHORT)
        return v

    @field_validator("company", "topic", "role")
    @classmethod
    def non_empty_if_provided(cls, v: str | None, info) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError(
                f"{info.field_name.capitalize()} cannot be empty if provided",
            )
        return v

    def to_patch(self) -> dict:
        """Fields the caller actually sent, in store (snake_case) naming."""
        return self.model_dump(exclude_none=True)


class QuestionListParams(BaseModel):
    """Query string for GET /questions."""
    model_config = ConfigDict(populate_by_name=True)

    company: str | None = None
    topic: str | None = None
    role: str | None = None
    difficulty: Literal["Easy", "Medium", "Hard"] | None = None
    sort: Literal["latest", "oldest", "upvotes"] | None = None
    from_date: str | None = Field(None, alias="fromDate")
    to_date: str | None = Field(None, alias="toDate")
    page: int | None = Field(None, ge=1)
    limit: int | None = Field(None, ge=1, le=100)

    @field_validator("from_date", "to_date")
    @classmethod
    def must_parse_as_date(cls, v: str | None) -> str | None:
        if v is not None and v.strip():
            try:
                parse_date(v)
            except ValueError:
                raise ValueError("Date must be ISO-8601 (YYYY-MM-DD or full timestamp)")
        return v


class QuestionOut(BaseModel):
    """Question as returned to clients."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )

    id: UUID
    question_text: str
    company: str
    topic: str
    role: str
    difficulty: Difficulty
    submitted_by: str | None = None
    upvotes: int
    upvoted_by: list[str] = []
    created_at: datetime
    updated_at: datetime

    @field_validator("upvoted_by", mode="before")
    @classmethod
    def sorted_members(cls, v) -> list[str]:
        return sorted(v or [])

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite drops tzinfo on round-trip
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def serialize_question(question) -> dict:
    return QuestionOut.model_validate(question).to_wire()

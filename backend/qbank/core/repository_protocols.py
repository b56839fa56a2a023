"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - CategoryIndex kept separate from QuestionRepository: the full distinct scan
      can be swapped for a materialized index without touching callers
"""

import builtins
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Protocol, Sequence

from qbank.core.domain_types import QuestionId, UserId
from qbank.core.query_builder import ListQuery


class QuestionLike(Protocol):
    """Structural contract for Question records handed to the boundary."""
    id: QuestionId
    question_text: str
    company: str
    topic: str
    role: str
    difficulty: str
    submitted_by: str | None
    upvotes: int
    created_at: datetime
    updated_at: datetime


@dataclass
class QuestionPage:
    """One page of a listing plus the unpaged total."""
    items: Sequence[QuestionLike]
    total: int
    page: int
    limit: int
    pages: int


@dataclass
class Categories:
    topics: list[str] = field(default_factory=list)
    companies: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)


class CategoryIndex(Protocol):
    """Distinct categorical values present across all questions."""
    async def distinct_values(self) -> Categories: ...


class QuestionRepository(CategoryIndex, Protocol):
    """Contract for question persistence — implemented by shell."""
    async def create(
        self, fields: Mapping[str, Any], submitted_by: UserId | None = None,
    ) -> QuestionLike: ...
    async def get_by_id(self, question_id: QuestionId) -> QuestionLike: ...
    async def list(self, query: ListQuery) -> QuestionPage: ...
    async def update(
        self, question_id: QuestionId, patch: Mapping[str, Any],
    ) -> QuestionLike: ...
    async def delete(self, question_id: QuestionId) -> None: ...
    async def search(self, term: str) -> builtins.list[QuestionLike]: ...


class UpvoteToggler(Protocol):
    """Contract for the per-user toggle on a question's ranking signal."""
    async def toggle(self, question_id: QuestionId, user_id: UserId) -> int: ...
    async def count(self, question_id: QuestionId) -> int: ...

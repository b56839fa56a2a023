"""Query Builder — turns raw listing parameters into a typed store query.

Invariants:
    - Absent (None or "") inputs fall back to page=1, limit=10, sort=latest
    - Filter is a conjunction: every supplied field must match exactly
    - Dates are timezone-aware UTC; naive inputs are interpreted as UTC
    - No business validation here (request schemas gate the inputs)

Design Decisions:
    - Frozen dataclasses: a ListQuery is a value, safe to log and compare
    - page_count lives here so routes and store agree on the arithmetic
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone

from qbank.core.domain_types import Difficulty, SortOrder

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class QuestionFilter:
    """Conjunction over categorical fields and a created_at range."""
    company: str | None = None
    topic: str | None = None
    role: str | None = None
    difficulty: Difficulty | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None

    def equality_terms(self) -> dict[str, str]:
        """Categorical fields that were supplied, keyed by column name."""
        terms = {
            "company": self.company,
            "topic": self.topic,
            "role": self.role,
            "difficulty": self.difficulty.value if self.difficulty else None,
        }
        return {k: v for k, v in terms.items() if v is not None}


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class ListQuery:
    filter: QuestionFilter = field(default_factory=QuestionFilter)
    sort: SortOrder = SortOrder.LATEST
    page: PageRequest = field(default_factory=PageRequest)


def page_count(total: int, limit: int) -> int:
    """Number of pages for `total` records at `limit` per page."""
    return math.ceil(total / limit)


def parse_date(value: str | None, end_of_day: bool = False) -> datetime | None:
    """Parse an ISO-8601 date or datetime into an aware UTC datetime.

    A bare date used as an upper bound covers the whole day.
    """
    if _absent(value):
        return None
    text = value.strip()
    if len(text) == 10:
        day = date.fromisoformat(text)
        parsed = datetime.combine(day, time.max if end_of_day else time.min)
    else:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def build_list_query(
    company: str | None = None,
    topic: str | None = None,
    role: str | None = None,
    difficulty: str | None = None,
    sort: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    page: str | int | None = None,
    limit: str | int | None = None,
    default_limit: int = DEFAULT_LIMIT,
) -> ListQuery:
    """Coerce independent optional inputs into a ListQuery with defaults applied."""
    return ListQuery(
        filter=QuestionFilter(
            company=None if _absent(company) else company,
            topic=None if _absent(topic) else topic,
            role=None if _absent(role) else role,
            difficulty=None if _absent(difficulty) else Difficulty(difficulty),
            from_date=parse_date(from_date),
            to_date=parse_date(to_date, end_of_day=True),
        ),
        sort=SortOrder.LATEST if _absent(sort) else SortOrder(sort),
        page=PageRequest(
            page=DEFAULT_PAGE if _absent(page) else int(page),
            limit=default_limit if _absent(limit) else int(limit),
        ),
    )


def _absent(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())

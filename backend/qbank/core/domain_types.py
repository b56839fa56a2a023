"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - QuestionId wraps UUID; UserId wraps the opaque identity string
    - Difficulty has exactly three members and is the only persisted vocabulary
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

QuestionId = NewType("QuestionId", UUID)
UserId = NewType("UserId", str)


# ─── Value Types ─────────────────────────────────────────────────

MIN_QUESTION_TEXT_LENGTH = 10


# ─── Enums ───────────────────────────────────────────────────────

class Difficulty(str, Enum):
    """Question difficulty — maps to DB `difficulty` column."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class SortOrder(str, Enum):
    """Listing order accepted by the question store."""
    LATEST = "latest"
    OLDEST = "oldest"
    UPVOTES = "upvotes"


class CallerRole(str, Enum):
    """Roles supplied by the identity collaborator."""
    USER = "user"
    ADMIN = "admin"

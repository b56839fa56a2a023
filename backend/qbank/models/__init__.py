"""ORM Models — SQLAlchemy declarative models for the question bank.

Invariants:
    - All models inherit from Base (db/base.py)
    - Question is the aggregate root; QuestionUpvote rows are scoped by question_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from qbank.models.question import Question  # noqa: F401
from qbank.models.question_upvote import QuestionUpvote  # noqa: F401

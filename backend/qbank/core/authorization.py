"""Authorization Guard — decides who may update or delete a question.

Invariants:
    - Admins may mutate any question
    - A user may mutate a question only if submitted_by is set and equals their id
    - Anonymous questions (submitted_by is None) are admin-only
    - Denial is ForbiddenError, never ResourceNotFoundError
"""

from dataclasses import dataclass
from typing import Protocol

from qbank.core.domain_types import CallerRole, UserId
from qbank.core.errors import ErrorContext, ForbiddenError


@dataclass(frozen=True)
class Caller:
    """Identity supplied by the identity collaborator."""
    id: UserId
    role: CallerRole = CallerRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == CallerRole.ADMIN


class OwnedRecord(Protocol):
    submitted_by: str | None


def can_mutate(caller: Caller, question: OwnedRecord) -> bool:
    if caller.is_admin:
        return True
    return question.submitted_by is not None and question.submitted_by == caller.id


def ensure_can_mutate(caller: Caller, question: OwnedRecord) -> None:
    """Raise ForbiddenError unless can_mutate() allows the caller."""
    if not can_mutate(caller, question):
        raise ForbiddenError(context=ErrorContext(
            question_id=str(getattr(question, "id", "")) or None,
            user_id=caller.id,
        ))

"""Question Rules — pure field validation for the Question entity.

Invariants:
    - question_text is >= MIN_QUESTION_TEXT_LENGTH chars after trimming
    - company, topic, role are non-empty after trimming
    - difficulty is always a Difficulty value
    - Every violation is reported, not just the first one
    - Only question_text, topic, difficulty survive a patch

Design Decisions:
    - Pure functions returning normalized dicts: the store persists exactly what was validated
    - company/role are immutable after creation; a patch carrying them is silently narrowed
"""

from collections.abc import Mapping
from typing import Any

from qbank.core.domain_types import Difficulty, MIN_QUESTION_TEXT_LENGTH
from qbank.core.errors import FieldError, QuestionValidationError

MUTABLE_FIELDS = ("question_text", "topic", "difficulty")

_REQUIRED_MESSAGES = {
    "question_text": "Question text is required",
    "company": "Company is required",
    "topic": "Topic is required",
    "role": "Role is required",
    "difficulty": "Difficulty is required",
}
_TOO_SHORT = f"Question must be at least {MIN_QUESTION_TEXT_LENGTH} characters"
_BAD_DIFFICULTY = "Difficulty must be Easy, Medium, or Hard"


def _check_text(name: str, value: Any, errors: list[FieldError]) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        errors.append(FieldError(name, _REQUIRED_MESSAGES[name]))
        return None
    value = value.strip()
    if name == "question_text" and len(value) < MIN_QUESTION_TEXT_LENGTH:
        errors.append(FieldError(name, _TOO_SHORT))
        return None
    return value


def _check_difficulty(value: Any, errors: list[FieldError]) -> Difficulty | None:
    if value is None or value == "":
        errors.append(FieldError("difficulty", _REQUIRED_MESSAGES["difficulty"]))
        return None
    try:
        return Difficulty(value)
    except ValueError:
        errors.append(FieldError("difficulty", _BAD_DIFFICULTY))
        return None


def validate_new_question(fields: Mapping[str, Any]) -> dict:
    """Validate and normalize fields for a new question.

    Returns a dict with trimmed strings and a Difficulty enum.
    Raises QuestionValidationError listing every offending field.
    """
    errors: list[FieldError] = []
    clean = {
        name: _check_text(name, fields.get(name), errors)
        for name in ("question_text", "company", "topic", "role")
    }
    clean["difficulty"] = _check_difficulty(fields.get("difficulty"), errors)
    if errors:
        raise QuestionValidationError(errors)
    return clean


def validate_question_patch(patch: Mapping[str, Any]) -> dict:
    """Validate the mutable subset of a patch. Absent keys are left out."""
    errors: list[FieldError] = []
    clean: dict = {}
    for name in MUTABLE_FIELDS:
        if name not in patch or patch[name] is None:
            continue
        if name == "difficulty":
            clean[name] = _check_difficulty(patch[name], errors)
        else:
            clean[name] = _check_text(name, patch[name], errors)
    if errors:
        raise QuestionValidationError(errors)
    return clean

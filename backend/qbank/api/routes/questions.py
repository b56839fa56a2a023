"""Question Routes — CRUD, listing, search, categories and upvote toggle.

Invariants:
    - Request bodies/queries validated by Pydantic before reaching the handler
    - update/delete authorized by core.authorization (owner or admin) after the record is found,
      so a missing record is 404 and a foreign one is 403
    - Upvoting requires a caller; reads are public
    - Static paths (/search, /categories) registered before /{question_id}

Design Decisions:
    - Routes never contain business logic: QuestionStore, UpvoteToggleEngine and the
      query builder do the work, routes only wire and envelope
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from qbank.api.deps import get_question_store, get_upvote_engine
from qbank.api.identity import get_caller, get_optional_caller
from qbank.api.responses import ok
from qbank.config import get_settings
from qbank.core.authorization import Caller, ensure_can_mutate
from qbank.core.query_builder import build_list_query
from qbank.schemas.question import (
    QuestionCreate, QuestionListParams, QuestionUpdate, serialize_question,
)
from qbank.services.question_store import QuestionStore
from qbank.services.upvote_toggle import UpvoteToggleEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/questions", tags=["questions"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question(
    body: QuestionCreate,
    caller: Caller | None = Depends(get_optional_caller),
    store: QuestionStore = Depends(get_question_store),
):
    """Submit a question. Anonymous submissions are allowed."""
    question = await store.create(
        body.to_fields(), submitted_by=caller.id if caller else None,
    )
    return ok(
        serialize_question(question),
        message="Question created successfully",
    )


@router.get("")
async def list_questions(
    params: Annotated[QuestionListParams, Query()],
    store: QuestionStore = Depends(get_question_store),
):
    """List questions with filtering, sorting and pagination."""
    query = build_list_query(
        company=params.company,
        topic=params.topic,
        role=params.role,
        difficulty=params.difficulty,
        sort=params.sort,
        from_date=params.from_date,
        to_date=params.to_date,
        page=params.page,
        limit=params.limit,
        default_limit=get_settings().default_page_limit,
    )
    result = await store.list(query)
    return ok(
        [serialize_question(q) for q in result.items],
        count=result.total,
        page=result.page,
        pages=result.pages,
    )


@router.get("/search")
async def search_questions(
    q: str | None = Query(None),
    store: QuestionStore = Depends(get_question_store),
):
    """Case-insensitive substring search over text, company and topic."""
    questions = await store.search(q)
    return ok(
        [serialize_question(question) for question in questions],
        count=len(questions),
    )


@router.get("/categories")
async def get_categories(store: QuestionStore = Depends(get_question_store)):
    """Distinct topics, companies and roles."""
    categories = await store.distinct_values()
    return ok({
        "topics": categories.topics,
        "companies": categories.companies,
        "roles": categories.roles,
    })


@router.get("/{question_id}")
async def get_question(
    question_id: UUID, store: QuestionStore = Depends(get_question_store),
):
    question = await store.get_by_id(question_id)
    return ok(serialize_question(question))


@router.put("/{question_id}")
async def update_question(
    question_id: UUID,
    body: QuestionUpdate,
    caller: Caller = Depends(get_caller),
    store: QuestionStore = Depends(get_question_store),
):
    """Edit questionText/topic/difficulty. Owner or admin only."""
    question = await store.get_by_id(question_id)
    ensure_can_mutate(caller, question)
    updated = await store.update(question_id, body.to_patch())
    return ok(serialize_question(updated), message="Question updated successfully")


@router.delete("/{question_id}")
async def delete_question(
    question_id: UUID,
    caller: Caller = Depends(get_caller),
    store: QuestionStore = Depends(get_question_store),
):
    """Delete permanently. Owner or admin only."""
    question = await store.get_by_id(question_id)
    ensure_can_mutate(caller, question)
    await store.delete(question_id)
    return ok(message="Question deleted successfully")


@router.post("/{question_id}/upvote")
async def toggle_upvote(
    question_id: UUID,
    caller: Caller = Depends(get_caller),
    engine: UpvoteToggleEngine = Depends(get_upvote_engine),
):
    """Add the caller's upvote, or remove it if already present."""
    outcome = await engine.toggle_with_state(question_id, caller.id)
    return ok(
        {"upvotes": outcome.upvotes, "upvoted": outcome.upvoted},
        message="Upvote toggled",
    )


@router.get("/{question_id}/upvotes")
async def get_upvotes(
    question_id: UUID,
    engine: UpvoteToggleEngine = Depends(get_upvote_engine),
):
    return ok({"upvotes": await engine.count(question_id)})

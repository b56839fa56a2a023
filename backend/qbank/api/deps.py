"""FastAPI dependency providers for the question store and upvote engine."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qbank.config import get_settings
from qbank.infrastructure.database import get_db
from qbank.services.question_store import QuestionStore
from qbank.services.upvote_toggle import UpvoteToggleEngine


async def get_question_store(db: AsyncSession = Depends(get_db)) -> QuestionStore:
    return QuestionStore(db)


async def get_upvote_engine(db: AsyncSession = Depends(get_db)) -> UpvoteToggleEngine:
    return UpvoteToggleEngine(
        db, lock_timeout_seconds=get_settings().upvote_lock_timeout_seconds,
    )

"""Health & Readiness — liveness plus database and schema checks.

Invariants:
    - GET /health/ is 200 whenever the process serves requests
    - GET /health/ready is 200 only if the database answers and the questions table exists;
      otherwise 503 with the failing check named
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import select

from qbank import __version__
from qbank.core.errors import DatabaseError
from qbank.infrastructure import database
from qbank.models.question import Question

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "qbank-api", "version": __version__}


async def _schema_migrated(manager: database.DatabaseSessionManager) -> bool:
    try:
        async with manager.session() as db:
            await db.execute(select(Question.id).limit(1))
    except DatabaseError:
        logger.warning("Readiness: questions table unavailable", extra={"operation": "ready"})
        return False
    return True


@router.get("/ready")
async def readiness_check():
    """Ready once the database is reachable and migrations have run."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    schema_ok = await _schema_migrated(manager) if db_ok else False
    checks = {
        "database": "healthy" if db_ok else "unreachable",
        "schema": "migrated" if schema_ok else "missing",
    }
    if not (db_ok and schema_ok):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}

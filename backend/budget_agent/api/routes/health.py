"""Health & Readiness Probes - liveness and readiness endpoints.

Invariants:
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 if the database is unreachable or the
      conversations table cannot be queried; otherwise reports the stored count
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from budget_agent.core.errors import DatabaseError
from budget_agent.infrastructure import database
from budget_agent.infrastructure.session_store import SqlSessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe."""
    return {
        "status": "healthy",
        "service": "budget-agent-api",
        "version": "0.1.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe: database connectivity plus the conversations table."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    try:
        store = SqlSessionStore(manager.session)
        conversations = await store.conversation_count()
    except DatabaseError as e:
        logger.error(f"Conversations table unavailable: {e}")
        return _not_ready("conversations_table_unavailable")
    return {
        "status": "ready",
        "checks": {"database": "healthy", "conversations": conversations},
    }

"""SQL Session Store - conversation histories keyed by caller-opaque ids.

Invariants:
    - get_or_create and save are each one transaction (atomic per call)
    - A missing or unknown id creates an empty conversation; supplied ids are kept
    - Conversations idle longer than the TTL are evicted on every get_or_create
    - save() on an evicted/deleted id is a logged no-op (never resurrects it)
    - No locking across a turn: two turns on the same id race, last save wins
"""

import logging
import uuid
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_agent.core.messages import History
from budget_agent.core.wire_format import history_from_api, history_to_api
from budget_agent.models.conversation import Conversation

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqlSessionStore:
    """SessionStore backed by the conversations table."""

    def __init__(
        self,
        session_scope: SessionScope,
        ttl_seconds: int = 2 * 60 * 60,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session_scope = session_scope
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    async def get_or_create(
        self, conversation_id: str | None,
    ) -> tuple[str, History]:
        cid = conversation_id or str(uuid.uuid4())
        now = self._clock()
        async with self._session_scope() as db:
            await self._evict_expired(db, now)
            row = await db.get(Conversation, cid)
            if row is None:
                db.add(Conversation(
                    id=cid, message_history=[],
                    created_at=now, last_accessed_at=now,
                ))
                history: History = []
                logger.info(
                    "New conversation", extra={"conversation_id": cid},
                )
            else:
                row.last_accessed_at = now
                history = history_from_api(row.message_history or [])
            await db.commit()
        return cid, history

    async def save(self, conversation_id: str, history: History) -> None:
        async with self._session_scope() as db:
            row = await db.get(Conversation, conversation_id)
            if row is None:
                logger.warning(
                    "Save for unknown conversation ignored",
                    extra={"conversation_id": conversation_id},
                )
                return
            row.message_history = history_to_api(history)
            row.last_accessed_at = self._clock()
            await db.commit()

    async def delete(self, conversation_id: str) -> None:
        async with self._session_scope() as db:
            await db.execute(
                delete(Conversation).where(Conversation.id == conversation_id),
            )
            await db.commit()

    async def conversation_count(self) -> int:
        """Rows in the conversations table (readiness check)."""
        async with self._session_scope() as db:
            result = await db.execute(
                select(func.count()).select_from(Conversation),
            )
            return result.scalar_one()

    async def _evict_expired(self, db: AsyncSession, now: datetime) -> None:
        result = await db.execute(
            delete(Conversation).where(
                Conversation.last_accessed_at < now - self._ttl,
            ),
        )
        if result.rowcount:
            logger.info("Evicted %d idle conversations", result.rowcount)

"""Chat Routes - one SSE stream per user turn, plus conversation reset.

Invariants:
    - History is loaded once before the turn and saved once after it
    - A successful turn emits agent events, reply chunks, then one done event
    - A failed turn saves the partial history and emits exactly one error event,
      even when that save itself fails
    - Client disconnect (CancelledError) is logged and re-raised, never swallowed
"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from budget_agent.api.dependencies import get_agent_runner, get_session_store
from budget_agent.core.errors import AgentTurnError
from budget_agent.core.event_sequence import error_event, sse_line, turn_events
from budget_agent.core.messages import History
from budget_agent.core.repository_protocols import SessionStore
from budget_agent.schemas.chat import ChatRequest, ResetRequest, ResetResponse
from budget_agent.services.agent_runner import AgentRunner

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


@router.post("")
async def chat(
    body: ChatRequest,
    runner: AgentRunner = Depends(get_agent_runner),
    sessions: SessionStore = Depends(get_session_store),
):
    """Run one turn and stream its events as SSE."""

    async def event_generator():
        conversation_id = body.conversation_id
        try:
            conversation_id, history = await sessions.get_or_create(
                body.conversation_id,
            )
            logger.info(
                "Chat request (%d prior messages)", len(history),
                extra={"conversation_id": conversation_id},
            )
            turn = await runner.run(history, body.message)
            await sessions.save(conversation_id, turn.history)
            logger.info(
                "Chat complete: tools=%s events=%d incomplete=%s",
                turn.tools_used, len(turn.events), turn.incomplete,
                extra={"conversation_id": conversation_id},
            )
            for event in turn_events(turn, conversation_id):
                yield sse_line(event)
        except AgentTurnError as e:
            logger.error(
                "Agent error: %s", e.message,
                extra={"conversation_id": conversation_id, "error_code": e.code},
            )
            await _save_partial(sessions, conversation_id, e.history)
            yield sse_line(error_event(e))
        except asyncio.CancelledError:
            logger.info(
                "Client disconnected from chat stream",
                extra={"conversation_id": conversation_id},
            )
            raise
        except Exception as e:
            logger.error(
                "Unexpected error in chat stream: %s", e,
                extra={"conversation_id": conversation_id}, exc_info=True,
            )
            yield sse_line(error_event(e))

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def _save_partial(
    sessions: SessionStore, conversation_id: str, history: History,
) -> None:
    """Persist a failed turn's history; a failed save is logged, not raised."""
    try:
        await sessions.save(conversation_id, history)
    except Exception as e:
        logger.error(
            "Failed to save partial history: %s", e,
            extra={"conversation_id": conversation_id}, exc_info=True,
        )

@router.post("/reset", response_model=ResetResponse)
async def reset(
    body: ResetRequest,
    sessions: SessionStore = Depends(get_session_store),
):
    """Forget a conversation's history."""
    await sessions.delete(body.conversation_id)
    return ResetResponse(conversation_id=body.conversation_id)

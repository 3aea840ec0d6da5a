"""Event Sequence - ordered outward SSE envelopes for one finished turn.

Invariants:
    - Agent events are emitted first, in exactly the order the agent produced them
    - Reply text follows as word chunks, then exactly one terminal done event
    - A failed turn yields exactly one terminal error event and nothing else
    - Every envelope is {"type": str, "data": dict}
"""

import json
from typing import assert_never

from budget_agent.core.agent_events import (
    AgentEvent, AgentTurn, Artifact, ToolCompleted, ToolRunning,
)
from budget_agent.core.errors import BudgetAgentError

STOP_END_TURN = "end_turn"
STOP_MAX_ITERATIONS = "max_iterations"


def tool_use_event(name: str, status: str) -> dict:
    return {"type": "tool_use", "data": {"tool": name, "status": status}}


def chart_artifact_event(payload: dict) -> dict:
    return {"type": "chart_artifact", "data": dict(payload)}


def chunk_event(text: str) -> dict:
    return {"type": "chunk", "data": {"text": text}}


def done_event(conversation_id: str, incomplete: bool) -> dict:
    return {
        "type": "done",
        "data": {
            "conversation_id": conversation_id,
            "stop_reason": STOP_MAX_ITERATIONS if incomplete else STOP_END_TURN,
        },
    }


def error_event(exc: Exception) -> dict:
    """Terminal error envelope. Domain errors render themselves."""
    if isinstance(exc, BudgetAgentError):
        return exc.to_sse_event()
    return {
        "type": "error",
        "data": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
    }


def agent_event_envelope(event: AgentEvent) -> dict:
    match event:
        case ToolRunning(name=name):
            return tool_use_event(name, "running")
        case ToolCompleted(name=name):
            return tool_use_event(name, "completed")
        case Artifact(payload=payload):
            return chart_artifact_event(payload)
        case _:
            assert_never(event)


def text_chunks(text: str) -> list[str]:
    """Split reply text into word chunks, each followed by a space."""
    return [f"{word} " for word in text.split()]


def turn_events(turn: AgentTurn, conversation_id: str) -> list[dict]:
    events = [agent_event_envelope(e) for e in turn.events]
    events.extend(chunk_event(c) for c in text_chunks(turn.text))
    events.append(done_event(conversation_id, turn.incomplete))
    return events


def sse_line(event: dict) -> str:
    """Format an envelope as one SSE frame (named event + JSON data)."""
    data = json.dumps(event["data"], ensure_ascii=False)
    return f"event: {event['type']}\ndata: {data}\n\n"

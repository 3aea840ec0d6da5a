"""Event Sequence tests - outward SSE envelope ordering for one turn.

Tests cover:
    - Agent events first, then word chunks, then exactly one done
    - done.stop_reason reflects the incomplete flag
    - Error envelopes keep domain codes and hide unexpected details
"""

import json

from budget_agent.core.agent_events import (
    AgentTurn, Artifact, ToolCompleted, ToolRunning,
)
from budget_agent.core.errors import ProtocolError, UnknownToolError
from budget_agent.core.event_sequence import (
    done_event, error_event, sse_line, text_chunks, turn_events,
)


def _turn(text="", events=None, incomplete=False):
    return AgentTurn(
        text=text, tools_used=[], events=events or [],
        incomplete=incomplete, history=[],
    )


def test_turn_events_order():
    chart = {"chart_type": "bar", "title": "Groceries", "labels": [], "values": []}
    turn = _turn(
        text="You spent CHF 420.50",
        events=[
            ToolRunning("spending_by_category"),
            Artifact(chart),
            ToolCompleted("spending_by_category"),
        ],
    )
    events = turn_events(turn, "conv-1")

    assert [e["type"] for e in events] == [
        "tool_use", "chart_artifact", "tool_use",
        "chunk", "chunk", "chunk", "chunk", "done",
    ]
    assert events[0]["data"] == {"tool": "spending_by_category", "status": "running"}
    assert events[1]["data"] == chart
    assert events[2]["data"]["status"] == "completed"
    assert "".join(e["data"]["text"] for e in events[3:7]) == "You spent CHF 420.50 "
    assert events[-1]["data"] == {"conversation_id": "conv-1", "stop_reason": "end_turn"}


def test_empty_reply_is_only_done():
    assert [e["type"] for e in turn_events(_turn(), "c")] == ["done"]


def test_incomplete_turn_stop_reason():
    assert done_event("c", incomplete=True)["data"]["stop_reason"] == "max_iterations"


def test_text_chunks_collapse_whitespace():
    assert text_chunks("a  b\n c") == ["a ", "b ", "c "]
    assert text_chunks("   ") == []


def test_error_event_for_domain_error():
    event = error_event(ProtocolError(529, '{"type":"error"}'))
    assert event["type"] == "error"
    assert event["data"]["code"] == "PROVIDER_ERROR"
    assert "529" in event["data"]["message"]
    assert event["data"]["severity"] == "critical"
    assert event["data"]["recoverable"] is False


def test_error_event_for_tool_error_code():
    assert error_event(UnknownToolError("x"))["data"]["code"] == "UNKNOWN_TOOL"


def test_error_event_hides_unexpected_details():
    event = error_event(RuntimeError("secret connection string"))
    assert event["data"] == {
        "code": "INTERNAL_ERROR", "message": "An unexpected error occurred",
    }


def test_sse_line_format():
    line = sse_line({"type": "chunk", "data": {"text": "Café "}})
    assert line == 'event: chunk\ndata: {"text": "Café "}\n\n'
    assert json.loads(line.split("data: ", 1)[1]) == {"text": "Café "}


def test_error_event_matches_domain_sse_envelope():
    err = UnknownToolError("forecast")
    assert error_event(err) == err.to_sse_event()

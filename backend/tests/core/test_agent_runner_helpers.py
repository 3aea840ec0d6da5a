"""Agent Runner Helpers tests - completion unpacking and tool result builders.

Tests cover:
    - unpack_completion: block order, text concatenation, tool call extraction
    - tool_success_result / tool_error_result reference the call they answer
"""

from budget_agent.core.errors import ToolInputError
from budget_agent.core.messages import (
    Completion, Role, TextBlock, ToolCall, ToolUseBlock,
)
from budget_agent.core.tool_types import ToolOutput
from budget_agent.services.agent_runner_helpers import (
    render_tool_error, tool_error_result, tool_internal_error_result,
    tool_success_result, unpack_completion,
)

_CALL = ToolCall("toolu_01", "merchant_breakdown", {"category": "Dining"})


def test_unpack_mixed_completion():
    completion = Completion(content=(
        TextBlock("Looking "),
        ToolUseBlock(_CALL),
        TextBlock("now."),
    ))
    message, calls, text = unpack_completion(completion)

    assert message.role == Role.ASSISTANT
    assert message.content == completion.content
    assert calls == [_CALL]
    assert text == "Looking now."


def test_unpack_empty_completion():
    message, calls, text = unpack_completion(Completion(content=()))
    assert message.content == ()
    assert calls == []
    assert text == ""


def test_success_result():
    result = tool_success_result(_CALL, ToolOutput("Top: Café Z (CHF 80)"))
    assert result.tool_use_id == "toolu_01"
    assert result.content == "Top: Café Z (CHF 80)"
    assert result.is_error is False


def test_error_result_is_flagged():
    result = tool_error_result(_CALL, ToolInputError("top_n must be positive"))
    assert result.tool_use_id == "toolu_01"
    assert result.is_error is True
    assert result.content == "Tool error: top_n must be positive"


def test_render_tool_error():
    assert render_tool_error(ToolInputError("bad")) == "Tool error: bad"


def test_internal_error_result_hides_details():
    result = tool_internal_error_result(_CALL)
    assert result.tool_use_id == "toolu_01"
    assert result.is_error is True
    assert result.content == "Tool error: Internal error executing merchant_breakdown"

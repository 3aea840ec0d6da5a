"""Agent Runner Helpers - pure functions that split completions and build tool results.

Invariants:
    - All functions are pure (stateless, deterministic)
    - unpack_completion keeps block order; text is concatenated with no separator
    - Every ToolResult built here references the ToolCall it answers
"""

from typing import assert_never

from budget_agent.core.errors import ToolError
from budget_agent.core.messages import (
    Completion, Message, Role, TextBlock, ToolCall, ToolResult,
    ToolResultBlock, ToolUseBlock,
)
from budget_agent.core.tool_types import ToolOutput


def unpack_completion(
    completion: Completion,
) -> tuple[Message, list[ToolCall], str]:
    """Split a completion into (assistant message, tool calls, reply text)."""
    tool_calls: list[ToolCall] = []
    text = ""
    for block in completion.content:
        match block:
            case TextBlock(text=chunk):
                text += chunk
            case ToolUseBlock(call=call):
                tool_calls.append(call)
            case ToolResultBlock():
                pass
            case _:
                assert_never(block)
    message = Message(Role.ASSISTANT, completion.content)
    return message, tool_calls, text


def tool_success_result(call: ToolCall, output: ToolOutput) -> ToolResult:
    return ToolResult(tool_use_id=call.id, content=output.summary)


def tool_error_result(call: ToolCall, error: ToolError) -> ToolResult:
    return ToolResult(
        tool_use_id=call.id,
        content=render_tool_error(error),
        is_error=True,
    )


def tool_internal_error_result(call: ToolCall) -> ToolResult:
    """Error result for a tool that failed outside the ToolError contract."""
    return ToolResult(
        tool_use_id=call.id,
        content=f"Tool error: Internal error executing {call.name}",
        is_error=True,
    )


def render_tool_error(error: ToolError) -> str:
    return f"Tool error: {error.message}"

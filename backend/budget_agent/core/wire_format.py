"""Wire Format - Message <-> Anthropic Messages API JSON.

Invariants:
    - Round-trips every ContentBlock variant without loss (is_error omitted when False)
    - Unknown block types raise UnsupportedContentError (never silently dropped)
    - Used for request bodies, buffered-response normalization and history persistence
"""

from typing import Any, assert_never

from budget_agent.core.errors import UnsupportedContentError
from budget_agent.core.messages import (
    Completion, ContentBlock, History, Message, Role,
    TextBlock, ToolCall, ToolResult, ToolResultBlock, ToolUseBlock,
)


def block_to_api(block: ContentBlock) -> dict:
    match block:
        case TextBlock(text=text):
            return {"type": "text", "text": text}
        case ToolUseBlock(call=call):
            return {
                "type": "tool_use",
                "id": call.id,
                "name": call.name,
                "input": call.input,
            }
        case ToolResultBlock(result=result):
            data = {
                "type": "tool_result",
                "tool_use_id": result.tool_use_id,
                "content": result.content,
            }
            if result.is_error:
                data["is_error"] = True
            return data
        case _:
            assert_never(block)


def block_from_api(data: dict) -> ContentBlock:
    btype = data.get("type")
    if btype == "text":
        return TextBlock(data.get("text", ""))
    if btype == "tool_use":
        return ToolUseBlock(ToolCall(
            id=data["id"], name=data["name"], input=data.get("input"),
        ))
    if btype == "tool_result":
        return ToolResultBlock(ToolResult(
            tool_use_id=data["tool_use_id"],
            content=_tool_result_text(data.get("content", "")),
            is_error=bool(data.get("is_error", False)),
        ))
    raise UnsupportedContentError(str(btype))


def _tool_result_text(content: Any) -> str:
    """tool_result content may be a string or a list of text blocks."""
    if isinstance(content, str):
        return content
    return "".join(
        part.get("text", "") for part in content
        if isinstance(part, dict) and part.get("type") == "text"
    )


def message_to_api(message: Message) -> dict:
    return {
        "role": message.role.value,
        "content": [block_to_api(b) for b in message.content],
    }


def message_from_api(data: dict) -> Message:
    content = data.get("content", [])
    if isinstance(content, str):
        return Message(Role(data["role"]), (TextBlock(content),))
    return Message(
        Role(data["role"]), tuple(block_from_api(b) for b in content),
    )


def history_to_api(history: History) -> list[dict]:
    return [message_to_api(m) for m in history]


def history_from_api(data: list[dict]) -> History:
    return [message_from_api(m) for m in data]


def completion_from_api(data: dict) -> Completion:
    """Normalize a buffered (non-streamed) response document."""
    return Completion(
        content=tuple(block_from_api(b) for b in data.get("content", [])),
        stop_reason=data.get("stop_reason"),
    )

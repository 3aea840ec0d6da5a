"""Conversation Data Model - messages, content blocks, tool calls and completions.

Invariants:
    - ContentBlock is a closed union: TextBlock | ToolUseBlock | ToolResultBlock
    - StreamChunk is a closed union: TextChunk | ToolUseChunk | DoneChunk
    - All value types are frozen; History is the only mutable container
    - ToolCall.id is unique within one completion (provider-assigned, opaque)
    - ToolCall.input is any JSON value; None when streamed input could not be parsed

Design Decisions:
    - Dataclasses, not Pydantic: these never cross the HTTP boundary directly,
      core/wire_format.py owns the JSON shape
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Message author."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    input: Any


@dataclass(frozen=True)
class ToolResult:
    tool_use_id: str
    content: str
    is_error: bool = False


# ─── Content blocks ──────────────────────────────────────────────

@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    call: ToolCall


@dataclass(frozen=True)
class ToolResultBlock:
    result: ToolResult


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


@dataclass(frozen=True)
class Message:
    role: Role
    content: tuple[ContentBlock, ...]

    @classmethod
    def user_text(cls, text: str) -> "Message":
        return cls(Role.USER, (TextBlock(text),))

    @classmethod
    def tool_result(cls, result: ToolResult) -> "Message":
        """Single-block user message answering one tool call."""
        return cls(Role.USER, (ToolResultBlock(result),))


History = list[Message]


# ─── Stream notifications ────────────────────────────────────────

@dataclass(frozen=True)
class TextChunk:
    text: str


@dataclass(frozen=True)
class ToolUseChunk:
    call: ToolCall


@dataclass(frozen=True)
class DoneChunk:
    stop_reason: str | None


StreamChunk = TextChunk | ToolUseChunk | DoneChunk


# ─── Completion ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Completion:
    """One normalized model response, identical in shape for both call modes.

    `chunks` is only populated in streamed mode; it mirrors what arrived
    on the wire and is not part of content equivalence.
    """
    content: tuple[ContentBlock, ...]
    stop_reason: str | None = None
    chunks: tuple[StreamChunk, ...] = ()

    def tool_calls(self) -> list[ToolCall]:
        return [b.call for b in self.content if isinstance(b, ToolUseBlock)]

    def text(self) -> str:
        return "".join(
            b.text for b in self.content if isinstance(b, TextBlock)
        )

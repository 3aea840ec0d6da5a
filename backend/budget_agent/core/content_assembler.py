"""Content Assembler - StreamEvents -> ordered content blocks + notification chunks.

Invariants:
    - Block order in the Completion equals arrival order on the wire
    - Consecutive text deltas merge into the last block while it is text
    - Input fragments are concatenated verbatim, in arrival order, never reordered
    - At most one tool_use block is open; a second start while open raises
    - An empty or unparseable tool input becomes None, not an error
    - Deltas with no open block are dropped and logged; they never abort the stream

Design Decisions:
    - The open tool slot is an explicit Optional[_OpenToolUse]
    - StreamFailure is rejected here: the client turns it into ProtocolError first
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, assert_never

from budget_agent.core.errors import OverlappingToolBlockError
from budget_agent.core.messages import (
    Completion, ContentBlock, DoneChunk, StreamChunk,
    TextBlock, TextChunk, ToolCall, ToolUseBlock, ToolUseChunk,
)
from budget_agent.core.stream_events import (
    BlockKind, BlockStart, BlockStop, InputFragment, MessageDelta,
    MessageStop, StreamEvent, StreamFailure, TextDelta,
)

logger = logging.getLogger(__name__)


@dataclass
class _OpenToolUse:
    id: str
    name: str
    fragments: list[str] = field(default_factory=list)


class ContentAssembler:
    """Mutable accumulator for one streamed completion."""

    def __init__(self):
        self._blocks: list[ContentBlock] = []
        self._chunks: list[StreamChunk] = []
        self._current_tool: _OpenToolUse | None = None
        self._stop_reason: str | None = None

    @property
    def blocks(self) -> list[ContentBlock]:
        return list(self._blocks)

    @property
    def chunks(self) -> list[StreamChunk]:
        return list(self._chunks)

    def apply(self, event: StreamEvent) -> None:
        match event:
            case BlockStart():
                self._start(event)
            case TextDelta(text=text):
                self._append_text(text)
            case InputFragment(partial=partial):
                self._append_fragment(partial)
            case BlockStop():
                self._stop()
            case MessageDelta(stop_reason=reason):
                if reason is not None:
                    self._stop_reason = reason
            case MessageStop(stop_reason=reason):
                if reason is not None:
                    self._stop_reason = reason
                self._chunks.append(DoneChunk(self._stop_reason))
            case StreamFailure():
                raise ValueError("StreamFailure must be handled by the caller")
            case _:
                assert_never(event)

    def finish(self) -> Completion:
        if self._current_tool is not None:
            logger.warning(
                "Stream ended with tool_use %s still open, discarded",
                self._current_tool.id,
            )
            self._current_tool = None
        return Completion(
            content=tuple(self._blocks),
            stop_reason=self._stop_reason,
            chunks=tuple(self._chunks),
        )

    def _start(self, event: BlockStart) -> None:
        if event.kind != BlockKind.TOOL_USE:
            return
        if self._current_tool is not None:
            raise OverlappingToolBlockError(
                self._current_tool.id, event.tool_id or "",
            )
        self._current_tool = _OpenToolUse(
            id=event.tool_id or "", name=event.tool_name or "",
        )

    def _append_text(self, text: str) -> None:
        self._chunks.append(TextChunk(text))
        if self._blocks and isinstance(self._blocks[-1], TextBlock):
            self._blocks[-1] = TextBlock(self._blocks[-1].text + text)
        else:
            self._blocks.append(TextBlock(text))

    def _append_fragment(self, partial: str) -> None:
        if self._current_tool is None:
            logger.warning("input_json_delta with no open tool_use, dropped")
            return
        self._current_tool.fragments.append(partial)

    def _stop(self) -> None:
        tool = self._current_tool
        if tool is None:
            return
        self._current_tool = None
        call = ToolCall(
            id=tool.id, name=tool.name,
            input=parse_tool_input("".join(tool.fragments), tool.name),
        )
        self._blocks.append(ToolUseBlock(call))
        self._chunks.append(ToolUseChunk(call))


def parse_tool_input(raw: str, tool_name: str = "") -> Any:
    """Parse accumulated tool input JSON; None when empty or malformed."""
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(
            "Unparseable input for tool %s: %.200s", tool_name, raw,
            extra={"tool_name": tool_name},
        )
        return None

"""Stream Events - one SSE JSON payload -> one typed StreamEvent.

Invariants:
    - StreamEvent is a closed union (BlockStart | TextDelta | InputFragment |
      BlockStop | MessageDelta | MessageStop | StreamFailure)
    - parse_stream_event never raises on malformed payloads: they are logged and dropped
    - An unknown content block kind raises UnsupportedContentError
    - message_start / ping carry no content and map to None
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum

from budget_agent.core.errors import UnsupportedContentError

logger = logging.getLogger(__name__)


class BlockKind(str, Enum):
    TEXT = "text"
    TOOL_USE = "tool_use"


@dataclass(frozen=True)
class BlockStart:
    kind: BlockKind
    tool_id: str | None = None
    tool_name: str | None = None


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class InputFragment:
    partial: str


@dataclass(frozen=True)
class BlockStop:
    pass


@dataclass(frozen=True)
class MessageDelta:
    stop_reason: str | None


@dataclass(frozen=True)
class MessageStop:
    stop_reason: str | None


@dataclass(frozen=True)
class StreamFailure:
    """Provider reported an error inside an otherwise successful stream."""
    error_type: str
    message: str
    raw: str


StreamEvent = (
    BlockStart | TextDelta | InputFragment | BlockStop
    | MessageDelta | MessageStop | StreamFailure
)

_HOUSEKEEPING = frozenset({"message_start", "ping"})


def parse_stream_event(payload: str) -> StreamEvent | None:
    """Decode one data payload. Returns None for non-content or dropped payloads."""
    try:
        value = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("Dropping unparseable stream payload: %.200s", payload)
        return None
    if not isinstance(value, dict):
        logger.warning("Dropping non-object stream payload: %.200s", payload)
        return None

    etype = value.get("type")
    match etype:
        case "content_block_start":
            return _block_start(value.get("content_block"))
        case "content_block_delta":
            return _block_delta(value.get("delta"))
        case "content_block_stop":
            return BlockStop()
        case "message_delta":
            delta = value.get("delta") or {}
            return MessageDelta(delta.get("stop_reason"))
        case "message_stop":
            return MessageStop(value.get("stop_reason"))
        case "error":
            error = value.get("error") or {}
            return StreamFailure(
                error_type=str(error.get("type", "unknown")),
                message=str(error.get("message", "")),
                raw=payload,
            )
        case _ if etype in _HOUSEKEEPING:
            return None
        case _:
            logger.warning("Ignoring unknown stream event type %r", etype)
            return None


def _block_start(block) -> BlockStart | None:
    if not isinstance(block, dict):
        logger.warning("content_block_start without content_block, dropped")
        return None
    btype = block.get("type")
    if btype == BlockKind.TEXT.value:
        return BlockStart(BlockKind.TEXT)
    if btype == BlockKind.TOOL_USE.value:
        return BlockStart(
            BlockKind.TOOL_USE,
            tool_id=str(block.get("id", "")),
            tool_name=str(block.get("name", "")),
        )
    raise UnsupportedContentError(str(btype))


def _block_delta(delta) -> TextDelta | InputFragment | None:
    if not isinstance(delta, dict):
        logger.warning("content_block_delta without delta, dropped")
        return None
    dtype = delta.get("type")
    if dtype == "text_delta" and isinstance(delta.get("text"), str):
        return TextDelta(delta["text"])
    if dtype == "input_json_delta" and isinstance(delta.get("partial_json"), str):
        return InputFragment(delta["partial_json"])
    logger.warning("Dropping delta of type %r", dtype)
    return None

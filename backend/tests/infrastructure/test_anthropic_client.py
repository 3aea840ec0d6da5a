"""Anthropic Completion Client tests - buffered/streamed equivalence and error mapping.

Tests cover:
    - Streamed bodies decode through our own frame decoder and assembler
    - Buffered and streamed modes yield equivalent content for the same response
    - Status errors -> ProtocolError, connection failures -> TransportError
    - Mid-stream IO failures and in-stream error events
    - Request parameters (tools omitted when empty)

Design Decisions:
    - Fake SDK client at the AsyncAnthropic seam; buffered responses are real
      anthropic.types.Message objects so model_dump matches production
"""

import json
from contextlib import asynccontextmanager

import anthropic
import httpx
import pytest

from budget_agent.core.errors import (
    ProtocolError, TransportError, UnsupportedContentError,
)
from budget_agent.core.messages import (
    DoneChunk, Message, TextBlock, TextChunk, ToolCall, ToolUseBlock, ToolUseChunk,
)
from budget_agent.core.tool_types import ToolDefinition
from budget_agent.infrastructure.anthropic_client import AnthropicCompletionClient

from tests.sse_fixtures import (
    encode, full_response, message_start, ping, split_every, stream_error,
    text_block, tool_block,
)

_URL = "https://api.anthropic.com/v1/messages"
_REQUEST = httpx.Request("POST", _URL)

_TOOLS = [ToolDefinition("spending_by_category", "Totals", {"type": "object"})]


# -- Fake SDK ------------------------------------------------------------------

class _FakeRawResponse:
    """Raw streaming response: status + async byte iterator."""

    def __init__(self, chunks, status_code=200, fail_with=None):
        self.status_code = status_code
        self._chunks = chunks
        self._fail_with = fail_with

    async def iter_bytes(self):
        for c in self._chunks:
            yield c
        if self._fail_with is not None:
            raise self._fail_with


class _FakeStreamingCreate:
    def __init__(self, owner):
        self._owner = owner

    def create(self, **params):
        self._owner.calls.append(params)
        return self._open()

    @asynccontextmanager
    async def _open(self):
        if self._owner.error is not None:
            raise self._owner.error
        yield self._owner.raw


class _FakeMessages:
    def __init__(self, owner):
        self._owner = owner
        self.with_streaming_response = _FakeStreamingCreate(owner)

    async def create(self, **params):
        self._owner.calls.append(params)
        if self._owner.error is not None:
            raise self._owner.error
        return self._owner.message


class _FakeAnthropic:
    def __init__(self, message=None, raw=None, error=None):
        self.message = message
        self.raw = raw
        self.error = error
        self.calls: list[dict] = []
        self.messages = _FakeMessages(self)


def _sdk_message(content, stop_reason="end_turn"):
    return anthropic.types.Message.model_validate({
        "id": "msg_01", "type": "message", "role": "assistant",
        "model": "claude-test", "content": content,
        "stop_reason": stop_reason, "stop_sequence": None,
        "usage": {"input_tokens": 120, "output_tokens": 35},
    })


def _client(fake, stream=True):
    return AnthropicCompletionClient(
        api_key="sk-ant-test", model="claude-test", max_tokens=256,
        stream=stream, client=fake,
    )


_HISTORY = [Message.user_text("What did I spend on groceries?")]

_TOOL_INPUT = {"category": "Groceries", "year": 2024}

_STREAM_EVENTS = full_response(
    text_block(0, "Let me ", "check."),
    tool_block(
        1, "toolu_01", "spending_by_category",
        '{"category": "Gro', 'ceries", ', '"year": 2024}',
    ),
    stop_reason="tool_use",
)

_BUFFERED_CONTENT = [
    {"type": "text", "text": "Let me check."},
    {
        "type": "tool_use", "id": "toolu_01",
        "name": "spending_by_category", "input": _TOOL_INPUT,
    },
]


# -- Streamed ------------------------------------------------------------------

async def test_streamed_completion_assembles_blocks():
    raw = _FakeRawResponse(split_every(encode(_STREAM_EVENTS), 13))
    completion = await _client(_FakeAnthropic(raw=raw)).complete(
        "system", _HISTORY, _TOOLS,
    )

    assert completion.content == (
        TextBlock("Let me check."),
        ToolUseBlock(ToolCall("toolu_01", "spending_by_category", _TOOL_INPUT)),
    )
    assert completion.stop_reason == "tool_use"
    assert completion.chunks == (
        TextChunk("Let me "),
        TextChunk("check."),
        ToolUseChunk(ToolCall("toolu_01", "spending_by_category", _TOOL_INPUT)),
        DoneChunk("tool_use"),
    )


async def test_streamed_and_buffered_are_equivalent():
    streamed = await _client(
        _FakeAnthropic(raw=_FakeRawResponse([encode(_STREAM_EVENTS)])),
    ).complete("system", _HISTORY, _TOOLS)
    buffered = await _client(
        _FakeAnthropic(message=_sdk_message(_BUFFERED_CONTENT, "tool_use")),
        stream=False,
    ).complete("system", _HISTORY, _TOOLS)

    assert streamed.content == buffered.content
    assert streamed.stop_reason == buffered.stop_reason
    assert buffered.chunks == ()


async def test_per_call_stream_flag_overrides_default():
    fake = _FakeAnthropic(message=_sdk_message([{"type": "text", "text": "hi"}]))
    completion = await _client(fake, stream=True).complete(
        "system", _HISTORY, [], stream=False,
    )
    assert completion.text() == "hi"
    assert "stream" not in fake.calls[0]


async def test_housekeeping_and_done_sentinel_ignored():
    events = [message_start(), ping()] + full_response(text_block(0, "ok"))
    raw = _FakeRawResponse([encode(events, done_sentinel=True)])
    completion = await _client(_FakeAnthropic(raw=raw)).complete("s", _HISTORY, [])
    assert completion.content == (TextBlock("ok"),)


async def test_truncated_trailing_frame_not_parsed():
    body = encode(full_response(text_block(0, "ok")))
    partial = b'data: {"type": "content_block_start", "index": 1, "content_block": {"type": "te'
    raw = _FakeRawResponse([body, partial])
    completion = await _client(_FakeAnthropic(raw=raw)).complete("s", _HISTORY, [])
    assert completion.content == (TextBlock("ok"),)


async def test_unicode_split_across_network_chunks():
    body = encode(full_response(text_block(0, "Café – CHF 12")))
    raw = _FakeRawResponse(split_every(body, 1))
    completion = await _client(_FakeAnthropic(raw=raw)).complete("s", _HISTORY, [])
    assert completion.text() == "Café – CHF 12"


async def test_unknown_block_kind_in_stream_raises():
    events = [{
        "type": "content_block_start", "index": 0,
        "content_block": {"type": "thinking", "thinking": ""},
    }]
    raw = _FakeRawResponse([encode(events)])
    with pytest.raises(UnsupportedContentError):
        await _client(_FakeAnthropic(raw=raw)).complete("s", _HISTORY, [])


# -- Errors --------------------------------------------------------------------

async def test_in_stream_error_event_is_protocol_error():
    events = [message_start(), stream_error("overloaded_error", "Overloaded")]
    raw = _FakeRawResponse([encode(events)])
    with pytest.raises(ProtocolError) as exc:
        await _client(_FakeAnthropic(raw=raw)).complete("s", _HISTORY, [])
    assert exc.value.status_code == 200
    assert json.loads(exc.value.body)["error"]["type"] == "overloaded_error"


async def test_mid_stream_read_error_is_transport_error():
    raw = _FakeRawResponse(
        [encode([message_start()] + text_block(0, "partial"))],
        fail_with=httpx.ReadError("connection reset", request=_REQUEST),
    )
    with pytest.raises(TransportError):
        await _client(_FakeAnthropic(raw=raw)).complete("s", _HISTORY, [])


@pytest.mark.parametrize("stream", [True, False])
async def test_status_error_is_protocol_error_with_body(stream):
    body = '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}'
    response = httpx.Response(529, request=_REQUEST, text=body)
    error = anthropic.APIStatusError("Overloaded", response=response, body=None)

    with pytest.raises(ProtocolError) as exc:
        await _client(_FakeAnthropic(error=error), stream=stream).complete(
            "s", _HISTORY, [],
        )
    assert exc.value.status_code == 529
    assert exc.value.body == body


@pytest.mark.parametrize("stream", [True, False])
async def test_connection_error_is_transport_error(stream):
    error = anthropic.APIConnectionError(request=_REQUEST)
    with pytest.raises(TransportError):
        await _client(_FakeAnthropic(error=error), stream=stream).complete(
            "s", _HISTORY, [],
        )


async def test_timeout_is_transport_error():
    error = anthropic.APITimeoutError(request=_REQUEST)
    with pytest.raises(TransportError):
        await _client(_FakeAnthropic(error=error)).complete("s", _HISTORY, [])


# -- Request parameters --------------------------------------------------------

async def test_request_params_streamed():
    fake = _FakeAnthropic(raw=_FakeRawResponse([encode(full_response(text_block(0, "x")))]))
    await _client(fake).complete("You are a budget assistant.", _HISTORY, _TOOLS)

    params = fake.calls[0]
    assert params["model"] == "claude-test"
    assert params["max_tokens"] == 256
    assert params["system"] == "You are a budget assistant."
    assert params["messages"] == [{
        "role": "user",
        "content": [{"type": "text", "text": "What did I spend on groceries?"}],
    }]
    assert params["tools"] == [t.to_api() for t in _TOOLS]
    assert params["stream"] is True


async def test_tools_omitted_when_empty():
    fake = _FakeAnthropic(message=_sdk_message([{"type": "text", "text": "x"}]))
    await _client(fake, stream=False).complete("s", _HISTORY, [])
    assert "tools" not in fake.calls[0]


def test_default_sdk_client_has_no_retries():
    client = AnthropicCompletionClient(api_key="sk-ant-test", model="claude-test")
    assert client.client.max_retries == 0

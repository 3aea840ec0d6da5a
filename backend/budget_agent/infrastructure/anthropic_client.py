"""Anthropic Completion Client - one Messages API call, buffered or streamed, as a Completion.

Invariants:
    - Both modes return content-block-equivalent Completions for the same response
    - Streamed bodies are decoded here (FrameDecoder -> parse_stream_event ->
      ContentAssembler), never by the SDK's own event parser
    - Connection failures and timeouts (incl. mid-stream IO) -> TransportError
    - Non-success status -> ProtocolError(status, raw body); in-stream error event too
    - No retries: SDK max_retries=0 and no retry loop at this layer

Design Decisions:
    - with_streaming_response gives the raw httpx body while keeping SDK auth,
      headers and status-error mapping
"""

import logging

import anthropic
import httpx
from anthropic import APIConnectionError, APIStatusError

from budget_agent.core.content_assembler import ContentAssembler
from budget_agent.core.errors import ProtocolError, TransportError
from budget_agent.core.frame_decoder import decode_frames, frame_payloads
from budget_agent.core.messages import Completion, History
from budget_agent.core.stream_events import StreamFailure, parse_stream_event
from budget_agent.core.tool_types import ToolDefinition
from budget_agent.core.wire_format import completion_from_api, history_to_api

logger = logging.getLogger(__name__)


class AnthropicCompletionClient:
    """Normalizes Anthropic Messages API calls into Completions."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        timeout_seconds: int = 300,
        stream: bool = True,
        base_url: str | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.client = client or anthropic.AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.model = model
        self.max_tokens = max_tokens
        self.stream = stream

    async def complete(
        self,
        system: str,
        messages: History,
        tools: list[ToolDefinition],
        stream: bool | None = None,
    ) -> Completion:
        """Issue one request. `stream=None` uses the configured mode."""
        use_stream = self.stream if stream is None else stream
        params = self._request_params(system, messages, tools)
        try:
            if use_stream:
                return await self._complete_streamed(params)
            return await self._complete_buffered(params)
        except APIStatusError as e:
            logger.error(
                "Anthropic API returned %s", e.status_code,
                extra={"status_code": e.status_code},
            )
            raise ProtocolError(e.status_code, _response_body(e)) from e
        except APIConnectionError as e:
            logger.error(f"Anthropic connection failure: {e}")
            raise TransportError(str(e)) from e
        except httpx.TransportError as e:
            logger.error(f"Stream interrupted: {e!r}")
            raise TransportError(repr(e)) from e

    async def _complete_buffered(self, params: dict) -> Completion:
        response = await self.client.messages.create(**params)
        completion = completion_from_api(response.model_dump(exclude_none=True))
        usage = response.usage
        logger.info(
            "Anthropic completion (buffered)",
            extra={
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )
        return completion

    async def _complete_streamed(self, params: dict) -> Completion:
        assembler = ContentAssembler()
        async with self.client.messages.with_streaming_response.create(
            **params, stream=True,
        ) as response:
            async for frame in decode_frames(response.iter_bytes()):
                for payload in frame_payloads(frame):
                    event = parse_stream_event(payload)
                    if event is None:
                        continue
                    if isinstance(event, StreamFailure):
                        logger.error(
                            "Provider error mid-stream: %s %s",
                            event.error_type, event.message,
                        )
                        raise ProtocolError(response.status_code, event.raw)
                    assembler.apply(event)
        completion = assembler.finish()
        logger.info(
            "Anthropic completion (streamed): %d blocks, stop_reason=%s",
            len(completion.content), completion.stop_reason,
        )
        return completion

    def _request_params(
        self, system: str, messages: History, tools: list[ToolDefinition],
    ) -> dict:
        params = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system,
            "messages": history_to_api(messages),
        }
        if tools:
            params["tools"] = [t.to_api() for t in tools]
        return params


def _response_body(error: APIStatusError) -> str:
    """Raw body of a failed response (SDK reads it before raising)."""
    try:
        return error.response.text
    except httpx.ResponseNotRead:
        return error.message

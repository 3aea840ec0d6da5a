"""Agent Runner - bounded multi-turn loop: model call -> sequential tool calls -> repeat.

Invariants:
    - The user message is appended before the first model call
    - Assistant messages are appended only when non-empty
    - Tool calls run strictly one at a time, in the order the model returned them
    - Each tool-result message is appended right after its call, before the next call
    - ToolCompleted is emitted for every ToolRunning, success or failure
    - A failing tool never aborts the turn; it becomes an error-flagged tool result
      (unexpected exceptions are logged with traceback; CancelledError propagates)
    - CompletionError aborts the turn as AgentTurnError with the partial history
    - Hitting max_iterations is not an error: incomplete=True, nothing discarded

Design Decisions:
    - History is handed off by value: run() copies the caller's list and returns
      the updated one in AgentTurn.history
    - max_iterations is constructor configuration (Settings.agent_max_iterations)
"""

import logging

from budget_agent.core.agent_events import (
    AgentEvent, AgentTurn, Artifact, ToolCompleted, ToolRunning,
)
from budget_agent.core.errors import (
    AgentTurnError, CompletionError, ErrorContext, ToolError,
)
from budget_agent.core.messages import Completion, History, Message, ToolCall, ToolResult
from budget_agent.core.repository_protocols import CompletionProvider, ToolExecutor
from budget_agent.core.tool_types import ToolDefinition
from budget_agent.services.agent_runner_helpers import (
    tool_error_result, tool_internal_error_result, tool_success_result,
    unpack_completion,
)

logger = logging.getLogger(__name__)


class AgentRunner:
    """Drives one user turn against a completion provider and a tool executor."""

    DEFAULT_MAX_ITERATIONS = 10

    def __init__(
        self,
        client: CompletionProvider,
        executor: ToolExecutor,
        system_prompt: str,
        tools: list[ToolDefinition],
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        stream: bool | None = None,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        self.client = client
        self.executor = executor
        self.system_prompt = system_prompt
        self.tools = tools
        self.max_iterations = max_iterations
        self.stream = stream

    async def run(self, history: History, user_message: str) -> AgentTurn:
        history = list(history)
        history.append(Message.user_text(user_message))

        reply = ""
        tools_used: list[str] = []
        events: list[AgentEvent] = []
        stop_reason = None

        for iteration in range(1, self.max_iterations + 1):
            completion = await self._complete(history, iteration)
            stop_reason = completion.stop_reason
            assistant, tool_calls, text = unpack_completion(completion)
            if assistant.content:
                history.append(assistant)
            reply += text

            if not tool_calls:
                logger.info(
                    "Agent done (no more tool calls)",
                    extra={"iteration": iteration},
                )
                return AgentTurn(
                    text=reply, tools_used=tools_used, events=events,
                    incomplete=False, history=history,
                    iterations=iteration, stop_reason=stop_reason,
                )

            for call in tool_calls:
                result = await self._execute_tool(call, events, tools_used)
                history.append(Message.tool_result(result))

        logger.warning(
            "Agent stopped at iteration cap (%d)", self.max_iterations,
            extra={"iteration": self.max_iterations},
        )
        return AgentTurn(
            text=reply, tools_used=tools_used, events=events,
            incomplete=True, history=history,
            iterations=self.max_iterations, stop_reason=stop_reason,
        )

    async def _complete(self, history: History, iteration: int) -> Completion:
        logger.debug("LLM call", extra={"iteration": iteration})
        try:
            return await self.client.complete(
                self.system_prompt, history, self.tools, stream=self.stream,
            )
        except CompletionError as e:
            logger.error(
                "Completion failed: %s", e.message,
                extra={"iteration": iteration, "error_code": e.code},
            )
            raise AgentTurnError(
                e, history, ErrorContext(iteration=iteration),
            ) from e

    async def _execute_tool(
        self, call: ToolCall, events: list[AgentEvent], tools_used: list[str],
    ) -> ToolResult:
        logger.info(
            "Tool call %s input=%s", call.name, call.input,
            extra={"tool_name": call.name},
        )
        events.append(ToolRunning(call.name))
        try:
            output = await self.executor.run(call.name, call.input)
        except ToolError as e:
            logger.warning(
                "Tool error: %s", e.message,
                extra={"tool_name": call.name, "error_code": e.code},
            )
            events.append(ToolCompleted(call.name))
            return tool_error_result(call, e)
        except Exception as e:
            logger.error(
                "Unexpected error in tool '%s': %s", call.name, e,
                extra={"tool_name": call.name}, exc_info=True,
            )
            events.append(ToolCompleted(call.name))
            return tool_internal_error_result(call)

        logger.info(
            "Tool ok: %d chars, %d artifacts",
            len(output.summary), len(output.artifacts),
            extra={"tool_name": call.name},
        )
        events.extend(Artifact(a) for a in output.artifacts)
        tools_used.append(call.name)
        events.append(ToolCompleted(call.name))
        return tool_success_result(call, output)

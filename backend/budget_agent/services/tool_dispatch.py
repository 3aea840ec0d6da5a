"""Tool Dispatch - explicit routing from tool_name to an async handler.

Invariants:
    - Every tool->handler mapping is visible in one dict; no getattr magic
    - Unknown tools raise UnknownToolError; non-object input raises ToolInputError
    - Missing required fields (per the tool's input_schema) raise ToolInputError
    - Handler ToolErrors propagate untouched; the agent runner turns them into results
    - definitions() only advertises tools that have a handler

Design Decisions:
    - Handlers are injected: the transaction queries behind each tool live
      outside this package
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from budget_agent.core.errors import ToolInputError, UnknownToolError
from budget_agent.core.tool_types import ToolDefinition, ToolOutput
from budget_agent.services.define_budget_tools import budget_tool_definitions

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict], Awaitable[ToolOutput]]


class ToolDispatch:
    """Routes tool_name -> handler. Explicit registration, no auto-discovery."""

    def __init__(
        self,
        handlers: Mapping[str, ToolHandler] | None = None,
        definitions: list[ToolDefinition] | None = None,
    ):
        self._handlers: dict[str, ToolHandler] = dict(handlers or {})
        defs = definitions if definitions is not None else budget_tool_definitions()
        self._definitions = {d.name: d for d in defs}

    def register(
        self, name: str, handler: ToolHandler,
        definition: ToolDefinition | None = None,
    ) -> None:
        self._handlers[name] = handler
        if definition is not None:
            self._definitions[name] = definition

    def definitions(self) -> list[ToolDefinition]:
        return [d for name, d in self._definitions.items() if name in self._handlers]

    async def run(self, name: str, tool_input: Any) -> ToolOutput:
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("Unknown tool requested", extra={"tool_name": name})
            raise UnknownToolError(name)
        if not isinstance(tool_input, dict):
            raise ToolInputError(
                f"Input for '{name}' must be a JSON object, "
                f"got {type(tool_input).__name__}",
            )
        self._check_required(name, tool_input)
        return await handler(tool_input)

    def _check_required(self, name: str, tool_input: dict) -> None:
        definition = self._definitions.get(name)
        if definition is None:
            return
        for field in definition.input_schema.get("required", []):
            if field not in tool_input:
                raise ToolInputError(
                    f"Missing required field '{field}' for '{name}'", field,
                )

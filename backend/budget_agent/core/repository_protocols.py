"""Boundary Protocols - contracts between the agent core and its collaborators.

Invariants:
    - Core NEVER imports from shell; implementations are injected
    - CompletionProvider raises CompletionError subclasses only
    - ToolExecutor raises ToolError for expected failures; anything else is a defect
    - SessionStore get_or_create/save are atomic per call; no cross-turn locking

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from typing import Any, Protocol

from budget_agent.core.messages import Completion, History
from budget_agent.core.tool_types import ToolDefinition, ToolOutput


class CompletionProvider(Protocol):
    """One model call, buffered or streamed, normalized to a Completion."""
    async def complete(
        self,
        system: str,
        messages: History,
        tools: list[ToolDefinition],
        stream: bool | None = None,
    ) -> Completion: ...


class ToolExecutor(Protocol):
    """Runs one named tool. Raises ToolError on failure."""
    async def run(self, name: str, tool_input: Any) -> ToolOutput: ...


class SessionStore(Protocol):
    """Conversation history storage, keyed by caller-opaque ids."""
    async def get_or_create(
        self, conversation_id: str | None,
    ) -> tuple[str, History]: ...
    async def save(self, conversation_id: str, history: History) -> None: ...
    async def delete(self, conversation_id: str) -> None: ...

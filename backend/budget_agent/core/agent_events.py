"""Agent Events - the ordered, externally observable record of one turn.

Invariants:
    - AgentEvent is a closed union: ToolRunning | ToolCompleted | Artifact
    - For every tool call: ToolRunning, then its Artifacts (success only), then ToolCompleted
    - AgentTurn.history is the caller's history plus everything this turn appended
"""

from dataclasses import dataclass

from budget_agent.core.messages import History


@dataclass(frozen=True)
class ToolRunning:
    name: str


@dataclass(frozen=True)
class ToolCompleted:
    name: str


@dataclass(frozen=True)
class Artifact:
    payload: dict


AgentEvent = ToolRunning | ToolCompleted | Artifact


@dataclass
class AgentTurn:
    """Result of one user turn. The caller persists `history`."""
    text: str
    tools_used: list[str]
    events: list[AgentEvent]
    incomplete: bool
    history: History
    iterations: int = 0
    stop_reason: str | None = None

    @property
    def artifacts(self) -> list[dict]:
        return [e.payload for e in self.events if isinstance(e, Artifact)]

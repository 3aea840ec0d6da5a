"""Tool Types - definitions sent to the model and outputs returned by executors.

Invariants:
    - ToolDefinition.to_api() matches the Anthropic Tool Use format
    - ToolOutput.artifacts are opaque: re-emitted verbatim, never inspected
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any]

    def to_api(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    @classmethod
    def from_api(cls, data: dict) -> "ToolDefinition":
        return cls(data["name"], data.get("description", ""), data["input_schema"])


@dataclass(frozen=True)
class ToolOutput:
    summary: str
    artifacts: tuple[dict, ...] = field(default_factory=tuple)

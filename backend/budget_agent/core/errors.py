"""Error Hierarchy - typed, categorized exceptions for every budget-agent failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - CompletionError subclasses are fatal to the completion call and abort the turn
    - ToolError subclasses are local to one tool call and never abort the turn
    - to_response() produces the REST envelope; to_sse_event() produces the SSE envelope

Design Decisions:
    - TransportError vs ProtocolError: "could not talk to the provider" and
      "provider answered with a failure" are distinct kinds, neither retried here
    - AgentTurnError carries the partial history so the caller can persist it
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    TOOL = "tool"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    PROTOCOL = "protocol"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    conversation_id: str | None = None
    tool_name: str | None = None
    iteration: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class BudgetAgentError(Exception):
    """Base exception for all budget-agent errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "conversation_id": self.context.conversation_id,
                    "tool_name": self.context.tool_name,
                    "iteration": self.context.iteration,
                },
            }
        }

    def to_sse_event(self) -> dict:
        """Convert to SSE error event."""
        return {
            "type": "error",
            "data": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "severity": self.severity.value,
                "recoverable": self.severity in (
                    ErrorSeverity.INFO, ErrorSeverity.WARNING,
                ),
            },
        }


# ─── Completion Errors (fatal to the turn) ──────────────────────

class CompletionError(BudgetAgentError):
    """A completion call failed; no partial completion is synthesized."""


class TransportError(CompletionError):
    """Network or IO failure talking to the provider (incl. mid-stream)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Transport failure: {message}",
            "TRANSPORT_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )


class ProtocolError(CompletionError):
    """Provider answered with a non-success status (or an in-stream error)."""
    def __init__(
        self, status_code: int, body: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Provider error {status_code}: {body}",
            "PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.status_code = status_code
        self.body = body


class UnsupportedContentError(CompletionError):
    """Provider produced a content block variant this client does not model."""
    def __init__(self, kind: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unsupported content block type: {kind!r}",
            "UNSUPPORTED_CONTENT", ErrorCategory.PROTOCOL,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.kind = kind


class OverlappingToolBlockError(CompletionError):
    """A tool_use block started while another one was still open."""
    def __init__(
        self, open_id: str, new_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"tool_use block {new_id!r} started while {open_id!r} is still open",
            "OVERLAPPING_TOOL_BLOCK", ErrorCategory.PROTOCOL,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.open_id = open_id
        self.new_id = new_id


# ─── Tool Errors (local to one call) ────────────────────────────

class ToolError(BudgetAgentError):
    """Tool invocation failed. Becomes an error-flagged tool result."""
    def __init__(
        self, message: str, code: str = "TOOL_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.TOOL,
            ErrorSeverity.WARNING, context, 400,
        )


class UnknownToolError(ToolError):
    """Model asked for a tool that is not registered."""
    def __init__(self, tool_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tool '{tool_name}' does not exist.", "UNKNOWN_TOOL", context,
        )
        self.tool_name = tool_name


class ToolInputError(ToolError):
    """Tool input failed validation."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(message, "INVALID_TOOL_INPUT", context)
        self.field = field


# ─── Turn / Infrastructure Errors ───────────────────────────────

class AgentTurnError(BudgetAgentError):
    """A turn aborted on a completion failure.

    `history` is the conversation as committed before the failing call
    (user message plus any completed iterations); nothing is rolled back.
    """
    def __init__(
        self, cause: CompletionError, history: list,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            cause.message, cause.code, cause.category,
            cause.severity, context or cause.context, cause.http_status,
        )
        self.cause = cause
        self.history = history


class DatabaseError(BudgetAgentError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

"""Chat Schemas - Pydantic models with field-level validation for the chat endpoints.

Invariants:
    - ChatRequest.message: 1-10000 chars, stripped, non-empty
    - conversation_id is caller-opaque; omitted means "start a new conversation"
"""

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    """One user turn."""
    message: str = Field(min_length=1, max_length=10_000)
    conversation_id: str | None = Field(None, min_length=1, max_length=64)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty or whitespace")
        return v


class ResetRequest(BaseModel):
    conversation_id: str = Field(min_length=1, max_length=64)


class ResetResponse(BaseModel):
    status: str = "ok"
    conversation_id: str

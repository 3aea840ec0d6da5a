"""Pydantic Schemas - request and SSE payload validation for the chat endpoints."""

"""API Dependencies - process-wide collaborators injected into routes.

Invariants:
    - One AnthropicCompletionClient per process (connection pool reuse)
    - A fresh AgentRunner per request; it holds no per-turn state between runs
    - configure_agent() is how an embedding app installs tool handlers and its prompt
"""

from fastapi import Depends

from budget_agent.config import get_settings
from budget_agent.infrastructure import database
from budget_agent.infrastructure.anthropic_client import AnthropicCompletionClient
from budget_agent.infrastructure.session_store import SqlSessionStore
from budget_agent.services.agent_runner import AgentRunner
from budget_agent.services.system_prompt import DataSummary, build_system_prompt
from budget_agent.services.tool_dispatch import ToolDispatch

_tool_dispatch = ToolDispatch()
_system_prompt = build_system_prompt(DataSummary(), [])
_completion_client: AnthropicCompletionClient | None = None


def configure_agent(dispatch: ToolDispatch, system_prompt: str) -> None:
    global _tool_dispatch, _system_prompt
    _tool_dispatch = dispatch
    _system_prompt = system_prompt


def get_tool_dispatch() -> ToolDispatch:
    return _tool_dispatch


def get_completion_client() -> AnthropicCompletionClient:
    """Singleton client, built lazily from settings."""
    global _completion_client
    if _completion_client is None:
        settings = get_settings()
        _completion_client = AnthropicCompletionClient(
            api_key=settings.anthropic_api_key,
            model=settings.agent_model,
            max_tokens=settings.agent_max_tokens,
            timeout_seconds=settings.anthropic_timeout_seconds,
            stream=settings.agent_streaming,
            base_url=settings.anthropic_base_url,
        )
    return _completion_client


def get_agent_runner(
    client: AnthropicCompletionClient = Depends(get_completion_client),
    dispatch: ToolDispatch = Depends(get_tool_dispatch),
) -> AgentRunner:
    return AgentRunner(
        client,
        dispatch,
        system_prompt=_system_prompt,
        tools=dispatch.definitions(),
        max_iterations=get_settings().agent_max_iterations,
    )


def get_session_store() -> SqlSessionStore:
    if database.db_manager is None:
        raise RuntimeError("Database not initialized")
    return SqlSessionStore(
        database.db_manager.session,
        ttl_seconds=get_settings().session_ttl_seconds,
    )

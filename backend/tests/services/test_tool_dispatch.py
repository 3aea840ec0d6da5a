"""Tool Dispatch - tests for explicit tool routing.

Tests cover:
    - Known tools route to the registered handler
    - Unknown tools raise UnknownToolError
    - Non-object input and missing required fields raise ToolInputError
    - definitions() only advertises tools with handlers
"""

import pytest

from budget_agent.core.errors import ToolError, ToolInputError, UnknownToolError
from budget_agent.core.tool_types import ToolDefinition, ToolOutput
from budget_agent.services.define_budget_tools import (
    TOOLS_BUDGET, budget_tool_definitions,
)
from budget_agent.services.tool_dispatch import ToolDispatch


def _recording_handler(summary="ok"):
    seen = []

    async def handler(tool_input):
        seen.append(tool_input)
        return ToolOutput(summary=summary)

    return handler, seen


async def test_dispatch_routes_to_registered_handler():
    handler, seen = _recording_handler("CHF 420.50")
    dispatch = ToolDispatch({"spending_by_category": handler})

    result = await dispatch.run("spending_by_category", {"year": 2024})

    assert result.summary == "CHF 420.50"
    assert seen == [{"year": 2024}]


async def test_dispatch_raises_for_unknown_tool():
    dispatch = ToolDispatch()
    with pytest.raises(UnknownToolError) as exc:
        await dispatch.run("nonexistent_tool", {})
    assert exc.value.code == "UNKNOWN_TOOL"


async def test_defined_but_unregistered_tool_is_unknown():
    dispatch = ToolDispatch()
    with pytest.raises(UnknownToolError):
        await dispatch.run("monthly_trend", {})


async def test_null_input_rejected():
    handler, seen = _recording_handler()
    dispatch = ToolDispatch({"monthly_trend": handler})
    with pytest.raises(ToolInputError):
        await dispatch.run("monthly_trend", None)
    assert seen == []


async def test_missing_required_field_rejected():
    handler, _ = _recording_handler()
    dispatch = ToolDispatch({"merchant_breakdown": handler})
    with pytest.raises(ToolInputError) as exc:
        await dispatch.run("merchant_breakdown", {"top_n": 5})
    assert exc.value.field == "category"


async def test_handler_tool_error_propagates():
    async def failing(tool_input):
        raise ToolError("No transactions in range")

    dispatch = ToolDispatch({"income_vs_spending": failing})
    with pytest.raises(ToolError, match="No transactions"):
        await dispatch.run("income_vs_spending", {})


async def test_register_custom_tool_with_definition():
    handler, _ = _recording_handler("42")
    definition = ToolDefinition(
        "forecast", "Project next month",
        {"type": "object", "properties": {"months": {"type": "integer"}},
         "required": ["months"]},
    )
    dispatch = ToolDispatch(definitions=[])
    dispatch.register("forecast", handler, definition)

    assert dispatch.definitions() == [definition]
    assert (await dispatch.run("forecast", {"months": 1})).summary == "42"
    with pytest.raises(ToolInputError):
        await dispatch.run("forecast", {})


def test_definitions_only_lists_registered_tools():
    handler, _ = _recording_handler()
    dispatch = ToolDispatch({"monthly_trend": handler, "list_transactions": handler})
    assert [d.name for d in dispatch.definitions()] == [
        "monthly_trend", "list_transactions",
    ]


def test_budget_tools_registered():
    names = [d.name for d in budget_tool_definitions()]
    assert names == [
        "spending_by_category", "monthly_trend", "merchant_breakdown",
        "search_transactions", "list_transactions", "income_vs_spending",
    ]


def test_budget_tool_schemas_are_objects():
    for tool in TOOLS_BUDGET:
        assert tool["input_schema"]["type"] == "object"
        assert tool["input_schema"]["additionalProperties"] is False
        assert ToolDefinition.from_api(tool).to_api() == tool

"""Budget Tool Schemas - Anthropic Tool Use format for the transaction analysis tools.

Invariants:
    - Every schema is a JSON object schema with additionalProperties: false
    - merchant_breakdown, search_transactions, list_transactions declare required inputs
    - Handlers for these names are registered by the embedding application
"""

from budget_agent.core.tool_types import ToolDefinition

TOOLS_BUDGET = [
    {
        "name": "spending_by_category",
        "description": (
            "Summarise spending by category with optional year/month filters."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "year": {"type": "integer"},
                "month": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
    {
        "name": "monthly_trend",
        "description": (
            "Summarise monthly spending trend with optional category/year filters."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "category": {"type": "string"},
                "year": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
    {
        "name": "merchant_breakdown",
        "description": (
            "Show top merchants within a category with optional top_n."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "category": {"type": "string"},
                "top_n": {"type": "integer"},
            },
            "required": ["category"],
            "additionalProperties": False,
        },
    },
    {
        "name": "search_transactions",
        "description": (
            "Search transactions by merchant name or description. Returns total "
            "spend, count, average, date range, merchant name variants, and a "
            "monthly spending chart."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "search": {
                    "type": "string",
                    "description": (
                        "Search term to match against merchant name or raw description"
                    ),
                },
                "category": {"type": "string"},
                "year": {"type": "integer"},
                "month": {"type": "integer"},
            },
            "required": ["search"],
            "additionalProperties": False,
        },
    },
    {
        "name": "list_transactions",
        "description": (
            "List individual transactions matching a search term. Returns date, "
            "amount, merchant, and raw description for each transaction."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "search": {
                    "type": "string",
                    "description": (
                        "Search term to match against merchant name or raw description"
                    ),
                },
                "category": {"type": "string"},
                "year": {"type": "integer"},
                "month": {"type": "integer"},
                "limit": {
                    "type": "integer",
                    "description": "Max rows to return (default 50)",
                },
            },
            "required": ["search"],
            "additionalProperties": False,
        },
    },
    {
        "name": "income_vs_spending",
        "description": (
            "Compare monthly income vs spending with optional year filter."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "year": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
]
# Total: 6 tools


def budget_tool_definitions() -> list[ToolDefinition]:
    return [ToolDefinition.from_api(t) for t in TOOLS_BUDGET]

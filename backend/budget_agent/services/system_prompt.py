"""System Prompt - budget-assistant instructions rendered from a data summary.

Invariants:
    - Pure: same summary + categories -> same prompt
    - Unknown date bounds render as "unknown range"
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CategoryInfo:
    name: str
    description: str


@dataclass(frozen=True)
class CategoryCount:
    name: str
    count: int


@dataclass(frozen=True)
class DataSummary:
    total_transactions: int = 0
    min_date: str | None = None
    max_date: str | None = None
    categories: list[CategoryCount] = field(default_factory=list)


def build_system_prompt(
    summary: DataSummary, categories: list[CategoryInfo],
) -> str:
    category_lines = "".join(
        f"- {c.name}: {c.description}\n" for c in categories
    )
    category_counts = "".join(
        f"- {c.name} ({c.count} tx)\n" for c in summary.categories
    )
    if summary.min_date and summary.max_date:
        date_range = f"{summary.min_date} to {summary.max_date}"
    else:
        date_range = "unknown range"

    return (
        "You are a budget analysis assistant. Use the provided tools to "
        "answer questions about spending.\n\n"
        "DATA SUMMARY\n"
        f"- Date range: {date_range}\n"
        f"- Total transactions: {summary.total_transactions}\n"
        f"- Categories and counts:\n{category_counts}\n"
        f"CATEGORY SCHEMA\n{category_lines}\n"
        "TOOLS\n"
        "- spending_by_category: totals by category with optional year/month filters\n"
        "- monthly_trend: monthly spending totals with optional category/year filters\n"
        "- merchant_breakdown: top merchants within a category\n"
        "- search_transactions: totals and monthly chart for a merchant or description search\n"
        "- list_transactions: individual transactions matching a search term\n"
        "- income_vs_spending: monthly income vs spending, optional year filter\n\n"
        "Guidance: keep summaries concise, and use tools for quantitative questions."
    )

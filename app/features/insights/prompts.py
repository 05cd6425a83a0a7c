"""
Prompt template and response schema for budget insights.

The instruction text and INSIGHTS_RESPONSE_SCHEMA describe the same output
contract; change them together.
"""

from typing import Any, Dict, List

from app.shared.utils import to_json_text

INSIGHTS_FIELDS = ("breakdown", "saving_tips", "risk_areas", "financial_health_score")

INSIGHTS_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "breakdown": {
            "type": "string",
            "description": "Detailed breakdown of spending patterns",
        },
        "saving_tips": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of actionable saving tips",
        },
        "risk_areas": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Financial areas that need attention",
        },
        "financial_health_score": {
            "type": "number",
            "description": "Financial health score from 0-100",
        },
    },
    "required": list(INSIGHTS_FIELDS),
}

INSIGHTS_PROMPT_TEMPLATE = """
As a senior financial advisor, analyze the following financial data for {month}/{year}:

Transactions:
{transactions}

Budgets:
{budgets}

Provide a detailed breakdown of spending, actionable saving tips, identify risk areas, and calculate a financial health score (0-100).
Return the response in strict JSON format with these exact fields: breakdown (string), saving_tips (array of strings), risk_areas (array of strings), and financial_health_score (number from 0-100).
"""


def build_insights_prompt(
    transactions: List[Any],
    budgets: List[Any],
    month: int,
    year: int,
) -> str:
    """
    Render the insights instruction for one month of data.

    Args:
        transactions: Transaction records, embedded as JSON text
        budgets: Budget records, embedded as JSON text
        month: Calendar month (1-12)
        year: Calendar year

    Returns:
        Prompt text ready to send to Gemini
    """
    return INSIGHTS_PROMPT_TEMPLATE.format(
        month=month,
        year=year,
        transactions=to_json_text(transactions),
        budgets=to_json_text(budgets),
    ).strip()

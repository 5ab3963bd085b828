"""
Cost Calculator
===============
Token cost calculations against per-million-token model prices.
"""

from decimal import Decimal

from cost_estimator.schemas.catalog import AIModel
from cost_estimator.schemas.estimate import CostEstimate

TOKENS_PER_UNIT = Decimal("1000000")


def calculate_cost(
    model: AIModel,
    input_tokens: int,
    output_tokens: int,
) -> CostEstimate:
    """
    Calculate the cost of a token count on a model.

    Args:
        model: Catalog model carrying per-million-token prices
        input_tokens: Number of prompt tokens
        output_tokens: Number of completion tokens

    Returns:
        Unrounded cost breakdown in USD
    """
    if input_tokens < 0 or output_tokens < 0:
        raise ValueError("Token counts must be >= 0")

    input_cost = (Decimal(input_tokens) / TOKENS_PER_UNIT) * model.input_cost_per_million
    output_cost = (Decimal(output_tokens) / TOKENS_PER_UNIT) * model.output_cost_per_million

    return CostEstimate(
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=input_cost + output_cost,
    )


def format_currency(amount: Decimal) -> str:
    """Format a USD amount; sub-cent amounts keep six decimals."""
    if Decimal("0") < amount < Decimal("0.01"):
        return f"${amount:.6f}"
    return f"${amount:.4f}"


def format_number(value: int) -> str:
    return f"{value:,}"

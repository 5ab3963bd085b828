"""
Cost Calculator Tests
=====================
Tests for token cost calculation and formatting.
"""

from decimal import Decimal

import pytest

from cost_estimator.core.pricing import calculate_cost, format_currency, format_number
from cost_estimator.schemas.catalog import AIModel


class TestCalculateCost:
    """Tests for cost calculation."""

    @pytest.fixture
    def model(self) -> AIModel:
        """GPT-4o priced at $2.50 / $10.00 per million tokens."""
        return AIModel(
            id="gpt-4o",
            name="GPT-4o",
            provider="OpenAI",
            input_cost_per_million=Decimal("2.5"),
            output_cost_per_million=Decimal("10"),
        )

    def test_one_million_tokens_costs_list_price(self, model: AIModel):
        """Test that one million tokens cost exactly the per-million price."""
        estimate = calculate_cost(model, 1_000_000, 1_000_000)

        assert estimate.input_cost == Decimal("2.5")
        assert estimate.output_cost == Decimal("10")
        assert estimate.total_cost == Decimal("12.5")

    def test_split_costs(self, model: AIModel):
        """Test input and output are priced separately."""
        estimate = calculate_cost(model, 1000, 500)

        assert estimate.input_cost == Decimal("0.0025")
        assert estimate.output_cost == Decimal("0.005")
        assert estimate.total_cost == estimate.input_cost + estimate.output_cost
        assert estimate.input_tokens == 1000
        assert estimate.output_tokens == 500
        assert estimate.model == model

    def test_three_fifteen_pricing(self):
        """Test a $3 / $15 model on 1M input and 500K output tokens."""
        model = AIModel(
            id="claude-3-5-sonnet",
            name="Claude 3.5 Sonnet",
            provider="Anthropic",
            input_cost_per_million=Decimal("3"),
            output_cost_per_million=Decimal("15"),
        )

        estimate = calculate_cost(model, 1_000_000, 500_000)

        assert estimate.input_cost == Decimal("3.0")
        assert estimate.output_cost == Decimal("7.5")
        assert estimate.total_cost == Decimal("10.5")

    def test_zero_tokens_zero_cost(self, model: AIModel):
        """Test that zero tokens result in zero cost."""
        estimate = calculate_cost(model, 0, 0)

        assert estimate.total_cost == Decimal("0")

    def test_costs_are_not_rounded(self, model: AIModel):
        """Test that a single token keeps its full precision."""
        estimate = calculate_cost(model, 1, 0)

        assert estimate.input_cost == Decimal("0.0000025")

    def test_negative_tokens_rejected(self, model: AIModel):
        """Test that negative token counts raise."""
        with pytest.raises(ValueError):
            calculate_cost(model, -1, 0)

        with pytest.raises(ValueError):
            calculate_cost(model, 0, -5)


class TestFormatting:
    """Tests for display formatting."""

    def test_format_currency_regular_amount(self):
        """Test amounts of a cent or more use four decimals."""
        assert format_currency(Decimal("12.5")) == "$12.5000"
        assert format_currency(Decimal("0.01")) == "$0.0100"

    def test_format_currency_sub_cent_amount(self):
        """Test amounts below a cent keep six decimals."""
        assert format_currency(Decimal("0.0025")) == "$0.002500"

    def test_format_currency_zero(self):
        """Test zero is formatted as a regular amount."""
        assert format_currency(Decimal("0")) == "$0.0000"

    def test_format_number(self):
        """Test thousands separators."""
        assert format_number(1234567) == "1,234,567"
        assert format_number(0) == "0"

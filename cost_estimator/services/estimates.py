"""
Estimate Service
================
Prices token counts against the effective catalog and exports estimates.
"""

import csv
import io

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.core.pricing import calculate_cost, format_currency, format_number
from cost_estimator.schemas.estimate import CostEstimate
from cost_estimator.services.catalog import CatalogService

logger = structlog.get_logger()


class EstimateService:
    """Service for cost estimates."""

    def __init__(self, session: AsyncSession):
        self.catalog = CatalogService(session)

    async def estimate(
        self,
        model_id: str,
        input_tokens: int,
        output_tokens: int,
    ) -> CostEstimate:
        """Estimate cost on the model as the user sees it (overrides applied)."""
        model = await self.catalog.get_model(model_id)
        estimate = calculate_cost(model, input_tokens, output_tokens)

        logger.info(
            "Calculated estimate",
            model_id=model_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_cost=float(estimate.total_cost),
        )
        return estimate


def export_estimate_csv(estimate: CostEstimate) -> str:
    """Render an estimate as a CSV report."""
    model = estimate.model
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow(["Field", "Value"])
    writer.writerow(["Model", model.name])
    writer.writerow(["Model ID", model.id])
    writer.writerow(["Provider", model.provider])
    writer.writerow(["Input Tokens", format_number(estimate.input_tokens)])
    writer.writerow(["Output Tokens", format_number(estimate.output_tokens)])
    writer.writerow(["Input Price (USD / 1M tokens)", f"{model.input_cost_per_million:f}"])
    writer.writerow(["Output Price (USD / 1M tokens)", f"{model.output_cost_per_million:f}"])
    writer.writerow(["Input Cost (USD)", format_currency(estimate.input_cost)])
    writer.writerow(["Output Cost (USD)", format_currency(estimate.output_cost)])
    writer.writerow([])
    writer.writerow(["TOTAL (USD)", format_currency(estimate.total_cost)])

    return buffer.getvalue()


def estimate_filename(estimate: CostEstimate) -> str:
    return f"estimate_{estimate.model.id}.csv"

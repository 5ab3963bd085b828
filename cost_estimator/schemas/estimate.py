"""
Estimate Schemas
================
Pydantic models for cost estimates.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from cost_estimator.schemas.catalog import AIModel


class EstimateRequest(BaseModel):
    """Token counts to price against a catalog model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(..., min_length=1)
    input_tokens: int = Field(..., ge=0)
    output_tokens: int = Field(default=0, ge=0)


class CostEstimate(BaseModel):
    """Cost breakdown for a token count on one model."""

    model: AIModel
    input_tokens: int
    output_tokens: int
    input_cost: Decimal
    output_cost: Decimal
    total_cost: Decimal

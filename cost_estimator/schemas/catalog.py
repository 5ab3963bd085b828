"""
Catalog Schemas
===============
Pydantic models for the model catalog and pricing reconciliation.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AIModel(BaseModel):
    """
    A priced model in the catalog.
    Prices are per one million tokens.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    provider: str = Field(..., min_length=1, max_length=100)
    input_cost_per_million: Decimal = Field(..., ge=0)
    output_cost_per_million: Decimal = Field(..., ge=0)
    is_custom: bool = False


class PriceUpdate(BaseModel):
    """Current price for a model as reported by a price feed."""

    id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    provider: str = Field(..., min_length=1, max_length=100)
    input_cost_per_million: Decimal = Field(..., ge=0)
    output_cost_per_million: Decimal = Field(..., ge=0)


class PricingChange(BaseModel):
    """Before/after prices for one model touched by a pricing update."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    model_name: str
    provider: str
    old_input: Decimal
    new_input: Decimal
    old_output: Decimal
    new_output: Decimal


class PriceOverride(BaseModel):
    """User price shadowing a pre-loaded model. Unset fields keep the catalog price."""

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    model_id: str
    input_cost_per_million: Decimal | None = Field(None, ge=0)
    output_cost_per_million: Decimal | None = Field(None, ge=0)


class ModelCreate(BaseModel):
    """Request body for creating a custom model."""

    name: str = Field(..., min_length=1, max_length=255)
    provider: str = Field(..., min_length=1, max_length=100)
    input_cost_per_million: Decimal = Field(..., ge=0)
    output_cost_per_million: Decimal = Field(..., ge=0)


class ModelUpdate(BaseModel):
    """Partial update of a model; omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    provider: str | None = Field(default=None, min_length=1, max_length=100)
    input_cost_per_million: Decimal | None = Field(default=None, ge=0)
    output_cost_per_million: Decimal | None = Field(default=None, ge=0)


class BulkPriceItem(BaseModel):
    """One entry of a bulk price update."""

    id: str
    input_cost_per_million: Decimal = Field(..., ge=0)
    output_cost_per_million: Decimal = Field(..., ge=0)


class BulkPriceResponse(BaseModel):
    """Result of a bulk price update."""

    applied: int


class PricingUpdateResponse(BaseModel):
    """Outcome of reconciling the catalog against a price feed."""

    success: bool
    changes: list[PricingChange]
    errors: list[str]
    total_models: int
    updated_models: list[AIModel] | None = None


class PricingStatusResponse(BaseModel):
    """Summary of the stored catalog and the last pricing update."""

    total_models: int
    providers: list[str]
    custom_models: int
    last_update: datetime | None = None
    last_update_display: str

"""
Pydantic Schemas
================
Request/Response models for API validation.
"""

from cost_estimator.schemas.catalog import (
    AIModel,
    BulkPriceItem,
    BulkPriceResponse,
    ModelCreate,
    ModelUpdate,
    PriceOverride,
    PriceUpdate,
    PricingChange,
    PricingStatusResponse,
    PricingUpdateResponse,
)
from cost_estimator.schemas.estimate import CostEstimate, EstimateRequest
from cost_estimator.schemas.tokens import FileTokenResult, TokenCountResponse

__all__ = [
    "AIModel",
    "PriceUpdate",
    "PricingChange",
    "PriceOverride",
    "ModelCreate",
    "ModelUpdate",
    "BulkPriceItem",
    "BulkPriceResponse",
    "PricingUpdateResponse",
    "PricingStatusResponse",
    "EstimateRequest",
    "CostEstimate",
    "FileTokenResult",
    "TokenCountResponse",
]

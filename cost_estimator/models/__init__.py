"""
Database Models
===============
SQLAlchemy ORM models for the cost estimator.
"""

from cost_estimator.models.base import Base
from cost_estimator.models.catalog import (
    AIModelRecord,
    PriceOverrideRecord,
    PricingUpdateRun,
)

__all__ = [
    "Base",
    "AIModelRecord",
    "PriceOverrideRecord",
    "PricingUpdateRun",
]

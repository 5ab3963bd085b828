"""
Business Services
=================
Service layer for ingestion, catalog management, pricing updates and estimates.
"""

from cost_estimator.services.catalog import CatalogService
from cost_estimator.services.estimates import EstimateService
from cost_estimator.services.ingestion import IngestionPipeline
from cost_estimator.services.pricing_update import PricingUpdateService

__all__ = [
    "CatalogService",
    "EstimateService",
    "IngestionPipeline",
    "PricingUpdateService",
]

"""
API Router
==========
Main API router combining all endpoint modules.
"""

from fastapi import APIRouter

from cost_estimator.api.endpoints import estimates, health, models, pricing, tokens

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(models.router, prefix="/models", tags=["Models"])
api_router.include_router(tokens.router, prefix="/tokens", tags=["Tokens"])
api_router.include_router(pricing.router, prefix="/pricing", tags=["Pricing"])
api_router.include_router(estimates.router, prefix="/estimate", tags=["Estimates"])

"""
Pricing Endpoints
=================
API endpoints for reconciling catalog prices with the price feed.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.database import get_session
from cost_estimator.schemas.catalog import PricingStatusResponse, PricingUpdateResponse
from cost_estimator.services.pricing_update import PricingUpdateService

router = APIRouter()
logger = structlog.get_logger()


@router.post(
    "/update",
    response_model=PricingUpdateResponse,
    summary="Update pricing",
    description="Fetch current prices and merge them into the catalog; custom models are never changed",
)
async def update_pricing(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PricingUpdateResponse:
    """
    Reconcile the catalog with the configured price feed.

    Returns the change log. ``success`` is false when the feed produced no
    prices, in which case the catalog is unchanged.
    """
    try:
        return await PricingUpdateService(session).run()
    except Exception as e:
        logger.error("Pricing update failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Update failed: {e}",
        ) from e


@router.get(
    "/status",
    response_model=PricingStatusResponse,
    summary="Get pricing status",
)
async def pricing_status(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PricingStatusResponse:
    try:
        return await PricingUpdateService(session).status()
    except Exception as e:
        logger.error("Failed to get pricing status", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get pricing status",
        ) from e

"""
Estimate Endpoints
==================
API endpoints for cost estimates and their export.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.database import get_session
from cost_estimator.schemas.estimate import CostEstimate, EstimateRequest
from cost_estimator.services.catalog import ModelNotFoundError
from cost_estimator.services.estimates import (
    EstimateService,
    estimate_filename,
    export_estimate_csv,
)

router = APIRouter()
logger = structlog.get_logger()


async def _estimate(request: EstimateRequest, session: AsyncSession) -> CostEstimate:
    try:
        return await EstimateService(session).estimate(
            request.model_id,
            request.input_tokens,
            request.output_tokens,
        )
    except ModelNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except Exception as e:
        logger.error("Failed to calculate estimate", model_id=request.model_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to calculate estimate",
        ) from e


@router.post(
    "",
    response_model=CostEstimate,
    summary="Estimate cost",
    description="Price input and output token counts on a catalog model",
)
async def create_estimate(
    request: EstimateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CostEstimate:
    return await _estimate(request, session)


@router.post(
    "/export",
    summary="Export estimate",
    description="Price token counts and return the estimate as a CSV attachment",
)
async def export_estimate(
    request: EstimateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    estimate = await _estimate(request, session)
    return Response(
        content=export_estimate_csv(estimate),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{estimate_filename(estimate)}"'},
    )

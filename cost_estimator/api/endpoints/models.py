"""
Model Endpoints
===============
API endpoints for browsing and editing the model catalog.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cost_estimator.database import get_session
from cost_estimator.schemas.catalog import (
    AIModel,
    BulkPriceItem,
    BulkPriceResponse,
    ModelCreate,
    ModelUpdate,
)
from cost_estimator.services.catalog import (
    CatalogService,
    ModelNotFoundError,
    PreloadedModelError,
)

router = APIRouter()
logger = structlog.get_logger()


def _catalog_error(e: Exception) -> HTTPException:
    if isinstance(e, ModelNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, PreloadedModelError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    logger.error("Catalog operation failed", error=str(e))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Catalog operation failed",
    )


@router.get(
    "",
    response_model=list[AIModel],
    summary="List models",
    description="List the effective catalog: pre-loaded models with price overrides, then custom models",
)
async def list_models(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[AIModel]:
    try:
        return await CatalogService(session).list_models()
    except Exception as e:
        raise _catalog_error(e) from e


@router.post(
    "",
    response_model=AIModel,
    status_code=status.HTTP_201_CREATED,
    summary="Create custom model",
)
async def create_model(
    data: ModelCreate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AIModel:
    try:
        return await CatalogService(session).add_custom_model(data)
    except Exception as e:
        raise _catalog_error(e) from e


@router.post(
    "/prices",
    response_model=BulkPriceResponse,
    summary="Bulk update prices",
    description="Store price overrides for pre-loaded models; unknown and custom ids are skipped",
)
async def bulk_update_prices(
    items: list[BulkPriceItem],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BulkPriceResponse:
    try:
        applied = await CatalogService(session).bulk_update_prices(items)
        return BulkPriceResponse(applied=applied)
    except Exception as e:
        raise _catalog_error(e) from e


@router.get("/{model_id}", response_model=AIModel, summary="Get model")
async def get_model(
    model_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AIModel:
    try:
        return await CatalogService(session).get_model(model_id)
    except Exception as e:
        raise _catalog_error(e) from e


@router.put(
    "/{model_id}",
    response_model=AIModel,
    summary="Update model",
    description="Custom models are edited in place; pre-loaded models accept price overrides only",
)
async def update_model(
    model_id: str,
    data: ModelUpdate,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AIModel:
    try:
        return await CatalogService(session).update_model(model_id, data)
    except Exception as e:
        raise _catalog_error(e) from e


@router.delete(
    "/{model_id}/override",
    response_model=AIModel,
    summary="Reset price override",
)
async def reset_override(
    model_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AIModel:
    try:
        return await CatalogService(session).reset_override(model_id)
    except Exception as e:
        raise _catalog_error(e) from e


@router.delete(
    "/{model_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete custom model",
)
async def delete_model(
    model_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    try:
        await CatalogService(session).delete_model(model_id)
    except Exception as e:
        raise _catalog_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)

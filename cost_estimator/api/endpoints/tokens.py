"""
Token Endpoints
===============
API endpoint for counting tokens in uploaded documents.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, File, HTTPException, UploadFile, status

from cost_estimator.config import settings
from cost_estimator.schemas.tokens import TokenCountResponse
from cost_estimator.services.ingestion import EmptyUploadError, IngestionPipeline

router = APIRouter()
logger = structlog.get_logger()


@router.post(
    "",
    response_model=TokenCountResponse,
    summary="Count tokens in documents",
    description="Extract text from uploaded files and count tokens per file",
)
async def count_tokens(
    files: Annotated[list[UploadFile] | None, File(description="Files to count")] = None,
) -> TokenCountResponse:
    """
    Count tokens in uploaded files.

    Files that cannot be parsed are reported in ``errors`` and excluded from
    the totals; the remaining files are still counted.
    """
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No files provided",
        )

    if len(files) > settings.max_upload_files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum upload size is {settings.max_upload_files} files",
        )

    try:
        payload = [(upload.filename or "unnamed", await upload.read()) for upload in files]
        return await IngestionPipeline().process_all(payload)
    except EmptyUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except Exception as e:
        logger.error("Token counting failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process files",
        ) from e

"""
Token Count Schemas
===================
Pydantic models for document token counting.
"""

from pydantic import BaseModel, Field


class FileTokenResult(BaseModel):
    """Token count for a single uploaded file."""

    file_name: str
    file_type: str
    tokens: int = Field(..., ge=0)
    characters: int = Field(..., ge=0)
    error: str | None = None


class TokenCountResponse(BaseModel):
    """Aggregated token counts for an upload."""

    total_tokens: int
    total_characters: int
    file_count: int
    files: list[FileTokenResult]
    errors: list[str]

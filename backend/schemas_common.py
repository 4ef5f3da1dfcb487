"""
backend/schemas_common.py

Response envelopes and validator helpers shared by every ERP router.

Request schemas keep every field Optional so that business validation can
answer with the exact user-facing message (see the routes); these helpers
only normalize input.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


def blank_to_none(v: Any) -> Any:
    """Trim strings; empty strings become None."""
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def none_to_zero(v: Any) -> Any:
    """Missing numeric values default to 0."""
    if v is None or (isinstance(v, str) and not v.strip()):
        return 0
    return v


class PaginationInfo(BaseModel):
    page: int = Field(1, description="Current page (1-based)")
    limit: int = Field(50, description="Page size")
    total: int = Field(0, description="Total matching records")
    totalPages: int = Field(0, description="ceil(total / limit)")


class RecordBase(BaseModel):
    """Fields every stored record carries."""
    id: str = Field(..., description="Record ID as string")
    branchId: Optional[str] = None
    branchName: Optional[str] = None
    createdBy: Optional[str] = None
    createdByName: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    class Config:
        # Documents are schemaless; keep fields this model does not name
        extra = "allow"


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    errors: Optional[List[Any]] = None

"""
backend/schemas_assets.py

Pydantic schemas for business assets and family assets.
Both share the payment model: one-time (paymentDate) or installment
(count, amount, start/end dates).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero

from domains.erp.calculations import MAX_INSTALLMENTS


class AssetWriteRequest(BaseModel):
    """Create/update payload. Business validation happens in the route so
    the client gets the form's own messages back."""
    name: Optional[str] = Field(None, max_length=200)
    type: Optional[str] = Field(None, max_length=100)
    providerCompanyId: Optional[str] = None
    providerCompanyName: Optional[str] = None
    totalPaidAmount: Optional[float] = None
    paymentType: Optional[str] = Field(None, description="one-time | installment")
    paymentDate: Optional[str] = None
    purchaseDate: Optional[str] = None
    numberOfInstallments: Optional[int] = Field(None, ge=0, le=MAX_INSTALLMENTS, description="0 or empty for one-time payments")
    installmentAmount: Optional[float] = None
    installmentStartDate: Optional[str] = None
    installmentEndDate: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class AssetOut(RecordBase):
    name: Optional[str] = None
    type: Optional[str] = None
    providerCompanyId: Optional[str] = None
    providerCompanyName: Optional[str] = None
    totalPaidAmount: float = 0
    paymentType: Optional[str] = "one-time"
    paymentDate: Optional[str] = None
    purchaseDate: Optional[str] = None
    numberOfInstallments: Optional[int] = None
    installmentAmount: Optional[float] = None
    installmentStartDate: Optional[str] = None
    installmentEndDate: Optional[str] = None
    status: Optional[str] = "active"
    notes: Optional[str] = None

    _zero = validator("totalPaidAmount", pre=True, allow_reuse=True)(none_to_zero)


class AssetResponse(BaseModel):
    success: bool = True
    data: AssetOut


class AssetListResponse(BaseModel):
    success: bool = True
    data: List[AssetOut] = Field(default_factory=list)
    pagination: PaginationInfo

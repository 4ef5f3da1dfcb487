"""
backend/schemas_vendors.py

Pydantic schemas for vendors, vendor bills and haj agents (trade parties).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero


# ========================================================================
# VENDORS / HAJ AGENTS
# ========================================================================

class TradePartyWriteRequest(BaseModel):
    """Vendor or haj agent payload (identical trade-party fields)."""
    tradeName: Optional[str] = Field(None, max_length=200)
    tradeLocation: Optional[str] = Field(None, max_length=300)
    ownerName: Optional[str] = Field(None, max_length=200)
    contactNo: Optional[str] = Field(None, max_length=30)
    dob: Optional[str] = None
    nid: Optional[str] = None
    passport: Optional[str] = None
    logo: Optional[str] = None
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class AgentWriteRequest(TradePartyWriteRequest):
    totalBill: Optional[float] = None
    totalPaid: Optional[float] = None
    totalDue: Optional[float] = None


class VendorBulkRequest(BaseModel):
    vendors: List[Dict[str, Any]] = Field(default_factory=list)


class TradePartyOut(RecordBase):
    tradeName: Optional[str] = None
    tradeLocation: Optional[str] = None
    ownerName: Optional[str] = None
    contactNo: Optional[str] = None
    dob: Optional[str] = None
    nid: Optional[str] = None
    passport: Optional[str] = None
    logo: Optional[str] = None
    status: Optional[str] = "active"
    totalPaid: float = 0
    totalDue: float = 0

    _zero = validator("totalPaid", "totalDue", pre=True, allow_reuse=True)(none_to_zero)


class VendorOut(TradePartyOut):
    vendorId: Optional[str] = None


class AgentOut(TradePartyOut):
    totalBill: float = 0

    _zero_bill = validator("totalBill", pre=True, allow_reuse=True)(none_to_zero)


class VendorResponse(BaseModel):
    success: bool = True
    data: VendorOut


class VendorListResponse(BaseModel):
    success: bool = True
    data: List[VendorOut] = Field(default_factory=list)
    pagination: PaginationInfo


class AgentResponse(BaseModel):
    success: bool = True
    data: AgentOut


class AgentListResponse(BaseModel):
    success: bool = True
    data: List[AgentOut] = Field(default_factory=list)
    pagination: PaginationInfo


class BulkError(BaseModel):
    index: int
    error: str


class VendorBulkResponse(BaseModel):
    success: bool = True
    created: List[VendorOut] = Field(default_factory=list)
    errors: List[BulkError] = Field(default_factory=list)


# ========================================================================
# VENDOR BILLS
# ========================================================================

class BillWriteRequest(BaseModel):
    vendorId: Optional[str] = None
    billNumber: Optional[str] = Field(None, max_length=100)
    billType: Optional[str] = None
    billDate: Optional[str] = None
    totalAmount: Optional[float] = None
    paidAmount: Optional[float] = None
    notes: Optional[str] = Field(None, max_length=2000)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class BillOut(RecordBase):
    vendorId: Optional[str] = None
    vendorName: Optional[str] = None
    billNumber: Optional[str] = None
    billType: Optional[str] = None
    billDate: Optional[str] = None
    totalAmount: float = 0
    paidAmount: float = 0
    dueAmount: float = 0
    notes: Optional[str] = None

    _zero = validator("totalAmount", "paidAmount", "dueAmount", pre=True, allow_reuse=True)(none_to_zero)


class BillResponse(BaseModel):
    success: bool = True
    data: BillOut


class BillListResponse(BaseModel):
    success: bool = True
    data: List[BillOut] = Field(default_factory=list)
    pagination: PaginationInfo


# ========================================================================
# DASHBOARD
# ========================================================================

class VendorStatistics(BaseModel):
    totalVendors: int = 0
    active: int = 0
    inactive: int = 0


class BillStatistics(BaseModel):
    totalBills: int = 0
    totalAmount: float = 0
    totalPaid: float = 0
    totalDue: float = 0


class TopVendor(BaseModel):
    id: str
    vendorId: Optional[str] = None
    tradeName: Optional[str] = None
    billCount: int = 0
    totalBillAmount: float = 0
    paidAmount: float = 0
    dueAmount: float = 0


class VendorDashboardData(BaseModel):
    statistics: VendorStatistics
    bills: BillStatistics
    topVendors: List[TopVendor] = Field(default_factory=list)


class VendorDashboardResponse(BaseModel):
    success: bool = True
    data: VendorDashboardData

"""
backend/schemas_hajj.py

Pydantic schemas for the Hajj & Umrah module: pilgrims (hajis and
umrah travellers), SAR rates and the dashboard.

Pilgrim records keep snake_case field names (customer_id, passport_number,
...) because the contract PDF and the legacy imports use them.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero


def number_to_text(v):
    """Accept 2026 as well as "2026" for text fields."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(int(v)) if float(v).is_integer() else str(v)
    return blank_to_none(v)


# ========================================================================
# PILGRIMS
# ========================================================================

class PilgrimWriteRequest(BaseModel):
    customer_id: Optional[str] = Field(None, max_length=30, description="HAJ0001 / UMR0001; generated when omitted")
    name: Optional[str] = Field(None, max_length=200)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    spouse_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    mobile: Optional[str] = Field(None, max_length=30)
    whatsapp_no: Optional[str] = None
    email: Optional[str] = None
    passport_number: Optional[str] = None
    passport_type: Optional[str] = None
    issue_date: Optional[str] = None
    expiry_date: Optional[str] = None
    nid_number: Optional[str] = None
    address: Optional[str] = None
    district: Optional[str] = None
    package_id: Optional[str] = None
    package_name: Optional[str] = None
    agent_id: Optional[str] = None
    departure_date: Optional[str] = None
    return_date: Optional[str] = None
    total_amount: Optional[float] = None
    paid_amount: Optional[float] = None
    payment_method: Optional[str] = None
    service_status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    _trim = validator("*", pre=True, allow_reuse=True)(number_to_text)

    class Config:
        extra = "ignore"


class PilgrimOut(RecordBase):
    customer_id: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    passport_number: Optional[str] = None
    nid_number: Optional[str] = None
    address: Optional[str] = None
    package_name: Optional[str] = None
    service_type: Optional[str] = None
    total_amount: float = 0
    paid_amount: float = 0
    due_amount: float = 0
    service_status: Optional[str] = None
    notes: Optional[str] = None

    _zero = validator("total_amount", "paid_amount", "due_amount", pre=True, allow_reuse=True)(none_to_zero)


class PilgrimResponse(BaseModel):
    success: bool = True
    data: PilgrimOut


class PilgrimListResponse(BaseModel):
    success: bool = True
    data: List[PilgrimOut] = Field(default_factory=list)
    pagination: PaginationInfo


# ========================================================================
# SAR RATES
# ========================================================================

class SarWriteRequest(BaseModel):
    packageName: Optional[str] = Field(None, max_length=200)
    transactionName: Optional[str] = Field(None, max_length=200)
    year: Optional[str] = Field(None, max_length=10)
    sarRate: Optional[float] = None
    bdtRate: Optional[float] = None
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(number_to_text)

    class Config:
        extra = "ignore"


class SarOut(RecordBase):
    packageName: Optional[str] = None
    transactionName: Optional[str] = None
    year: Optional[str] = None
    sarRate: float = 0
    bdtRate: Optional[float] = None
    description: Optional[str] = None
    status: Optional[str] = "Active"

    _zero = validator("sarRate", pre=True, allow_reuse=True)(none_to_zero)


class SarResponse(BaseModel):
    success: bool = True
    data: SarOut


class SarListResponse(BaseModel):
    success: bool = True
    data: List[SarOut] = Field(default_factory=list)
    pagination: PaginationInfo


# ========================================================================
# DASHBOARD
# ========================================================================

class HajjStats(BaseModel):
    totalHajis: int = 0
    completedHajis: int = 0
    preRegistered: int = 0
    registered: int = 0
    totalPackageAmount: float = 0
    totalPaidAmount: float = 0
    totalDueAmount: float = 0


class UmrahStats(BaseModel):
    totalUmrahs: int = 0
    completedUmrahs: int = 0
    readyForUmrah: int = 0
    totalPackageAmount: float = 0
    totalPaidAmount: float = 0
    totalDueAmount: float = 0


class AgentStats(BaseModel):
    totalAgents: int = 0
    totalPaid: float = 0
    totalBill: float = 0
    totalDue: float = 0


class HajjDashboardResponse(BaseModel):
    success: bool = True
    hajjStats: HajjStats
    umrahStats: UmrahStats
    agentStats: AgentStats

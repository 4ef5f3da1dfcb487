"""
backend/schemas_air.py

Pydantic schemas for air ticketing: air agents, GDS systems, refunds and
reissues.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero


# ========================================================================
# AIR AGENTS
# ========================================================================

class AirAgentWriteRequest(BaseModel):
    agentId: Optional[str] = Field(None, max_length=20, description="AGT0001; generated when omitted")
    name: Optional[str] = Field(None, max_length=200, description="Trade name")
    personalName: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    mobile: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipCode: Optional[str] = None
    country: Optional[str] = None
    nid: Optional[str] = None
    passport: Optional[str] = None
    tradeLicense: Optional[str] = None
    tinNumber: Optional[str] = None
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class AirAgentOut(RecordBase):
    agentId: Optional[str] = None
    name: Optional[str] = None
    personalName: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = "Bangladesh"
    tradeLicense: Optional[str] = None
    tinNumber: Optional[str] = None
    status: Optional[str] = "Active"


class AirAgentResponse(BaseModel):
    success: bool = True
    data: AirAgentOut


class AirAgentListResponse(BaseModel):
    success: bool = True
    data: List[AirAgentOut] = Field(default_factory=list)
    pagination: PaginationInfo


# ========================================================================
# GDS
# ========================================================================

class GdsWriteRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    provider: Optional[str] = Field(None, max_length=100, description="Sabre, Amadeus, Galileo, ...")
    gdsCode: Optional[str] = Field(None, max_length=50)
    pccCode: Optional[str] = Field(None, max_length=50)
    queueNumber: Optional[str] = None
    apiUrl: Optional[str] = None
    commissionRate: Optional[float] = None
    contactPerson: Optional[str] = None
    contactPhone: Optional[str] = None
    contactEmail: Optional[str] = None
    remarks: Optional[str] = Field(None, max_length=2000)
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class GdsOut(RecordBase):
    name: Optional[str] = None
    provider: Optional[str] = None
    gdsCode: Optional[str] = None
    pccCode: Optional[str] = None
    queueNumber: Optional[str] = None
    apiUrl: Optional[str] = None
    commissionRate: float = 0
    contactPerson: Optional[str] = None
    contactPhone: Optional[str] = None
    contactEmail: Optional[str] = None
    remarks: Optional[str] = None
    status: Optional[str] = "Active"
    ticketCount: int = 0
    totalRevenue: float = 0

    _zero = validator("commissionRate", "ticketCount", "totalRevenue", pre=True, allow_reuse=True)(none_to_zero)


class GdsResponse(BaseModel):
    success: bool = True
    data: GdsOut


class GdsListResponse(BaseModel):
    success: bool = True
    data: List[GdsOut] = Field(default_factory=list)
    providers: List[str] = Field(default_factory=list)
    pagination: PaginationInfo


# ========================================================================
# REFUND / REISSUE
# ========================================================================

class RefundWriteRequest(BaseModel):
    ticketNumber: Optional[str] = Field(None, max_length=50)
    pnr: Optional[str] = Field(None, max_length=20)
    passengerName: Optional[str] = None
    customerName: Optional[str] = None
    actualFare: Optional[float] = None
    usedAmount: Optional[float] = None
    serviceCharge: Optional[float] = None
    airlinesPenalty: Optional[float] = None
    refundAmount: Optional[float] = None
    refundMethod: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=2000)
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class RefundOut(RecordBase):
    ticketNumber: Optional[str] = None
    pnr: Optional[str] = None
    passengerName: Optional[str] = None
    customerName: Optional[str] = None
    actualFare: float = 0
    usedAmount: float = 0
    serviceCharge: float = 0
    airlinesPenalty: float = 0
    refundAmount: float = 0
    refundMethod: Optional[str] = "cash"
    refundDate: Optional[str] = None
    reason: Optional[str] = None
    status: Optional[str] = "Pending"

    _zero = validator(
        "actualFare", "usedAmount", "serviceCharge", "airlinesPenalty", "refundAmount",
        pre=True, allow_reuse=True,
    )(none_to_zero)


class ReissueWriteRequest(BaseModel):
    ticketNumber: Optional[str] = Field(None, max_length=50)
    pnr: Optional[str] = Field(None, max_length=20)
    passengerName: Optional[str] = None
    vendorId: Optional[str] = None
    vendorName: Optional[str] = None
    oldTravelDate: Optional[str] = None
    newTravelDate: Optional[str] = None
    fareDifference: Optional[float] = None
    taxDifference: Optional[float] = None
    serviceFee: Optional[float] = None
    airlinesPenalty: Optional[float] = None
    remarks: Optional[str] = Field(None, max_length=2000)
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class ReissueOut(RecordBase):
    ticketNumber: Optional[str] = None
    pnr: Optional[str] = None
    passengerName: Optional[str] = None
    vendorId: Optional[str] = None
    vendorName: Optional[str] = None
    oldTravelDate: Optional[str] = None
    newTravelDate: Optional[str] = None
    fareDifference: float = 0
    taxDifference: float = 0
    serviceFee: float = 0
    airlinesPenalty: float = 0
    totalCharge: float = 0
    remarks: Optional[str] = None
    status: Optional[str] = "Pending"

    _zero = validator(
        "fareDifference", "taxDifference", "serviceFee", "airlinesPenalty", "totalCharge",
        pre=True, allow_reuse=True,
    )(none_to_zero)


class RefundResponse(BaseModel):
    success: bool = True
    data: RefundOut


class RefundListResponse(BaseModel):
    success: bool = True
    data: List[RefundOut] = Field(default_factory=list)
    pagination: PaginationInfo


class ReissueResponse(BaseModel):
    success: bool = True
    data: ReissueOut


class ReissueListResponse(BaseModel):
    success: bool = True
    data: List[ReissueOut] = Field(default_factory=list)
    pagination: PaginationInfo

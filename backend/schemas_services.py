"""
backend/schemas_services.py

Additional services: walk-in customers plus passport, manpower, visa and
other service records. The four service kinds share one schema.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero


class CustomerWriteRequest(BaseModel):
    customerId: Optional[str] = Field(None, max_length=30)
    name: Optional[str] = Field(None, max_length=200)
    firstName: Optional[str] = Field(None, max_length=100)
    lastName: Optional[str] = Field(None, max_length=100)
    mobile: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    passportNumber: Optional[str] = Field(None, max_length=30)
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class CustomerOut(RecordBase):
    customerId: Optional[str] = None
    name: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    passportNumber: Optional[str] = None
    status: Optional[str] = "active"
    notes: Optional[str] = None


class CustomerResponse(BaseModel):
    success: bool = True
    data: CustomerOut


class CustomerListResponse(BaseModel):
    success: bool = True
    data: List[CustomerOut] = Field(default_factory=list)
    pagination: PaginationInfo


class ServiceWriteRequest(BaseModel):
    clientId: Optional[str] = None
    clientName: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    date: Optional[str] = None
    serviceType: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    passportNumber: Optional[str] = Field(None, max_length=30)
    deliveryDate: Optional[str] = None
    vendorId: Optional[str] = None
    vendorName: Optional[str] = None
    totalAmount: Optional[float] = None
    totalBill: Optional[float] = None
    paidAmount: Optional[float] = None
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class ServiceOut(RecordBase):
    clientId: Optional[str] = None
    clientName: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    date: Optional[str] = None
    serviceType: Optional[str] = None
    country: Optional[str] = None
    passportNumber: Optional[str] = None
    deliveryDate: Optional[str] = None
    vendorName: Optional[str] = None
    totalAmount: float = 0
    paidAmount: float = 0
    dueAmount: float = 0
    status: Optional[str] = "pending"
    notes: Optional[str] = None

    _zero = validator("totalAmount", "paidAmount", "dueAmount", pre=True, allow_reuse=True)(none_to_zero)


class ServiceResponse(BaseModel):
    success: bool = True
    data: ServiceOut


class ServiceListResponse(BaseModel):
    success: bool = True
    data: List[ServiceOut] = Field(default_factory=list)
    pagination: PaginationInfo

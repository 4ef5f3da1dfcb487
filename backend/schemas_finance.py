"""
backend/schemas_finance.py

Schemas for "others invest" investments, IATA / Airlines Capping
investments and bank accounts.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero


class InvestmentWriteRequest(BaseModel):
    investmentName: Optional[str] = Field(None, max_length=200)
    investmentType: Optional[str] = Field(None, max_length=100)
    investmentAmount: Optional[float] = None
    returnAmount: Optional[float] = None
    investmentDate: Optional[str] = None
    maturityDate: Optional[str] = None
    interestRate: Optional[float] = None
    status: Optional[str] = None
    description: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=2000)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class InvestmentOut(RecordBase):
    investmentName: Optional[str] = None
    investmentType: Optional[str] = None
    investmentAmount: float = 0
    returnAmount: float = 0
    investmentDate: Optional[str] = None
    maturityDate: Optional[str] = None
    interestRate: float = 0
    status: Optional[str] = "active"
    description: Optional[str] = None
    notes: Optional[str] = None

    _zero = validator("investmentAmount", "returnAmount", "interestRate", pre=True, allow_reuse=True)(none_to_zero)


class InvestmentResponse(BaseModel):
    success: bool = True
    data: InvestmentOut


class InvestmentListResponse(BaseModel):
    success: bool = True
    data: List[InvestmentOut] = Field(default_factory=list)
    pagination: PaginationInfo


class CappingWriteRequest(BaseModel):
    investmentType: Optional[str] = Field(None, max_length=100)
    airlineName: Optional[str] = Field(None, max_length=200)
    cappingAmount: Optional[float] = None
    returnAmount: Optional[float] = None
    investmentDate: Optional[str] = None
    maturityDate: Optional[str] = None
    interestRate: Optional[float] = None
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)
    logo: Optional[str] = Field(None, max_length=500)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class CappingOut(RecordBase):
    investmentType: Optional[str] = None
    airlineName: Optional[str] = None
    cappingAmount: float = 0
    returnAmount: float = 0
    investmentDate: Optional[str] = None
    maturityDate: Optional[str] = None
    interestRate: float = 0
    status: Optional[str] = "active"
    notes: Optional[str] = None
    logo: Optional[str] = None

    _zero = validator("cappingAmount", "returnAmount", "interestRate", pre=True, allow_reuse=True)(none_to_zero)


class CappingResponse(BaseModel):
    success: bool = True
    data: CappingOut


class CappingListResponse(BaseModel):
    success: bool = True
    data: List[CappingOut] = Field(default_factory=list)
    pagination: PaginationInfo


class BankAccountWriteRequest(BaseModel):
    bankName: Optional[str] = Field(None, max_length=200)
    accountNumber: Optional[str] = Field(None, max_length=50)
    accountType: Optional[str] = Field(None, max_length=50)
    accountCategory: Optional[str] = Field(None, max_length=50)
    bankBranchName: Optional[str] = Field(None, max_length=200, description="Branch of the bank, not of the agency")
    accountHolder: Optional[str] = Field(None, max_length=200)
    accountTitle: Optional[str] = Field(None, max_length=200)
    routingNumber: Optional[str] = Field(None, max_length=50)
    initialBalance: Optional[float] = None
    currentBalance: Optional[float] = None
    currency: Optional[str] = Field(None, max_length=10)
    contactNumber: Optional[str] = Field(None, max_length=30)
    logo: Optional[str] = Field(None, max_length=500)
    status: Optional[str] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class BankAccountOut(RecordBase):
    bankName: Optional[str] = None
    accountNumber: Optional[str] = None
    accountType: Optional[str] = "Current"
    accountCategory: Optional[str] = "bank"
    bankBranchName: Optional[str] = None
    accountHolder: Optional[str] = None
    accountTitle: Optional[str] = None
    routingNumber: Optional[str] = None
    initialBalance: float = 0
    currentBalance: float = 0
    currency: Optional[str] = "BDT"
    contactNumber: Optional[str] = None
    logo: Optional[str] = None
    status: Optional[str] = "active"

    _zero = validator("initialBalance", "currentBalance", pre=True, allow_reuse=True)(none_to_zero)


class BankAccountResponse(BaseModel):
    success: bool = True
    data: BankAccountOut


class BankAccountListResponse(BaseModel):
    success: bool = True
    data: List[BankAccountOut] = Field(default_factory=list)
    pagination: PaginationInfo

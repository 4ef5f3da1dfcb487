"""
backend/schemas_personal.py

Personal finance: expense categories, expense/income entries and the
personal dashboard. Family assets reuse the asset schemas.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, validator

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none, none_to_zero


class CategoryWriteRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    iconKey: Optional[str] = Field(None, max_length=50)
    monthlyAmount: Optional[float] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"


class CategoryOut(RecordBase):
    name: Optional[str] = None
    description: Optional[str] = None
    iconKey: str = "FileText"
    monthlyAmount: float = 0
    totalAmount: float = 0
    itemCount: int = 0

    _zero = validator("monthlyAmount", "totalAmount", "itemCount", pre=True, allow_reuse=True)(none_to_zero)


class CategoryResponse(BaseModel):
    success: bool = True
    data: CategoryOut


class CategoryListResponse(BaseModel):
    success: bool = True
    data: List[CategoryOut] = Field(default_factory=list)
    pagination: PaginationInfo


class ExpenseWriteRequest(BaseModel):
    categoryId: Optional[str] = None
    categoryName: Optional[str] = Field(None, max_length=100)
    transactionType: Optional[str] = Field(None, description="debit | credit")
    amount: Optional[float] = None
    date: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    @validator("transactionType")
    def known_type(cls, v):
        if v is not None and v not in ("debit", "credit"):
            raise ValueError("transactionType must be debit or credit")
        return v

    class Config:
        extra = "ignore"


class ExpenseOut(RecordBase):
    categoryId: Optional[str] = None
    categoryName: str = "অন্যান্য"
    transactionType: str = "debit"
    amount: float = 0
    date: Optional[str] = None
    notes: Optional[str] = None

    _zero = validator("amount", pre=True, allow_reuse=True)(none_to_zero)


class ExpenseResponse(BaseModel):
    success: bool = True
    data: ExpenseOut


class ExpenseListResponse(BaseModel):
    success: bool = True
    data: List[ExpenseOut] = Field(default_factory=list)
    pagination: PaginationInfo


class PersonalSummary(BaseModel):
    monthlyExpense: float = 0
    monthlyIncome: float = 0
    savings: float = 0
    totalAssets: float = 0
    totalCategories: int = 0


class RecentExpense(BaseModel):
    id: str
    title: str
    category: str
    amount: float = 0
    date: Optional[str] = None


class BudgetInsight(BaseModel):
    label: str
    value: int = Field(0, description="Share of last-30-day spending, percent")


class PersonalDashboardResponse(BaseModel):
    success: bool = True
    summary: PersonalSummary
    recentExpenses: List[RecentExpense] = Field(default_factory=list)
    budgetInsights: List[BudgetInsight] = Field(default_factory=list)

from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any, List
from enum import Enum

try:
    from backend.schemas_common import PaginationInfo, RecordBase, blank_to_none
except ModuleNotFoundError:
    from schemas_common import PaginationInfo, RecordBase, blank_to_none

# Enums
class UserRole(str, Enum):
    super_admin = "super_admin"
    admin = "admin"
    manager = "manager"
    accountant = "accountant"
    reservation = "reservation"

class UserStatus(str, Enum):
    active = "active"
    inactive = "inactive"

# Auth
class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=200)
    password: str = Field(..., min_length=1, max_length=200)

class UserOut(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: str = UserRole.reservation.value
    branchId: Optional[str] = None
    branchName: Optional[str] = None
    status: str = UserStatus.active.value
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

class LoginResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserOut

class MeResponse(BaseModel):
    success: bool = True
    user: UserOut
    permissions: Dict[str, List[str]] = Field(default_factory=dict)  # {"customers": ["view", "create"]}

# Users
class UserWriteRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=200)
    password: Optional[str] = Field(None, max_length=200)
    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    role: Optional[str] = None
    branchId: Optional[str] = Field(None, max_length=100)
    branchName: Optional[str] = Field(None, max_length=200)
    status: Optional[UserStatus] = None

    _trim = validator("*", pre=True, allow_reuse=True)(blank_to_none)

    class Config:
        extra = "ignore"

class UserResponse(BaseModel):
    success: bool = True
    data: UserOut

class UserListResponse(BaseModel):
    success: bool = True
    data: List[UserOut] = Field(default_factory=list)
    pagination: PaginationInfo

# Markup rules are free-form documents (airline, route, priority, amounts, ...)
class MarkupOut(RecordBase):
    pass

class MarkupResponse(BaseModel):
    success: bool = True
    data: MarkupOut

class MarkupListResponse(BaseModel):
    success: bool = True
    data: List[MarkupOut] = Field(default_factory=list)
    pagination: PaginationInfo

# Search
class SearchHit(BaseModel):
    id: str
    type: str
    title: str
    subtitle: str = ""
    description: str = ""
    link: str

class SearchResponse(BaseModel):
    success: bool = True
    query: str = ""
    total: int = 0
    results: Dict[str, List[SearchHit]] = Field(default_factory=dict)

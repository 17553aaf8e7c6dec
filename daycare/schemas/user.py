# daycare/schemas/user.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from .common import ORMModel, PageParams
from .enums import Department, UserRole


class UserBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    role: UserRole
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=255)


class UserCreate(UserBase):
    is_active: bool = True
    employee_id: Optional[str] = None
    department: Optional[Department] = None
    hire_date: Optional[date] = None
    salary: Optional[Decimal] = Field(None, ge=0)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None
    employee_id: Optional[str] = None
    department: Optional[Department] = None
    hire_date: Optional[date] = None
    salary: Optional[Decimal] = Field(None, ge=0)


class UserFilters(PageParams):
    search: Optional[str] = Field(None, description="Matches first name, last name or email")
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserResponse(ORMModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: EmailStr
    role: UserRole
    is_active: bool
    phone: Optional[str] = None
    address: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[Department] = None
    hire_date: Optional[date] = None
    child_ids: List[int] = []
    created_at: datetime
    updated_at: datetime


class UserDirectoryEntry(ORMModel):
    """What any signed-in user may see about another account"""
    id: int
    first_name: str
    last_name: str
    full_name: str
    role: UserRole

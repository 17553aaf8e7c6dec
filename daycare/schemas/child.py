# daycare/schemas/child.py
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .common import ORMModel, PageParams
from .enums import FeeStatus, Gender


class EmergencyContact(BaseModel):
    name: str
    relationship: str
    phone: str
    email: Optional[str] = None


class MedicalInfo(BaseModel):
    allergies: List[str] = []
    medications: List[str] = []
    conditions: List[str] = []
    doctor_name: Optional[str] = None
    doctor_phone: Optional[str] = None


class ChildCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    date_of_birth: date
    gender: Gender
    profile_image: Optional[str] = None
    parent_ids: List[int] = Field(..., description="At least one active parent user")
    teacher_id: int
    classroom: str = Field(..., min_length=1, max_length=50)
    enrollment_date: Optional[date] = None
    emergency_contacts: List[EmergencyContact] = []
    medical_info: MedicalInfo = Field(default_factory=MedicalInfo)
    schedule: Dict[str, Any] = {}
    special_needs: Optional[str] = None
    dietary_restrictions: List[str] = []
    notes: Optional[str] = None
    monthly_fee: Decimal = Field(..., ge=0)
    fee_status: FeeStatus = FeeStatus.PENDING
    is_active: bool = True


class ChildUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    profile_image: Optional[str] = None
    parent_ids: Optional[List[int]] = None
    teacher_id: Optional[int] = None
    classroom: Optional[str] = Field(None, min_length=1, max_length=50)
    enrollment_date: Optional[date] = None
    emergency_contacts: Optional[List[EmergencyContact]] = None
    medical_info: Optional[MedicalInfo] = None
    schedule: Optional[Dict[str, Any]] = None
    special_needs: Optional[str] = None
    dietary_restrictions: Optional[List[str]] = None
    notes: Optional[str] = None
    monthly_fee: Optional[Decimal] = Field(None, ge=0)
    fee_status: Optional[FeeStatus] = None
    is_active: Optional[bool] = None


class ChildFilters(PageParams):
    search: Optional[str] = Field(None, description="Matches first or last name")
    classroom: Optional[str] = None
    teacher_id: Optional[int] = None
    is_active: Optional[bool] = None
    fee_status: Optional[FeeStatus] = None


class ChildResponse(ORMModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date
    age: Optional[int] = None
    gender: Gender
    profile_image: Optional[str] = None
    parent_ids: List[int]
    teacher_id: int
    classroom: str
    enrollment_date: date
    emergency_contacts: List[EmergencyContact] = []
    medical_info: MedicalInfo = Field(default_factory=MedicalInfo)
    schedule: Dict[str, Any] = {}
    special_needs: Optional[str] = None
    dietary_restrictions: List[str] = []
    notes: Optional[str] = None
    monthly_fee: Decimal
    fee_status: FeeStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime

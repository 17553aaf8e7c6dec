# daycare/schemas/progress.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .common import ORMModel, PageParams
from .enums import ReportType


class AreaAssessment(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    notes: Optional[str] = None


class DevelopmentAreas(BaseModel):
    cognitive: Optional[AreaAssessment] = None
    physical: Optional[AreaAssessment] = None
    social: Optional[AreaAssessment] = None
    emotional: Optional[AreaAssessment] = None
    language: Optional[AreaAssessment] = None


class Skill(BaseModel):
    name: str
    level: str
    notes: Optional[str] = None


class Goal(BaseModel):
    description: str
    target_date: Optional[date] = None
    achieved: bool = False


class ProgressReportCreate(BaseModel):
    child_id: int
    teacher_id: Optional[int] = Field(None, description="Defaults to the creating teacher")
    report_date: date = Field(default_factory=date.today)
    report_type: ReportType
    development_areas: DevelopmentAreas = Field(default_factory=DevelopmentAreas)
    skills: List[Skill] = []
    behavior: Dict[str, Any] = {}
    goals: List[Goal] = []
    recommendations: List[str] = []
    overall_rating: int = Field(..., ge=1, le=5)
    summary: str = Field(..., min_length=1, max_length=2000)
    shared_with_parents: bool = False


class ProgressReportUpdate(BaseModel):
    report_date: Optional[date] = None
    report_type: Optional[ReportType] = None
    development_areas: Optional[DevelopmentAreas] = None
    skills: Optional[List[Skill]] = None
    behavior: Optional[Dict[str, Any]] = None
    goals: Optional[List[Goal]] = None
    recommendations: Optional[List[str]] = None
    overall_rating: Optional[int] = Field(None, ge=1, le=5)
    summary: Optional[str] = Field(None, min_length=1, max_length=2000)
    shared_with_parents: Optional[bool] = None
    parent_feedback: Optional[str] = Field(None, max_length=2000)
    child_id: Optional[int] = None
    teacher_id: Optional[int] = None


class ProgressReportFilters(PageParams):
    child_id: Optional[int] = None
    report_type: Optional[ReportType] = None
    shared_with_parents: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProgressReportResponse(ORMModel):
    id: int
    child_id: int
    teacher_id: int
    report_date: date
    report_type: ReportType
    development_areas: DevelopmentAreas
    overall_development_score: Optional[float] = None
    skills: List[Skill] = []
    behavior: Dict[str, Any] = {}
    goals: List[Goal] = []
    recommendations: List[str] = []
    overall_rating: int
    summary: str
    shared_with_parents: bool
    parent_feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime

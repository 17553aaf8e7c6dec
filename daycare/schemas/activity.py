# daycare/schemas/activity.py
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .common import ORMModel, PageParams
from .enums import ActivityStatus, ActivityType, RecurrenceFrequency

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class RecurringPattern(BaseModel):
    frequency: RecurrenceFrequency
    days_of_week: List[int] = Field(default_factory=list, description="0 = Sunday")
    end_date: Optional[dt.date] = None


class ActivityCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    activity_type: ActivityType
    date: dt.date
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    location: str = Field(..., min_length=1, max_length=100)
    teacher_id: Optional[int] = Field(None, description="Defaults to the creating teacher")
    assistant_ids: List[int] = []
    target_age_min: int = Field(0, ge=0)
    target_age_max: int = Field(6, ge=0)
    max_participants: int = Field(..., ge=1)
    participant_ids: List[int] = []
    materials: List[str] = []
    objectives: List[str] = []
    status: ActivityStatus = ActivityStatus.PLANNED
    notes: Optional[str] = None
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None

    @model_validator(mode="after")
    def check_ranges(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.target_age_max < self.target_age_min:
            raise ValueError("target_age_max must not be below target_age_min")
        return self


class ActivityUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    activity_type: Optional[ActivityType] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    location: Optional[str] = Field(None, min_length=1, max_length=100)
    teacher_id: Optional[int] = None
    assistant_ids: Optional[List[int]] = None
    target_age_min: Optional[int] = Field(None, ge=0)
    target_age_max: Optional[int] = Field(None, ge=0)
    max_participants: Optional[int] = Field(None, ge=1)
    participant_ids: Optional[List[int]] = None
    materials: Optional[List[str]] = None
    objectives: Optional[List[str]] = None
    status: Optional[ActivityStatus] = None
    notes: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[RecurringPattern] = None


class ParticipantRequest(BaseModel):
    child_id: int


class ActivityFilters(PageParams):
    search: Optional[str] = Field(None, description="Matches title or description")
    activity_type: Optional[ActivityType] = None
    status: Optional[ActivityStatus] = None
    teacher_id: Optional[int] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class ActivityResponse(ORMModel):
    id: int
    title: str
    description: str
    activity_type: ActivityType
    date: dt.date
    start_time: str
    end_time: str
    duration: Optional[str] = None
    location: str
    teacher_id: int
    assistant_ids: List[int]
    target_age_min: int
    target_age_max: int
    max_participants: int
    participant_ids: List[int]
    materials: List[str] = []
    objectives: List[str] = []
    status: ActivityStatus
    notes: Optional[str] = None
    is_recurring: bool
    recurring_pattern: Optional[RecurringPattern] = None
    created_by: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime

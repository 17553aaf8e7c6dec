# daycare/schemas/calendar.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .activity import RecurringPattern, TIME_PATTERN
from .common import ORMModel, PageParams
from .enums import EventStatus, EventType, Priority


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    event_type: EventType
    start_date: datetime
    end_date: datetime
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    is_all_day: bool = False
    location: Optional[str] = Field(None, max_length=100)
    organizer_id: Optional[int] = Field(None, description="Defaults to the creating user")
    attendee_user_ids: List[int] = []
    attendee_child_ids: List[int] = []
    status: EventStatus = EventStatus.SCHEDULED
    priority: Priority = Priority.MEDIUM
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    cost: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    event_type: Optional[EventType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    is_all_day: Optional[bool] = None
    location: Optional[str] = Field(None, max_length=100)
    organizer_id: Optional[int] = None
    attendee_user_ids: Optional[List[int]] = None
    attendee_child_ids: Optional[List[int]] = None
    status: Optional[EventStatus] = None
    priority: Optional[Priority] = None
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[RecurringPattern] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    cost: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class EventFilters(PageParams):
    search: Optional[str] = Field(None, description="Matches title or description")
    event_type: Optional[EventType] = None
    status: Optional[EventStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class EventResponse(ORMModel):
    id: int
    title: str
    description: Optional[str] = None
    event_type: EventType
    start_date: datetime
    end_date: datetime
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_all_day: bool
    location: Optional[str] = None
    organizer_id: Optional[int] = None
    attendee_user_ids: List[int] = []
    attendee_child_ids: List[int] = []
    status: EventStatus
    priority: Priority
    is_recurring: bool
    recurring_pattern: Optional[RecurringPattern] = None
    max_attendees: Optional[int] = None
    cost: Decimal
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

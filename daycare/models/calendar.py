from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric, JSON
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import EventType, EventStatus, Priority


class CalendarEvent(TimestampMixin, Base):
    __tablename__ = "calendar_events"

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(enum_column(EventType), nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    is_all_day = Column(Boolean, default=False, nullable=False)
    location = Column(String(100), nullable=True)

    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    attendee_user_ids = Column(JSON, default=list, nullable=False)
    attendee_child_ids = Column(JSON, default=list, nullable=False)

    status = Column(enum_column(EventStatus), default=EventStatus.SCHEDULED, nullable=False, index=True)
    priority = Column(enum_column(Priority), default=Priority.MEDIUM, nullable=False)

    # Stored verbatim; occurrences are never expanded
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_pattern = Column(JSON, nullable=True)

    max_attendees = Column(Integer, nullable=True)
    cost = Column(Numeric(10, 2), default=0, nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self):
        return f"<CalendarEvent(id={self.id}, title={self.title}, start={self.start_date})>"

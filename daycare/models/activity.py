from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, Date, Text, ForeignKey, JSON, Table
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import ActivityStatus, ActivityType

activity_participants = Table(
    "activity_participants",
    Base.metadata,
    Column("activity_id", Integer, ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True),
    Column("child_id", Integer, ForeignKey("children.id", ondelete="CASCADE"), primary_key=True),
)

activity_assistants = Table(
    "activity_assistants",
    Base.metadata,
    Column("activity_id", Integer, ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Activity(TimestampMixin, Base):
    __tablename__ = "activities"

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    activity_type = Column(enum_column(ActivityType), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    location = Column(String(100), nullable=False)

    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    target_age_min = Column(Integer, nullable=False, default=0)
    target_age_max = Column(Integer, nullable=False, default=6)
    max_participants = Column(Integer, nullable=False)

    materials = Column(JSON, default=list, nullable=False)
    objectives = Column(JSON, default=list, nullable=False)
    status = Column(enum_column(ActivityStatus), default=ActivityStatus.PLANNED, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    # Recurrence is recorded as given; occurrences are never expanded
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_pattern = Column(JSON, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    participants = relationship("Child", secondary=activity_participants, lazy="selectin", order_by="Child.id")
    assistants = relationship("User", secondary=activity_assistants, lazy="selectin", order_by="User.id")

    @property
    def participant_ids(self):
        return [child.id for child in self.participants]

    @property
    def assistant_ids(self):
        return [user.id for user in self.assistants]

    @property
    def duration(self):
        """Duration as 'Xh Ym', None when the times cannot be parsed"""
        try:
            start = datetime.strptime(self.start_time, "%H:%M")
            end = datetime.strptime(self.end_time, "%H:%M")
        except (TypeError, ValueError):
            return None
        minutes = int((end - start).total_seconds() // 60)
        return f"{minutes // 60}h {minutes % 60}m"

    def __repr__(self):
        return f"<Activity(id={self.id}, title={self.title}, status={self.status})>"

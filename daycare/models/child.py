from datetime import date
from sqlalchemy import Column, Integer, String, Boolean, Date, Text, ForeignKey, Numeric, JSON, Table
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import FeeStatus, Gender

child_parents = Table(
    "child_parents",
    Base.metadata,
    Column("child_id", Integer, ForeignKey("children.id", ondelete="CASCADE"), primary_key=True),
    Column("parent_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Child(TimestampMixin, Base):
    __tablename__ = "children"

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(enum_column(Gender), nullable=False)
    profile_image = Column(String(255), nullable=True)

    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    classroom = Column(String(50), nullable=False, index=True)
    enrollment_date = Column(Date, nullable=False, default=date.today)

    emergency_contacts = Column(JSON, default=list, nullable=False)
    medical_info = Column(JSON, default=dict, nullable=False)
    schedule = Column(JSON, default=dict, nullable=False)
    special_needs = Column(Text, nullable=True)
    dietary_restrictions = Column(JSON, default=list, nullable=False)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    monthly_fee = Column(Numeric(10, 2), nullable=False)
    fee_status = Column(enum_column(FeeStatus), default=FeeStatus.PENDING, nullable=False)

    parents = relationship("User", secondary=child_parents, lazy="selectin", order_by="User.id")

    @property
    def parent_ids(self):
        return [parent.id for parent in self.parents]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def age(self):
        """Age in completed years"""
        if not self.date_of_birth:
            return None
        today = date.today()
        born = self.date_of_birth
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))

    def __repr__(self):
        return f"<Child(id={self.id}, name={self.full_name}, classroom={self.classroom})>"

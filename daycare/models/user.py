from sqlalchemy import Column, String, Boolean, Date, JSON, Numeric
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import UserRole, Department


class User(TimestampMixin, Base):
    __tablename__ = "users"

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(enum_column(UserRole), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    phone = Column(String(30), nullable=True)
    address = Column(String(255), nullable=True)

    # Staff roles
    employee_id = Column(String(50), nullable=True)
    department = Column(enum_column(Department), nullable=True)
    hire_date = Column(Date, nullable=True)
    salary = Column(Numeric(12, 2), nullable=True)

    # Children owned by a parent; kept in sync with Child.parents
    child_ids = Column(JSON, default=list, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

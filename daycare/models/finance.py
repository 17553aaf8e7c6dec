from datetime import date
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, ForeignKey, Numeric, JSON
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import (
    TransactionType,
    TransactionCategory,
    TransactionStatus,
    PaymentMethod,
    RecurrenceFrequency,
)


class Transaction(TimestampMixin, Base):
    __tablename__ = "finance_transactions"

    transaction_type = Column(enum_column(TransactionType), nullable=False, index=True)
    category = Column(enum_column(TransactionCategory), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(500), nullable=False)
    transaction_date = Column(Date, nullable=False, default=date.today, index=True)
    payment_method = Column(enum_column(PaymentMethod), nullable=True)

    related_child_id = Column(Integer, ForeignKey("children.id", ondelete="SET NULL"), nullable=True, index=True)
    related_parent_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    related_employee_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    vendor = Column(JSON, nullable=True)
    invoice_number = Column(String(50), nullable=True)
    receipt_number = Column(String(50), nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    notes = Column(Text, nullable=True)

    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_frequency = Column(enum_column(RecurrenceFrequency), nullable=True)

    # Approval workflow
    status = Column(enum_column(TransactionStatus), default=TransactionStatus.PENDING, nullable=False, index=True)
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approval_notes = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    @property
    def formatted_amount(self) -> str:
        return f"${self.amount:.2f}"

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, type={self.transaction_type}, "
            f"amount={self.amount}, status={self.status})>"
        )

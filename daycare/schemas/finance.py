# daycare/schemas/finance.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .common import ORMModel, PageParams
from .enums import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    PaymentMethod,
    RecurrenceFrequency,
    TransactionCategory,
    TransactionStatus,
    TransactionType,
)


def category_matches_type(transaction_type: TransactionType, category: TransactionCategory) -> bool:
    allowed = INCOME_CATEGORIES if transaction_type == TransactionType.INCOME else EXPENSE_CATEGORIES
    return category in allowed


class Vendor(BaseModel):
    name: str
    contact: Optional[str] = None
    email: Optional[str] = None


class TransactionCreate(BaseModel):
    transaction_type: TransactionType
    category: TransactionCategory
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=500)
    transaction_date: date = Field(default_factory=date.today)
    payment_method: Optional[PaymentMethod] = None
    related_child_id: Optional[int] = None
    related_parent_id: Optional[int] = None
    related_employee_id: Optional[int] = None
    vendor: Optional[Vendor] = None
    invoice_number: Optional[str] = Field(None, max_length=50)
    receipt_number: Optional[str] = Field(None, max_length=50)
    tags: List[str] = []
    notes: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[RecurrenceFrequency] = None

    @model_validator(mode="after")
    def check_category(self):
        if not category_matches_type(self.transaction_type, self.category):
            raise ValueError(
                f"Category '{self.category.value}' is not valid for {self.transaction_type.value} transactions"
            )
        return self


class TransactionUpdate(BaseModel):
    transaction_type: Optional[TransactionType] = None
    category: Optional[TransactionCategory] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    transaction_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    related_child_id: Optional[int] = None
    related_parent_id: Optional[int] = None
    related_employee_id: Optional[int] = None
    vendor: Optional[Vendor] = None
    invoice_number: Optional[str] = Field(None, max_length=50)
    receipt_number: Optional[str] = Field(None, max_length=50)
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[RecurrenceFrequency] = None
    status: Optional[TransactionStatus] = None
    approval_notes: Optional[str] = None


class ApprovalRequest(BaseModel):
    approved: bool = True
    notes: Optional[str] = None


class TransactionFilters(PageParams):
    search: Optional[str] = Field(None, description="Matches description, invoice or receipt number")
    transaction_type: Optional[TransactionType] = None
    category: Optional[TransactionCategory] = None
    status: Optional[TransactionStatus] = None
    related_child_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TransactionResponse(ORMModel):
    id: int
    transaction_type: TransactionType
    category: TransactionCategory
    amount: Decimal
    formatted_amount: str
    description: str
    transaction_date: date
    payment_method: Optional[PaymentMethod] = None
    related_child_id: Optional[int] = None
    related_parent_id: Optional[int] = None
    related_employee_id: Optional[int] = None
    vendor: Optional[Vendor] = None
    invoice_number: Optional[str] = None
    receipt_number: Optional[str] = None
    tags: List[str] = []
    notes: Optional[str] = None
    is_recurring: bool
    recurring_frequency: Optional[RecurrenceFrequency] = None
    status: TransactionStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

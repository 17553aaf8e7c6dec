# daycare/schemas/reports.py
from calendar import monthrange
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, Field

from daycare.schemas.enums import ActivityStatus, ActivityType, ReportGranularity, TransactionType, UserRole


class ReportFilters(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: Optional[str] = Field(
        None,
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="YYYY-MM shorthand; overrides start_date/end_date",
    )

    def date_range(self) -> Tuple[Optional[date], Optional[date]]:
        if self.month:
            year, month = (int(part) for part in self.month.split("-"))
            return date(year, month, 1), date(year, month, monthrange(year, month)[1])
        return self.start_date, self.end_date


class FinancialReportQuery(ReportFilters):
    group_by: ReportGranularity = ReportGranularity.MONTH


class PeriodTotals(BaseModel):
    period: str
    income: Decimal
    expenses: Decimal
    income_count: int
    expense_count: int
    net_income: Decimal


class CategoryTotal(BaseModel):
    category: str
    transaction_type: TransactionType
    total: Decimal
    count: int


class FinancialSummary(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    total_transactions: int


class FinancialReport(BaseModel):
    group_by: ReportGranularity
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    periods: List[PeriodTotals]
    category_breakdown: List[CategoryTotal]
    summary: FinancialSummary


class ClassroomStatistics(BaseModel):
    classroom: str
    count: int
    active: int
    average_age: Optional[float] = None


class ChildStatistics(BaseModel):
    total: int
    active: int
    inactive: int
    by_classroom: List[ClassroomStatistics]


class StatusStatistics(BaseModel):
    status: ActivityStatus
    count: int
    average_participants: float


class TypeStatistics(BaseModel):
    activity_type: ActivityType
    count: int


class ActivityStatistics(BaseModel):
    total: int
    by_status: List[StatusStatistics]
    by_type: List[TypeStatistics]


class TransactionSummary(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    income_count: int
    expense_count: int
    by_status: Dict[str, int]


class UserStatistics(BaseModel):
    total: int
    active: int
    inactive: int
    by_role: Dict[UserRole, int]

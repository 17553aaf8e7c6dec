# daycare/services/reporting.py
"""Aggregate reports over role-scoped record sets.

The ``build_*`` functions are pure folds over already-loaded records;
``ReportingEngine`` loads the records the actor may see and hands them over.
"""
from collections import defaultdict
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import log_function_call, logger
from daycare.core.permissions import Action, ResourceKind, authorize
from daycare.core.scoping import apply_filters, date_range_clause, scope_clause
from daycare.models import Activity, Child, Transaction, User
from daycare.schemas.enums import ReportGranularity, TransactionStatus, TransactionType, UserRole
from daycare.schemas.reports import (
    ActivityStatistics,
    CategoryTotal,
    ChildStatistics,
    ClassroomStatistics,
    FinancialReport,
    FinancialSummary,
    PeriodTotals,
    ReportFilters,
    StatusStatistics,
    TransactionSummary,
    TypeStatistics,
    UserStatistics,
)

DAYS_PER_YEAR = 365.25
SECONDS_PER_DAY = 86400

_PERIOD_FORMATS = {
    ReportGranularity.DAY: "%Y-%m-%d",
    ReportGranularity.WEEK: "%Y-%U",   # Sunday-first week number
    ReportGranularity.MONTH: "%Y-%m",
    ReportGranularity.YEAR: "%Y",
}


class ReportKind(str, Enum):
    FINANCIAL = "financial"
    PENDING_TRANSACTIONS = "pending_transactions"
    TRANSACTION_SUMMARY = "transaction_summary"
    CHILD_STATISTICS = "child_statistics"
    ACTIVITY_STATISTICS = "activity_statistics"
    USER_STATISTICS = "user_statistics"


def _decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def period_key(day: date, granularity: ReportGranularity = ReportGranularity.MONTH) -> str:
    return day.strftime(_PERIOD_FORMATS[ReportGranularity(granularity)])


def build_financial_report(
    transactions: Iterable[Any],
    group_by: ReportGranularity = ReportGranularity.MONTH,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> FinancialReport:
    """Group approved transactions by period and by (category, type)"""
    group_by = ReportGranularity(group_by)
    periods = defaultdict(lambda: {
        "income": Decimal("0"),
        "expenses": Decimal("0"),
        "income_count": 0,
        "expense_count": 0,
    })
    categories = defaultdict(lambda: {"total": Decimal("0"), "count": 0})

    for txn in transactions:
        if txn.status != TransactionStatus.APPROVED:
            continue
        amount = _decimal(txn.amount)
        bucket = periods[period_key(txn.transaction_date, group_by)]
        if txn.transaction_type == TransactionType.INCOME:
            bucket["income"] += amount
            bucket["income_count"] += 1
        else:
            bucket["expenses"] += amount
            bucket["expense_count"] += 1

        category = txn.category.value if isinstance(txn.category, Enum) else str(txn.category)
        entry = categories[(category, TransactionType(txn.transaction_type))]
        entry["total"] += amount
        entry["count"] += 1

    period_rows = [
        PeriodTotals(period=key, net_income=values["income"] - values["expenses"], **values)
        for key, values in sorted(periods.items())
    ]

    breakdown = [
        CategoryTotal(category=category, transaction_type=txn_type, **values)
        for (category, txn_type), values in categories.items()
    ]
    breakdown.sort(key=lambda row: (-row.total, row.category, row.transaction_type.value))

    total_income = sum((row.income for row in period_rows), Decimal("0"))
    total_expenses = sum((row.expenses for row in period_rows), Decimal("0"))

    return FinancialReport(
        group_by=group_by,
        start_date=start_date,
        end_date=end_date,
        periods=period_rows,
        category_breakdown=breakdown,
        summary=FinancialSummary(
            total_income=total_income,
            total_expenses=total_expenses,
            net_income=total_income - total_expenses,
            total_transactions=sum(row.income_count + row.expense_count for row in period_rows),
        ),
    )


def build_transaction_summary(transactions: Iterable[Any]) -> TransactionSummary:
    totals = {TransactionType.INCOME: Decimal("0"), TransactionType.EXPENSE: Decimal("0")}
    counts = {TransactionType.INCOME: 0, TransactionType.EXPENSE: 0}
    by_status = {status.value: 0 for status in TransactionStatus}
    for txn in transactions:
        txn_type = TransactionType(txn.transaction_type)
        totals[txn_type] += _decimal(txn.amount)
        counts[txn_type] += 1
        by_status[TransactionStatus(txn.status).value] += 1
    return TransactionSummary(
        total_income=totals[TransactionType.INCOME],
        total_expenses=totals[TransactionType.EXPENSE],
        income_count=counts[TransactionType.INCOME],
        expense_count=counts[TransactionType.EXPENSE],
        by_status=by_status,
    )


def _age_in_years(born: date, now: datetime) -> float:
    """Exact elapsed time since midnight UTC on the birth date, in 365.25-day years"""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = datetime.combine(born, time.min, tzinfo=timezone.utc)
    return (now - start).total_seconds() / (DAYS_PER_YEAR * SECONDS_PER_DAY)


def build_child_statistics(children: Iterable[Any], now: Optional[datetime] = None) -> ChildStatistics:
    now = now or datetime.now(timezone.utc)
    classrooms = defaultdict(lambda: {"count": 0, "active": 0, "ages": []})
    total = active = 0

    for child in children:
        total += 1
        room = classrooms[child.classroom]
        room["count"] += 1
        if child.is_active:
            active += 1
            room["active"] += 1
        if child.date_of_birth:
            room["ages"].append(_age_in_years(child.date_of_birth, now))

    by_classroom = [
        ClassroomStatistics(
            classroom=name,
            count=values["count"],
            active=values["active"],
            average_age=round(sum(values["ages"]) / len(values["ages"]), 2) if values["ages"] else None,
        )
        for name, values in sorted(classrooms.items())
    ]
    return ChildStatistics(total=total, active=active, inactive=total - active, by_classroom=by_classroom)


def build_activity_statistics(activities: Iterable[Any]) -> ActivityStatistics:
    statuses = defaultdict(list)
    types = defaultdict(int)
    total = 0
    for activity in activities:
        total += 1
        statuses[activity.status].append(len(activity.participants))
        types[activity.activity_type] += 1

    by_status = [
        StatusStatistics(
            status=status,
            count=len(sizes),
            average_participants=round(sum(sizes) / len(sizes), 2),
        )
        for status, sizes in sorted(statuses.items(), key=lambda item: item[0].value)
    ]
    by_type = [
        TypeStatistics(activity_type=activity_type, count=count)
        for activity_type, count in sorted(types.items(), key=lambda item: item[0].value)
    ]
    return ActivityStatistics(total=total, by_status=by_status, by_type=by_type)


def build_user_statistics(users: Iterable[Any]) -> UserStatistics:
    by_role = {role: 0 for role in UserRole}
    total = active = 0
    for user in users:
        total += 1
        active += 1 if user.is_active else 0
        by_role[UserRole(user.role)] += 1
    return UserStatistics(total=total, active=active, inactive=total - active, by_role=by_role)


class ReportingEngine:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scoped(
        self,
        actor: Optional[Actor],
        action: Action,
        kind: ResourceKind,
        model,
        clauses: Sequence[Any] = (),
        order_by: Sequence[Any] = (),
    ) -> List[Any]:
        decision = authorize(actor, action, kind).raise_for_deny()
        query = apply_filters(select(model), scope_clause(model, decision.scope), *clauses)
        if order_by:
            query = query.order_by(*order_by)
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    @staticmethod
    def _resolve_range(filters: Optional[ReportFilters]):
        start, end = filters.date_range() if filters else (None, None)
        if start and end and start > end:
            raise ValidationError("start_date must not be after end_date")
        return start, end

    @log_function_call(logger)
    async def report(
        self,
        actor: Optional[Actor],
        kind: ReportKind,
        filters: Optional[ReportFilters] = None,
        group_by: Optional[ReportGranularity] = None,
    ):
        kind = ReportKind(kind)
        if kind == ReportKind.FINANCIAL:
            return await self.financial_report(actor, filters, group_by or ReportGranularity.MONTH)
        if kind == ReportKind.PENDING_TRANSACTIONS:
            return await self.pending_transactions(actor)
        if kind == ReportKind.TRANSACTION_SUMMARY:
            return await self.transaction_summary(actor, filters)
        if kind == ReportKind.CHILD_STATISTICS:
            return await self.child_statistics(actor)
        if kind == ReportKind.ACTIVITY_STATISTICS:
            return await self.activity_statistics(actor, filters)
        return await self.user_statistics(actor)

    async def financial_report(
        self,
        actor: Optional[Actor],
        filters: Optional[ReportFilters] = None,
        group_by: ReportGranularity = ReportGranularity.MONTH,
    ) -> FinancialReport:
        start, end = self._resolve_range(filters)
        transactions = await self._scoped(
            actor, Action.REPORT, ResourceKind.TRANSACTION, Transaction,
            clauses=(
                Transaction.status == TransactionStatus.APPROVED,
                date_range_clause(Transaction.transaction_date, start, end),
            ),
        )
        return build_financial_report(transactions, group_by, start, end)

    async def pending_transactions(self, actor: Optional[Actor]) -> List[Transaction]:
        return await self._scoped(
            actor, Action.READ_LIST, ResourceKind.TRANSACTION, Transaction,
            clauses=(Transaction.status == TransactionStatus.PENDING,),
            order_by=(Transaction.created_at.desc(), Transaction.id.desc()),
        )

    async def transaction_summary(
        self,
        actor: Optional[Actor],
        filters: Optional[ReportFilters] = None,
        clauses: Sequence[Any] = (),
    ) -> TransactionSummary:
        start, end = self._resolve_range(filters)
        transactions = await self._scoped(
            actor, Action.READ_LIST, ResourceKind.TRANSACTION, Transaction,
            clauses=(date_range_clause(Transaction.transaction_date, start, end), *clauses),
        )
        return build_transaction_summary(transactions)

    async def child_statistics(self, actor: Optional[Actor]) -> ChildStatistics:
        children = await self._scoped(actor, Action.REPORT, ResourceKind.CHILD, Child)
        return build_child_statistics(children)

    async def activity_statistics(
        self,
        actor: Optional[Actor],
        filters: Optional[ReportFilters] = None,
    ) -> ActivityStatistics:
        start, end = self._resolve_range(filters)
        activities = await self._scoped(
            actor, Action.REPORT, ResourceKind.ACTIVITY, Activity,
            clauses=(date_range_clause(Activity.date, start, end),),
        )
        return build_activity_statistics(activities)

    async def user_statistics(self, actor: Optional[Actor]) -> UserStatistics:
        users = await self._scoped(actor, Action.REPORT, ResourceKind.USER, User)
        return build_user_statistics(users)

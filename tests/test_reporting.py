"""
Tests for the aggregation engine: the pure fold functions and the
role-scoped ReportingEngine on top of them.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from daycare.core.exceptions import ForbiddenError, ValidationError
from daycare.schemas.enums import (
    ActivityStatus,
    ActivityType,
    ReportGranularity,
    TransactionCategory,
    TransactionStatus,
    TransactionType,
    UserRole,
)
from daycare.schemas.reports import ReportFilters
from daycare.services import ReportingEngine, ReportKind
from daycare.services.reporting import (
    build_activity_statistics,
    build_child_statistics,
    build_financial_report,
    build_transaction_summary,
    _age_in_years,
    period_key,
)
from tests.helpers import as_actor


def txn(amount, category, day, txn_type=None, status=TransactionStatus.APPROVED):
    if txn_type is None:
        txn_type = TransactionType.EXPENSE if category in (
            TransactionCategory.SALARIES, TransactionCategory.FOOD, TransactionCategory.RENT
        ) else TransactionType.INCOME
    return SimpleNamespace(
        amount=Decimal(amount),
        category=category,
        transaction_type=txn_type,
        transaction_date=day,
        status=status,
    )


class TestPeriodKey:

    @pytest.mark.parametrize("granularity,expected", [
        (ReportGranularity.DAY, "2024-01-07"),
        (ReportGranularity.WEEK, "2024-01"),
        (ReportGranularity.MONTH, "2024-01"),
        (ReportGranularity.YEAR, "2024"),
    ])
    def test_keys(self, granularity, expected):
        assert period_key(date(2024, 1, 7), granularity) == expected


class TestFinancialReport:

    def test_only_approved_transactions_count(self):
        report = build_financial_report([
            txn("100", TransactionCategory.TUITION_FEES, date(2024, 1, 3)),
            txn("900", TransactionCategory.TUITION_FEES, date(2024, 1, 4), status=TransactionStatus.PENDING),
            txn("50", TransactionCategory.TUITION_FEES, date(2024, 1, 5), status=TransactionStatus.REJECTED),
        ])
        assert report.summary.total_income == Decimal("100")
        assert report.summary.total_transactions == 1

    def test_periods_are_sparse_and_sorted(self):
        report = build_financial_report([
            txn("10", TransactionCategory.DONATIONS, date(2024, 3, 1)),
            txn("20", TransactionCategory.DONATIONS, date(2024, 1, 1)),
        ])
        assert [p.period for p in report.periods] == ["2024-01", "2024-03"]

    def test_category_breakdown_sorted_by_total_descending(self):
        report = build_financial_report([
            txn("300", TransactionCategory.TUITION_FEES, date(2024, 1, 2)),
            txn("1200", TransactionCategory.SALARIES, date(2024, 1, 3)),
            txn("450", TransactionCategory.FOOD, date(2024, 1, 4)),
            txn("300", TransactionCategory.TUITION_FEES, date(2024, 1, 5)),
        ])
        totals = [(row.category, row.total, row.count) for row in report.category_breakdown]
        assert totals == [
            ("salaries", Decimal("1200"), 1),
            ("tuition_fees", Decimal("600"), 2),
            ("food", Decimal("450"), 1),
        ]

    def test_net_income_is_exact(self):
        report = build_financial_report([
            txn("0.10", TransactionCategory.LATE_FEES, date(2024, 1, 2)),
            txn("0.20", TransactionCategory.LATE_FEES, date(2024, 1, 2)),
            txn("0.30", TransactionCategory.FOOD, date(2024, 1, 2)),
        ])
        assert report.summary.net_income == Decimal("0.00")
        assert report.periods[0].net_income == Decimal("0.00")

    def test_empty_input(self):
        report = build_financial_report([])
        assert report.periods == []
        assert report.category_breakdown == []
        assert report.summary.net_income == Decimal("0")


class TestSummaries:

    def test_transaction_summary_counts_every_status(self):
        summary = build_transaction_summary([
            txn("100", TransactionCategory.TUITION_FEES, date(2024, 1, 2)),
            txn("40", TransactionCategory.FOOD, date(2024, 1, 2), status=TransactionStatus.PENDING),
        ])
        assert summary.total_income == Decimal("100")
        assert summary.total_expenses == Decimal("40")
        assert summary.by_status == {"pending": 1, "approved": 1, "rejected": 0}

    def test_child_statistics(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        children = [
            SimpleNamespace(classroom="Tulips", is_active=True, date_of_birth=date(2021, 6, 1)),
            SimpleNamespace(classroom="Tulips", is_active=False, date_of_birth=date(2022, 6, 1)),
            SimpleNamespace(classroom="Daisies", is_active=True, date_of_birth=date(2020, 6, 1)),
        ]
        stats = build_child_statistics(children, now=now)
        assert (stats.total, stats.active, stats.inactive) == (3, 2, 1)
        assert [room.classroom for room in stats.by_classroom] == ["Daisies", "Tulips"]
        tulips = stats.by_classroom[1]
        assert tulips.count == 2
        assert tulips.active == 1
        assert tulips.average_age == pytest.approx(2.5, abs=0.01)

    def test_average_age_counts_partial_days(self):
        born = date(2024, 6, 1)
        assert _age_in_years(born, datetime(2025, 6, 1, 12, tzinfo=timezone.utc)) == pytest.approx(365.5 / 365.25)
        assert _age_in_years(born, datetime(2024, 6, 1, 18)) == pytest.approx(0.75 / 365.25)

        now = datetime(2024, 6, 2, 23, tzinfo=timezone.utc)
        stats = build_child_statistics(
            [SimpleNamespace(classroom="Nursery", is_active=True, date_of_birth=born)], now=now
        )
        # 1 day 23 hours is 0.0054 years; whole days alone would round to 0.0
        assert stats.by_classroom[0].average_age == 0.01

    def test_activity_statistics(self):
        def activity(status, kind, size):
            return SimpleNamespace(status=status, activity_type=kind, participants=[object()] * size)

        stats = build_activity_statistics([
            activity(ActivityStatus.PLANNED, ActivityType.MUSIC, 3),
            activity(ActivityStatus.PLANNED, ActivityType.OUTDOOR, 4),
            activity(ActivityStatus.COMPLETED, ActivityType.MUSIC, 2),
        ])
        assert stats.total == 3
        planned = next(row for row in stats.by_status if row.status == ActivityStatus.PLANNED)
        assert planned.count == 2
        assert planned.average_participants == 3.5
        assert {row.activity_type: row.count for row in stats.by_type} == {
            ActivityType.MUSIC: 2,
            ActivityType.OUTDOOR: 1,
        }


class TestReportingEngine:

    @pytest.fixture
    async def january(self, make_transaction):
        """Approved January 2024 ledger plus noise the report must ignore"""
        await make_transaction(approve=True, amount=Decimal("1500.00"), transaction_date=date(2024, 1, 5))
        await make_transaction(approve=True, amount=Decimal("250.00"), transaction_date=date(2024, 1, 20),
                               category=TransactionCategory.REGISTRATION_FEES)
        await make_transaction(approve=True, amount=Decimal("800.00"), transaction_date=date(2024, 1, 15),
                               transaction_type=TransactionType.EXPENSE, category=TransactionCategory.SALARIES)
        await make_transaction(approve=True, amount=Decimal("120.50"), transaction_date=date(2024, 1, 31),
                               transaction_type=TransactionType.EXPENSE, category=TransactionCategory.FOOD)
        await make_transaction(amount=Decimal("999.00"), transaction_date=date(2024, 1, 10))
        await make_transaction(approve=True, amount=Decimal("700.00"), transaction_date=date(2024, 2, 1))

    async def test_month_report(self, db, admin, january):
        report = await ReportingEngine(db).financial_report(as_actor(admin), ReportFilters(month="2024-01"))

        assert report.start_date == date(2024, 1, 1)
        assert report.end_date == date(2024, 1, 31)
        assert [row.category for row in report.category_breakdown] == [
            "tuition_fees", "salaries", "registration_fees", "food",
        ]
        totals = [row.total for row in report.category_breakdown]
        assert totals == sorted(totals, reverse=True)
        assert report.summary.total_income == Decimal("1750.00")
        assert report.summary.total_expenses == Decimal("920.50")
        assert report.summary.net_income == report.summary.total_income - report.summary.total_expenses
        assert report.summary.net_income == Decimal("829.50")

    async def test_finance_role_may_report(self, db, finance_user, january):
        report = await ReportingEngine(db).report(
            as_actor(finance_user), ReportKind.FINANCIAL, ReportFilters(month="2024-01")
        )
        assert report.summary.total_transactions == 4

    async def test_teacher_may_not_report_on_finance(self, db, teacher):
        with pytest.raises(ForbiddenError):
            await ReportingEngine(db).financial_report(as_actor(teacher))

    async def test_inverted_range_is_rejected(self, db, admin):
        filters = ReportFilters(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
        with pytest.raises(ValidationError):
            await ReportingEngine(db).financial_report(as_actor(admin), filters)

    async def test_pending_transactions_newest_first(self, db, finance_user, make_transaction):
        first = await make_transaction(description="first")
        second = await make_transaction(description="second")
        await make_transaction(approve=True, description="done")
        pending = await ReportingEngine(db).pending_transactions(as_actor(finance_user))
        assert [t.id for t in pending] == [second.id, first.id]

    async def test_teacher_child_statistics_cover_own_class(
        self, db, teacher, make_user, make_child, parent
    ):
        other = await make_user(UserRole.TEACHER)
        await make_child(teacher, [parent], classroom="Tulips")
        await make_child(other, [parent], classroom="Daisies")
        stats = await ReportingEngine(db).child_statistics(as_actor(teacher))
        assert stats.total == 1
        assert [room.classroom for room in stats.by_classroom] == ["Tulips"]

    async def test_user_statistics_admin_only(self, db, admin, staff):
        stats = await ReportingEngine(db).user_statistics(as_actor(admin))
        assert stats.total == 2
        assert stats.by_role[UserRole.STAFF] == 1
        with pytest.raises(ForbiddenError):
            await ReportingEngine(db).user_statistics(as_actor(staff))

"""
Tests for the finance ledger and its approval workflow.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from daycare.core.exceptions import ForbiddenError, ImmutableError, ValidationError
from daycare.models import Transaction
from daycare.schemas.enums import TransactionCategory, TransactionStatus, TransactionType
from daycare.schemas.finance import TransactionCreate, TransactionFilters, TransactionUpdate
from daycare.services import FinanceService
from tests.helpers import as_actor


def tuition(child_id=None, amount="500.00") -> TransactionCreate:
    return TransactionCreate(
        transaction_type=TransactionType.INCOME,
        category=TransactionCategory.TUITION_FEES,
        amount=Decimal(amount),
        description="Tuition",
        transaction_date=date(2024, 1, 8),
        related_child_id=child_id,
    )


class TestApprovalWorkflow:

    async def test_parent_cannot_record_transactions(self, db, parent):
        with pytest.raises(ForbiddenError):
            await FinanceService(db).create(as_actor(parent), tuition())

    async def test_full_lifecycle(self, db, admin, finance_user, parent, teacher, make_child):
        child = await make_child(teacher, [parent])
        service = FinanceService(db)
        finance, boss = as_actor(finance_user), as_actor(admin)

        created = await service.create(finance, tuition(child_id=child.id))
        assert created.status == TransactionStatus.PENDING
        assert created.created_by == finance_user.id
        assert created.approved_by is None

        approved = await service.approve(boss, created.id, approved=True)
        assert approved.status == TransactionStatus.APPROVED
        assert approved.approved_by == admin.id
        assert approved.approved_at is not None

        transaction_id = created.id
        with pytest.raises(ImmutableError):
            await service.update(finance, transaction_id, TransactionUpdate(amount=Decimal("1.00")))

        reloaded = await service.get(boss, transaction_id)
        assert reloaded.amount == Decimal("500.00")

    async def test_finance_cannot_approve(self, db, finance_user, make_transaction):
        transaction = await make_transaction()
        with pytest.raises(ForbiddenError):
            await FinanceService(db).approve(as_actor(finance_user), transaction.id)

    async def test_rejection_records_decision(self, db, admin, make_transaction):
        transaction = await make_transaction()
        rejected = await FinanceService(db).approve(
            as_actor(admin), transaction.id, approved=False, notes="Duplicate invoice"
        )
        assert rejected.status == TransactionStatus.REJECTED
        assert rejected.approved_by == admin.id
        assert rejected.approval_notes == "Duplicate invoice"

    async def test_redeciding_overwrites(self, db, admin, make_transaction):
        transaction = await make_transaction(approve=True)
        rejected = await FinanceService(db).approve(as_actor(admin), transaction.id, approved=False)
        assert rejected.status == TransactionStatus.REJECTED

    async def test_admin_may_edit_approved_transaction(self, db, admin, make_transaction):
        transaction = await make_transaction(approve=True)
        updated = await FinanceService(db).update(
            as_actor(admin), transaction.id, TransactionUpdate(description="Corrected")
        )
        assert updated.description == "Corrected"
        assert updated.status == TransactionStatus.APPROVED

    async def test_finance_status_change_is_ignored(self, db, finance_user, make_transaction):
        transaction = await make_transaction()
        updated = await FinanceService(db).update(
            as_actor(finance_user),
            transaction.id,
            TransactionUpdate(status=TransactionStatus.APPROVED, notes="looks fine"),
        )
        assert updated.status == TransactionStatus.PENDING
        assert updated.notes == "looks fine"

    async def test_admin_status_change_goes_through_decision(self, db, admin, make_transaction):
        transaction = await make_transaction()
        updated = await FinanceService(db).update(
            as_actor(admin), transaction.id, TransactionUpdate(status=TransactionStatus.APPROVED)
        )
        assert updated.status == TransactionStatus.APPROVED
        assert updated.approved_by == admin.id
        assert updated.approved_at is not None

        reopened = await FinanceService(db).update(
            as_actor(admin), transaction.id, TransactionUpdate(status=TransactionStatus.PENDING)
        )
        assert reopened.status == TransactionStatus.PENDING
        assert reopened.approved_by is None


class TestValidation:

    def test_category_must_match_type(self):
        with pytest.raises(SchemaValidationError):
            TransactionCreate(
                transaction_type=TransactionType.INCOME,
                category=TransactionCategory.SALARIES,
                amount=Decimal("10"),
                description="Wrong way round",
            )

    def test_amount_must_be_positive(self):
        with pytest.raises(SchemaValidationError):
            tuition(amount="0")

    async def test_update_rechecks_category_against_type(self, db, finance_user, make_transaction):
        transaction = await make_transaction()
        with pytest.raises(ValidationError):
            await FinanceService(db).update(
                as_actor(finance_user),
                transaction.id,
                TransactionUpdate(category=TransactionCategory.RENT),
            )

    async def test_unknown_related_child(self, db, finance_user):
        with pytest.raises(ValidationError):
            await FinanceService(db).create(as_actor(finance_user), tuition(child_id=777))


class TestQueries:

    async def test_filters_and_order(self, db, finance_user, make_transaction):
        await make_transaction(transaction_date=date(2024, 1, 3), description="early")
        await make_transaction(transaction_date=date(2024, 1, 20), description="late")
        await make_transaction(
            transaction_date=date(2024, 1, 10),
            transaction_type=TransactionType.EXPENSE,
            category=TransactionCategory.SUPPLIES,
            description="paint",
        )
        service = FinanceService(db)

        page = await service.list(as_actor(finance_user))
        assert [t.description for t in page.items] == ["late", "paint", "early"]

        page = await service.list(
            as_actor(finance_user), TransactionFilters(transaction_type=TransactionType.INCOME)
        )
        assert page.total == 2

        page = await service.list(
            as_actor(finance_user),
            TransactionFilters(start_date=date(2024, 1, 5), end_date=date(2024, 1, 15)),
        )
        assert [t.description for t in page.items] == ["paint"]

    async def test_summary_includes_pending(self, db, finance_user, make_transaction):
        await make_transaction(amount=Decimal("100.00"))
        await make_transaction(approve=True, amount=Decimal("50.00"))
        summary = await FinanceService(db).summary(as_actor(finance_user))
        assert summary.total_income == Decimal("150.00")
        assert summary.by_status["pending"] == 1
        assert summary.by_status["approved"] == 1

    async def test_delete_is_admin_only(self, db, admin, finance_user, make_transaction):
        transaction = await make_transaction()
        transaction_id, boss = transaction.id, as_actor(admin)
        service = FinanceService(db)
        with pytest.raises(ForbiddenError):
            await service.delete(as_actor(finance_user), transaction_id)
        await service.delete(boss, transaction_id)
        assert await db.get(Transaction, transaction_id) is None

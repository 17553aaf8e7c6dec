# daycare/services/finance_service.py
from typing import List, Optional

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, date_range_clause, search_clause
from daycare.models import Transaction
from daycare.schemas.enums import ReportGranularity, TransactionStatus
from daycare.schemas.finance import (
    TransactionCreate,
    TransactionFilters,
    TransactionUpdate,
    category_matches_type,
)
from daycare.schemas.reports import FinancialReport, ReportFilters, TransactionSummary
from daycare.services.base_service import BaseService
from daycare.services.integrity import IntegrityCoordinator
from daycare.services.reporting import ReportingEngine

_LINK_FIELDS = ("related_child_id", "related_parent_id", "related_employee_id")


class FinanceService(BaseService):
    model = Transaction
    kind = ResourceKind.TRANSACTION
    label = "Transaction"
    json_fields = ("vendor", "tags")

    def __init__(self, db):
        super().__init__(db)
        self.integrity = IntegrityCoordinator(db)
        self.reports = ReportingEngine(db)

    @staticmethod
    def _filter_clauses(filters: TransactionFilters) -> list:
        clauses = [
            search_clause(
                filters.search,
                Transaction.description,
                Transaction.invoice_number,
                Transaction.receipt_number,
            ),
            date_range_clause(Transaction.transaction_date, filters.start_date, filters.end_date),
        ]
        if filters.transaction_type is not None:
            clauses.append(Transaction.transaction_type == filters.transaction_type)
        if filters.category is not None:
            clauses.append(Transaction.category == filters.category)
        if filters.status is not None:
            clauses.append(Transaction.status == filters.status)
        if filters.related_child_id is not None:
            clauses.append(Transaction.related_child_id == filters.related_child_id)
        return clauses

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[TransactionFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        clauses = self._filter_clauses(filters or TransactionFilters())
        return await self.scoped_page(
            actor, clauses, (Transaction.transaction_date.desc(), Transaction.id.desc()), page, page_size
        )

    async def get(self, actor: Optional[Actor], transaction_id: int) -> Transaction:
        return await self.fetch_authorized(actor, transaction_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: TransactionCreate) -> Transaction:
        self.authorize(actor, Action.CREATE)
        values = self.dump(data)
        async with self.transaction():
            await self.integrity.validate_transaction_links(**{name: values.get(name) for name in _LINK_FIELDS})
            transaction = Transaction(**values, status=TransactionStatus.PENDING, created_by=actor.id)
            self.db.add(transaction)
            await self.db.flush()
            transaction_id = transaction.id
        logger.info(
            f"Recorded {data.transaction_type.value} transaction {transaction_id} for {data.amount}",
            extra={"actor_id": actor.id},
        )
        return await self.fetch(transaction_id)

    async def update(self, actor: Optional[Actor], transaction_id: int, data: TransactionUpdate) -> Transaction:
        async with self.transaction():
            transaction = await self.fetch_authorized(actor, transaction_id, Action.UPDATE, lock=True)
            self.integrity.ensure_transaction_mutable(actor, transaction)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))

            transaction_type = changes.get("transaction_type") or transaction.transaction_type
            category = changes.get("category") or transaction.category
            if not category_matches_type(transaction_type, category):
                raise ValidationError(
                    f"Category '{category.value}' is not valid for {transaction_type.value} transactions"
                )

            links = {name: changes[name] for name in _LINK_FIELDS if changes.get(name) is not None}
            if links:
                await self.integrity.validate_transaction_links(**links)

            status = changes.pop("status", None)
            notes = changes.pop("approval_notes", None)
            self.apply_changes(transaction, changes)

            # Only admins get this far with a status change
            if status == TransactionStatus.PENDING:
                transaction.status = TransactionStatus.PENDING
                transaction.approved_by = None
                transaction.approved_at = None
            elif status is not None:
                await self.integrity.decide_transaction(
                    transaction, actor.id, status == TransactionStatus.APPROVED, notes
                )
            elif notes is not None:
                transaction.approval_notes = notes
        return await self.fetch(transaction_id)

    async def delete(self, actor: Optional[Actor], transaction_id: int) -> None:
        async with self.transaction():
            transaction = await self.fetch_authorized(actor, transaction_id, Action.DELETE, lock=True)
            await self.db.delete(transaction)
        logger.info(f"Deleted transaction {transaction_id}", extra={"actor_id": actor.id})

    async def approve(
        self,
        actor: Optional[Actor],
        transaction_id: int,
        approved: bool = True,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Approve or reject; a repeated decision overwrites the previous one"""
        async with self.transaction():
            transaction = await self.fetch_authorized(actor, transaction_id, Action.APPROVE, lock=True)
            await self.integrity.decide_transaction(transaction, actor.id, approved, notes)
        return await self.fetch(transaction_id)

    async def pending(self, actor: Optional[Actor]) -> List[Transaction]:
        return await self.reports.pending_transactions(actor)

    async def report(
        self,
        actor: Optional[Actor],
        filters: Optional[ReportFilters] = None,
        group_by: ReportGranularity = ReportGranularity.MONTH,
    ) -> FinancialReport:
        return await self.reports.financial_report(actor, filters, group_by)

    async def summary(self, actor: Optional[Actor], filters: Optional[TransactionFilters] = None) -> TransactionSummary:
        clauses = self._filter_clauses(filters or TransactionFilters())
        return await self.reports.transaction_summary(actor, clauses=clauses)

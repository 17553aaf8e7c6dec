# daycare/routes/finance.py
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_current_actor, get_finance_service
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond, serialize
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.schemas.finance import (
    ApprovalRequest,
    TransactionCreate,
    TransactionFilters,
    TransactionResponse,
    TransactionUpdate,
)
from daycare.schemas.reports import FinancialReport, FinancialReportQuery, TransactionSummary
from daycare.services import FinanceService

router = APIRouter()


@router.get("/transactions", response_model=ApiResponse[PageResponse[TransactionResponse]])
async def list_transactions(
    filters: Annotated[TransactionFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(TransactionResponse, result))


@router.get("/transactions/pending", response_model=ApiResponse[List[TransactionResponse]])
async def pending_transactions(
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    """Transactions awaiting approval, newest first"""
    return respond(serialize(TransactionResponse, await service.pending(actor)))


@router.get("/transactions/summary", response_model=ApiResponse[TransactionSummary])
async def transaction_summary(
    filters: Annotated[TransactionFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    return respond(await service.summary(actor, filters))


@router.get("/reports", response_model=ApiResponse[FinancialReport])
async def financial_report(
    query: Annotated[FinancialReportQuery, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    """Approved income and expenses grouped by period and category"""
    return respond(await service.report(actor, query, query.group_by))


@router.get("/transactions/{transaction_id}", response_model=ApiResponse[TransactionResponse])
async def get_transaction(
    transaction_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    return respond(TransactionResponse.model_validate(await service.get(actor, transaction_id)))


@router.post("/transactions", response_model=ApiResponse[TransactionResponse], status_code=201)
async def create_transaction(
    data: TransactionCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    transaction = await service.create(actor, data)
    return respond(TransactionResponse.model_validate(transaction), "Transaction created successfully")


@router.put("/transactions/{transaction_id}", response_model=ApiResponse[TransactionResponse])
async def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    transaction = await service.update(actor, transaction_id, data)
    return respond(TransactionResponse.model_validate(transaction), "Transaction updated successfully")


@router.patch("/transactions/{transaction_id}/approve", response_model=ApiResponse[TransactionResponse])
async def approve_transaction(
    transaction_id: int,
    data: ApprovalRequest,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    transaction = await service.approve(actor, transaction_id, data.approved, data.notes)
    verb = "approved" if data.approved else "rejected"
    return respond(TransactionResponse.model_validate(transaction), f"Transaction {verb} successfully")


@router.delete("/transactions/{transaction_id}", response_model=ApiResponse[None])
async def delete_transaction(
    transaction_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: FinanceService = Depends(get_finance_service),
):
    await service.delete(actor, transaction_id)
    return respond(message="Transaction deleted successfully")

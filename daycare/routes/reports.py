# daycare/routes/reports.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_current_actor, get_reporting_engine
from daycare.core.identity import Actor
from daycare.routes.responses import respond, serialize
from daycare.schemas.common import ApiResponse
from daycare.schemas.finance import TransactionResponse
from daycare.schemas.reports import FinancialReportQuery
from daycare.services import ReportingEngine, ReportKind

router = APIRouter()


@router.get("/{kind}", response_model=ApiResponse)
async def run_report(
    kind: ReportKind,
    query: Annotated[FinancialReportQuery, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    engine: ReportingEngine = Depends(get_reporting_engine),
):
    """Any report by name; group_by only applies to the financial report"""
    result = await engine.report(actor, kind, query, query.group_by)
    if isinstance(result, list):
        result = serialize(TransactionResponse, result)
    return respond(result)

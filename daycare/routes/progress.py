# daycare/routes/progress.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_current_actor, get_progress_service
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.schemas.progress import (
    ProgressReportCreate,
    ProgressReportFilters,
    ProgressReportResponse,
    ProgressReportUpdate,
)
from daycare.services import ProgressService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[ProgressReportResponse]])
async def list_reports(
    filters: Annotated[ProgressReportFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ProgressService = Depends(get_progress_service),
):
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(ProgressReportResponse, result))


@router.get("/child/{child_id}", response_model=ApiResponse[PageResponse[ProgressReportResponse]])
async def list_reports_for_child(
    child_id: int,
    page: int = 1,
    page_size: Optional[int] = None,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ProgressService = Depends(get_progress_service),
):
    result = await service.list_for_child(actor, child_id, page, page_size)
    return respond(page_of(ProgressReportResponse, result))


@router.get("/{report_id}", response_model=ApiResponse[ProgressReportResponse])
async def get_report(
    report_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ProgressService = Depends(get_progress_service),
):
    return respond(ProgressReportResponse.model_validate(await service.get(actor, report_id)))


@router.post("", response_model=ApiResponse[ProgressReportResponse], status_code=201)
async def create_report(
    data: ProgressReportCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ProgressService = Depends(get_progress_service),
):
    report = await service.create(actor, data)
    return respond(ProgressReportResponse.model_validate(report), "Progress report created successfully")


@router.put("/{report_id}", response_model=ApiResponse[ProgressReportResponse])
async def update_report(
    report_id: int,
    data: ProgressReportUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ProgressService = Depends(get_progress_service),
):
    report = await service.update(actor, report_id, data)
    return respond(ProgressReportResponse.model_validate(report), "Progress report updated successfully")


@router.delete("/{report_id}", response_model=ApiResponse[None])
async def delete_report(
    report_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ProgressService = Depends(get_progress_service),
):
    await service.delete(actor, report_id)
    return respond(message="Progress report deleted successfully")

# daycare/routes/children.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_child_service, get_current_actor
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond
from daycare.schemas.child import ChildCreate, ChildFilters, ChildResponse, ChildUpdate
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.schemas.reports import ChildStatistics
from daycare.services import ChildService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[ChildResponse]])
async def list_children(
    filters: Annotated[ChildFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    """Children visible to the caller: parents see their own, teachers their class"""
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(ChildResponse, result))


@router.get("/statistics", response_model=ApiResponse[ChildStatistics])
async def child_statistics(
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    return respond(await service.statistics(actor))


@router.get("/classroom/{classroom}", response_model=ApiResponse[PageResponse[ChildResponse]])
async def list_children_by_classroom(
    classroom: str,
    page: int = 1,
    page_size: Optional[int] = None,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    result = await service.list_by_classroom(actor, classroom, page, page_size)
    return respond(page_of(ChildResponse, result))


@router.get("/{child_id}", response_model=ApiResponse[ChildResponse])
async def get_child(
    child_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    return respond(ChildResponse.model_validate(await service.get(actor, child_id)))


@router.post("", response_model=ApiResponse[ChildResponse], status_code=201)
async def create_child(
    data: ChildCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    child = await service.create(actor, data)
    return respond(ChildResponse.model_validate(child), "Child created successfully")


@router.put("/{child_id}", response_model=ApiResponse[ChildResponse])
async def update_child(
    child_id: int,
    data: ChildUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    child = await service.update(actor, child_id, data)
    return respond(ChildResponse.model_validate(child), "Child updated successfully")


@router.delete("/{child_id}", response_model=ApiResponse[None])
async def delete_child(
    child_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ChildService = Depends(get_child_service),
):
    await service.delete(actor, child_id)
    return respond(message="Child deleted successfully")

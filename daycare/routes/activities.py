# daycare/routes/activities.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_activity_service, get_current_actor
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond
from daycare.schemas.activity import (
    ActivityCreate,
    ActivityFilters,
    ActivityResponse,
    ActivityUpdate,
    ParticipantRequest,
)
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.schemas.reports import ActivityStatistics, ReportFilters
from daycare.services import ActivityService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[ActivityResponse]])
async def list_activities(
    filters: Annotated[ActivityFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(ActivityResponse, result))


@router.get("/statistics", response_model=ApiResponse[ActivityStatistics])
async def activity_statistics(
    filters: Annotated[ReportFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    return respond(await service.statistics(actor, filters))


@router.get("/{activity_id}", response_model=ApiResponse[ActivityResponse])
async def get_activity(
    activity_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    return respond(ActivityResponse.model_validate(await service.get(actor, activity_id)))


@router.post("", response_model=ApiResponse[ActivityResponse], status_code=201)
async def create_activity(
    data: ActivityCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.create(actor, data)
    return respond(ActivityResponse.model_validate(activity), "Activity created successfully")


@router.put("/{activity_id}", response_model=ApiResponse[ActivityResponse])
async def update_activity(
    activity_id: int,
    data: ActivityUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.update(actor, activity_id, data)
    return respond(ActivityResponse.model_validate(activity), "Activity updated successfully")


@router.delete("/{activity_id}", response_model=ApiResponse[None])
async def delete_activity(
    activity_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    await service.delete(actor, activity_id)
    return respond(message="Activity deleted successfully")


@router.post("/{activity_id}/participants", response_model=ApiResponse[ActivityResponse])
async def add_participant(
    activity_id: int,
    data: ParticipantRequest,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.add_participant(actor, activity_id, data.child_id)
    return respond(ActivityResponse.model_validate(activity), "Participant added successfully")


@router.delete("/{activity_id}/participants/{child_id}", response_model=ApiResponse[ActivityResponse])
async def remove_participant(
    activity_id: int,
    child_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: ActivityService = Depends(get_activity_service),
):
    activity = await service.remove_participant(actor, activity_id, child_id)
    return respond(ActivityResponse.model_validate(activity), "Participant removed successfully")

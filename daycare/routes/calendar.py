# daycare/routes/calendar.py
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_calendar_service, get_current_actor
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond, serialize
from daycare.schemas.calendar import EventCreate, EventFilters, EventResponse, EventUpdate
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.services import CalendarService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[EventResponse]])
async def list_events(
    filters: Annotated[EventFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: CalendarService = Depends(get_calendar_service),
):
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(EventResponse, result))


@router.get("/upcoming", response_model=ApiResponse[List[EventResponse]])
async def upcoming_events(
    limit: Optional[int] = Query(None, ge=1, le=100),
    actor: Optional[Actor] = Depends(get_current_actor),
    service: CalendarService = Depends(get_calendar_service),
):
    return respond(serialize(EventResponse, await service.upcoming(actor, limit)))


@router.get("/{event_id}", response_model=ApiResponse[EventResponse])
async def get_event(
    event_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: CalendarService = Depends(get_calendar_service),
):
    return respond(EventResponse.model_validate(await service.get(actor, event_id)))


@router.post("", response_model=ApiResponse[EventResponse], status_code=201)
async def create_event(
    data: EventCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: CalendarService = Depends(get_calendar_service),
):
    event = await service.create(actor, data)
    return respond(EventResponse.model_validate(event), "Event created successfully")


@router.put("/{event_id}", response_model=ApiResponse[EventResponse])
async def update_event(
    event_id: int,
    data: EventUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: CalendarService = Depends(get_calendar_service),
):
    event = await service.update(actor, event_id, data)
    return respond(EventResponse.model_validate(event), "Event updated successfully")


@router.delete("/{event_id}", response_model=ApiResponse[None])
async def delete_event(
    event_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: CalendarService = Depends(get_calendar_service),
):
    await service.delete(actor, event_id)
    return respond(message="Event deleted successfully")

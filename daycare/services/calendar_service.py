# daycare/services/calendar_service.py
from datetime import datetime, timezone
from typing import List, Optional

from daycare.core.config import settings
from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, date_range_clause, search_clause
from daycare.models import CalendarEvent
from daycare.schemas.calendar import EventCreate, EventFilters, EventUpdate
from daycare.schemas.enums import EventStatus
from daycare.services.base_service import BaseService


class CalendarService(BaseService):
    model = CalendarEvent
    kind = ResourceKind.CALENDAR_EVENT
    label = "Calendar event"
    json_fields = ("attendee_user_ids", "attendee_child_ids", "recurring_pattern")

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[EventFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or EventFilters()
        clauses = [
            search_clause(filters.search, CalendarEvent.title, CalendarEvent.description),
            date_range_clause(CalendarEvent.start_date, filters.start_date, filters.end_date),
        ]
        if filters.event_type is not None:
            clauses.append(CalendarEvent.event_type == filters.event_type)
        if filters.status is not None:
            clauses.append(CalendarEvent.status == filters.status)
        return await self.scoped_page(
            actor, clauses, (CalendarEvent.start_date, CalendarEvent.id), page, page_size
        )

    async def get(self, actor: Optional[Actor], event_id: int) -> CalendarEvent:
        return await self.fetch_authorized(actor, event_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: EventCreate) -> CalendarEvent:
        self.authorize(actor, Action.CREATE)
        values = self.dump(data)
        if values.get("organizer_id") is None:
            values["organizer_id"] = actor.id
        async with self.transaction():
            event = CalendarEvent(**values, created_by=actor.id)
            self.db.add(event)
            await self.db.flush()
            event_id = event.id
        logger.info(f"Scheduled calendar event {event_id}", extra={"actor_id": actor.id})
        return await self.fetch(event_id)

    async def update(self, actor: Optional[Actor], event_id: int, data: EventUpdate) -> CalendarEvent:
        async with self.transaction():
            event = await self.fetch_authorized(actor, event_id, Action.UPDATE, lock=True)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))
            start = changes.get("start_date") or event.start_date
            end = changes.get("end_date") or event.end_date
            if _naive(end) < _naive(start):
                raise ValidationError("end_date must not be before start_date")
            self.apply_changes(event, changes)
        return await self.fetch(event_id)

    async def delete(self, actor: Optional[Actor], event_id: int) -> None:
        async with self.transaction():
            event = await self.fetch_authorized(actor, event_id, Action.DELETE, lock=True)
            await self.db.delete(event)
        logger.info(f"Deleted calendar event {event_id}", extra={"actor_id": actor.id})

    async def upcoming(self, actor: Optional[Actor], limit: Optional[int] = None) -> List[CalendarEvent]:
        """Events starting from now that are not cancelled, soonest first"""
        return await self.scoped_all(
            actor,
            [
                CalendarEvent.start_date >= datetime.now(timezone.utc),
                CalendarEvent.status != EventStatus.CANCELLED,
            ],
            order_by=(CalendarEvent.start_date, CalendarEvent.id),
            limit=limit or settings.UPCOMING_EVENTS_LIMIT,
        )


def _naive(value: datetime) -> datetime:
    """Drop tzinfo so stored (naive on SQLite) and incoming values compare"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

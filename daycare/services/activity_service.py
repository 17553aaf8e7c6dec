# daycare/services/activity_service.py
from typing import Optional

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, date_range_clause, search_clause
from daycare.models import Activity
from daycare.schemas.activity import ActivityCreate, ActivityFilters, ActivityUpdate
from daycare.schemas.enums import UserRole
from daycare.schemas.reports import ActivityStatistics, ReportFilters
from daycare.services.base_service import BaseService
from daycare.services.integrity import IntegrityCoordinator
from daycare.services.reporting import ReportingEngine


class ActivityService(BaseService):
    model = Activity
    kind = ResourceKind.ACTIVITY
    label = "Activity"
    json_fields = ("materials", "objectives", "recurring_pattern")

    def __init__(self, db):
        super().__init__(db)
        self.integrity = IntegrityCoordinator(db)

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[ActivityFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or ActivityFilters()
        clauses = [
            search_clause(filters.search, Activity.title, Activity.description),
            date_range_clause(Activity.date, filters.start_date, filters.end_date),
        ]
        if filters.activity_type is not None:
            clauses.append(Activity.activity_type == filters.activity_type)
        if filters.status is not None:
            clauses.append(Activity.status == filters.status)
        if filters.teacher_id is not None:
            clauses.append(Activity.teacher_id == filters.teacher_id)
        return await self.scoped_page(
            actor, clauses, (Activity.date.desc(), Activity.start_time, Activity.id), page, page_size
        )

    async def get(self, actor: Optional[Actor], activity_id: int) -> Activity:
        return await self.fetch_authorized(actor, activity_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: ActivityCreate) -> Activity:
        values = self.dump(data)
        if values.get("teacher_id") is None and actor is not None and actor.role == UserRole.TEACHER:
            values["teacher_id"] = actor.id
        self.authorize(actor, Action.CREATE, values)
        if values.get("teacher_id") is None:
            raise ValidationError("teacher_id is required")

        participant_ids = values.pop("participant_ids")
        assistant_ids = values.pop("assistant_ids")

        async with self.transaction():
            await self.integrity.validate_teacher(values["teacher_id"])
            participants = await self.integrity.validate_participants(participant_ids, values["max_participants"])
            assistants = await self.integrity.validate_assistants(assistant_ids)

            activity = Activity(**values, created_by=actor.id)
            activity.participants = participants
            activity.assistants = assistants
            self.db.add(activity)
            await self.db.flush()
            activity_id = activity.id
        logger.info(f"Created activity {activity_id}", extra={"actor_id": actor.id})
        return await self.fetch(activity_id)

    async def update(self, actor: Optional[Actor], activity_id: int, data: ActivityUpdate) -> Activity:
        async with self.transaction():
            activity = await self.fetch_authorized(actor, activity_id, Action.UPDATE, lock=True)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))

            participant_ids = changes.pop("participant_ids", None)
            assistant_ids = changes.pop("assistant_ids", None)
            max_participants = changes.get("max_participants") or activity.max_participants

            if participant_ids is not None:
                activity.participants = await self.integrity.validate_participants(
                    participant_ids, max_participants
                )
            elif changes.get("max_participants") is not None:
                self.integrity.check_capacity(activity, max_participants)

            if assistant_ids is not None:
                activity.assistants = await self.integrity.validate_assistants(assistant_ids)
            if changes.get("teacher_id") is not None and changes["teacher_id"] != activity.teacher_id:
                await self.integrity.validate_teacher(changes["teacher_id"])

            start_time = changes.get("start_time") or activity.start_time
            end_time = changes.get("end_time") or activity.end_time
            if end_time <= start_time:
                raise ValidationError("end_time must be after start_time")

            self.apply_changes(activity, changes)
        return await self.fetch(activity_id)

    async def delete(self, actor: Optional[Actor], activity_id: int) -> None:
        async with self.transaction():
            activity = await self.fetch_authorized(actor, activity_id, Action.DELETE, lock=True)
            self.integrity.ensure_activity_deletable(actor, activity)
            await self.db.delete(activity)
        logger.info(f"Deleted activity {activity_id}", extra={"actor_id": actor.id})

    async def add_participant(self, actor: Optional[Actor], activity_id: int, child_id: int) -> Activity:
        async with self.transaction():
            activity = await self.fetch_authorized(actor, activity_id, Action.UPDATE, lock=True)
            await self.integrity.add_participant(activity, child_id)
        return await self.fetch(activity_id)

    async def remove_participant(self, actor: Optional[Actor], activity_id: int, child_id: int) -> Activity:
        async with self.transaction():
            activity = await self.fetch_authorized(actor, activity_id, Action.UPDATE, lock=True)
            await self.integrity.remove_participant(activity, child_id)
        return await self.fetch(activity_id)

    async def statistics(self, actor: Optional[Actor], filters: Optional[ReportFilters] = None) -> ActivityStatistics:
        return await ReportingEngine(self.db).activity_statistics(actor, filters)

# daycare/services/child_service.py
from datetime import date
from typing import Optional

from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, search_clause
from daycare.models import Child
from daycare.schemas.child import ChildCreate, ChildFilters, ChildUpdate
from daycare.schemas.reports import ChildStatistics
from daycare.services.base_service import BaseService
from daycare.services.integrity import IntegrityCoordinator
from daycare.services.reporting import ReportingEngine


class ChildService(BaseService):
    model = Child
    kind = ResourceKind.CHILD
    label = "Child"
    json_fields = ("emergency_contacts", "medical_info", "schedule", "dietary_restrictions")

    def __init__(self, db):
        super().__init__(db)
        self.integrity = IntegrityCoordinator(db)

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[ChildFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or ChildFilters()
        clauses = [search_clause(filters.search, Child.first_name, Child.last_name)]
        if filters.classroom:
            clauses.append(Child.classroom == filters.classroom)
        if filters.teacher_id is not None:
            clauses.append(Child.teacher_id == filters.teacher_id)
        if filters.is_active is not None:
            clauses.append(Child.is_active == filters.is_active)
        if filters.fee_status is not None:
            clauses.append(Child.fee_status == filters.fee_status)
        return await self.scoped_page(
            actor, clauses, (Child.last_name, Child.first_name, Child.id), page, page_size
        )

    async def list_by_classroom(
        self,
        actor: Optional[Actor],
        classroom: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        """Active children in one classroom, within the actor's scope"""
        return await self.list(actor, ChildFilters(classroom=classroom, is_active=True), page, page_size)

    async def get(self, actor: Optional[Actor], child_id: int) -> Child:
        return await self.fetch_authorized(actor, child_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: ChildCreate) -> Child:
        values = self.dump(data)
        self.authorize(actor, Action.CREATE, values)
        parent_ids = values.pop("parent_ids")
        if values.get("enrollment_date") is None:
            values["enrollment_date"] = date.today()

        async with self.transaction():
            child = await self.integrity.create_child(values, parent_ids)
            child_id = child.id
        logger.info(f"Child {child_id} enrolled in {data.classroom}", extra={"actor_id": actor.id})
        return await self.fetch(child_id)

    async def update(self, actor: Optional[Actor], child_id: int, data: ChildUpdate) -> Child:
        async with self.transaction():
            child = await self.fetch_authorized(actor, child_id, Action.UPDATE, lock=True)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))

            parent_ids = changes.pop("parent_ids", None)
            if parent_ids is not None:
                await self.integrity.replace_child_parents(child, parent_ids)
            if changes.get("teacher_id") is not None and changes["teacher_id"] != child.teacher_id:
                await self.integrity.validate_teacher(changes["teacher_id"])

            self.apply_changes(child, changes)
        return await self.fetch(child_id)

    async def delete(self, actor: Optional[Actor], child_id: int) -> None:
        async with self.transaction():
            child = await self.fetch_authorized(actor, child_id, Action.DELETE, lock=True)
            await self.integrity.delete_child(child)
        logger.info(f"Child {child_id} removed", extra={"actor_id": actor.id})

    async def statistics(self, actor: Optional[Actor]) -> ChildStatistics:
        return await ReportingEngine(self.db).child_statistics(actor)

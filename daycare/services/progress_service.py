# daycare/services/progress_service.py
from typing import Optional

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, date_range_clause
from daycare.models import Child, ProgressReport
from daycare.schemas.enums import UserRole
from daycare.schemas.progress import ProgressReportCreate, ProgressReportFilters, ProgressReportUpdate
from daycare.services.base_service import BaseService


class ProgressService(BaseService):
    model = ProgressReport
    kind = ResourceKind.PROGRESS_REPORT
    label = "Progress report"
    json_fields = ("development_areas", "skills", "behavior", "goals", "recommendations")

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[ProgressReportFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or ProgressReportFilters()
        clauses = [date_range_clause(ProgressReport.report_date, filters.start_date, filters.end_date)]
        if filters.child_id is not None:
            clauses.append(ProgressReport.child_id == filters.child_id)
        if filters.report_type is not None:
            clauses.append(ProgressReport.report_type == filters.report_type)
        if filters.shared_with_parents is not None:
            clauses.append(ProgressReport.shared_with_parents == filters.shared_with_parents)
        return await self.scoped_page(
            actor, clauses, (ProgressReport.report_date.desc(), ProgressReport.id.desc()), page, page_size
        )

    async def list_for_child(
        self,
        actor: Optional[Actor],
        child_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        self.authorize(actor, Action.READ_LIST)
        await self.fetch(child_id, model=Child, label="Child")
        return await self.list(actor, ProgressReportFilters(child_id=child_id), page, page_size)

    async def get(self, actor: Optional[Actor], report_id: int) -> ProgressReport:
        return await self.fetch_authorized(actor, report_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: ProgressReportCreate) -> ProgressReport:
        values = self.dump(data)
        if values.get("teacher_id") is None and actor is not None and actor.role == UserRole.TEACHER:
            values["teacher_id"] = actor.id
        self.authorize(actor, Action.CREATE)

        async with self.transaction():
            child = await self.db.get(Child, values["child_id"])
            if child is None:
                raise ValidationError("Child not found", details={"child_id": values["child_id"]})
            if values.get("teacher_id") is None:
                values["teacher_id"] = child.teacher_id
            self.authorize(actor, Action.CREATE, values)
            if values["teacher_id"] != child.teacher_id:
                raise ValidationError(
                    "Progress reports can only be written by the child's teacher",
                    details={"child_id": child.id, "teacher_id": values["teacher_id"]},
                )

            report = ProgressReport(**values)
            self.db.add(report)
            await self.db.flush()
            report_id = report.id
        logger.info(f"Progress report {report_id} written for child {child.id}", extra={"actor_id": actor.id})
        return await self.fetch(report_id)

    async def update(self, actor: Optional[Actor], report_id: int, data: ProgressReportUpdate) -> ProgressReport:
        async with self.transaction():
            report = await self.fetch_authorized(actor, report_id, Action.UPDATE, lock=True)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))
            child_id = changes.get("child_id") or report.child_id
            teacher_id = changes.get("teacher_id") or report.teacher_id
            if "child_id" in changes or "teacher_id" in changes:
                child = await self.db.get(Child, child_id)
                if child is None or child.teacher_id != teacher_id:
                    raise ValidationError("Progress reports can only be written by the child's teacher")
            self.apply_changes(report, changes)
        return await self.fetch(report_id)

    async def delete(self, actor: Optional[Actor], report_id: int) -> None:
        async with self.transaction():
            report = await self.fetch_authorized(actor, report_id, Action.DELETE, lock=True)
            await self.db.delete(report)
        logger.info(f"Deleted progress report {report_id}", extra={"actor_id": actor.id})

# daycare/services/user_service.py
from typing import Optional

from sqlalchemy import func, select

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, search_clause
from daycare.models import User
from daycare.schemas.reports import UserStatistics
from daycare.schemas.enums import UserRole
from daycare.schemas.user import UserCreate, UserFilters, UserUpdate
from daycare.services.base_service import BaseService
from daycare.services.integrity import IntegrityCoordinator
from daycare.services.reporting import ReportingEngine


class UserService(BaseService):
    model = User
    kind = ResourceKind.USER
    label = "User"

    def __init__(self, db):
        super().__init__(db)
        self.integrity = IntegrityCoordinator(db)

    async def _ensure_email_available(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = select(User.id).where(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await self.db.execute(query)).first() is not None:
            raise ValidationError("User with this email already exists", details={"email": email})

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[UserFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or UserFilters()
        clauses = [search_clause(filters.search, User.first_name, User.last_name, User.email)]
        if filters.role is not None:
            clauses.append(User.role == filters.role)
        if filters.is_active is not None:
            clauses.append(User.is_active == filters.is_active)
        return await self.scoped_page(
            actor, clauses, (User.last_name, User.first_name, User.id), page, page_size
        )

    async def list_by_role(
        self,
        actor: Optional[Actor],
        role: UserRole,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        """Active users holding ``role``; open to every active account"""
        return await self.scoped_page(
            actor,
            [User.role == role, User.is_active.is_(True)],
            (User.last_name, User.first_name, User.id),
            page,
            page_size,
            action=Action.LOOKUP,
        )

    async def get(self, actor: Optional[Actor], user_id: int) -> User:
        return await self.fetch_authorized(actor, user_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: UserCreate) -> User:
        self.authorize(actor, Action.CREATE)
        async with self.transaction():
            await self._ensure_email_available(data.email)
            values = self.dump(data)
            values["email"] = values["email"].lower()
            user = User(**values, child_ids=[])
            self.db.add(user)
            await self.db.flush()
            user_id = user.id
        logger.info(f"Created user {user_id} with role {data.role.value}", extra={"actor_id": actor.id})
        return await self.fetch(user_id)

    async def update(self, actor: Optional[Actor], user_id: int, data: UserUpdate) -> User:
        async with self.transaction():
            user = await self.fetch_authorized(actor, user_id, Action.UPDATE, lock=True)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))
            if changes.get("email"):
                changes["email"] = changes["email"].lower()
                await self._ensure_email_available(changes["email"], exclude_id=user.id)
            if changes.get("role") is not None:
                await self.integrity.ensure_role_change_allowed(user, changes["role"])
            self.apply_changes(user, changes)
        return await self.fetch(user_id)

    async def delete(self, actor: Optional[Actor], user_id: int) -> None:
        self.authorize(actor, Action.DELETE)
        if actor.id == user_id:
            raise ValidationError("You cannot delete your own account")
        async with self.transaction():
            user = await self.fetch_authorized(actor, user_id, Action.DELETE, lock=True)
            await self.integrity.delete_user(user)
        logger.info(f"Deleted user {user_id}", extra={"actor_id": actor.id})

    async def statistics(self, actor: Optional[Actor]) -> UserStatistics:
        return await ReportingEngine(self.db).user_statistics(actor)

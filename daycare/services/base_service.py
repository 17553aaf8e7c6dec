# daycare/services/base_service.py
from contextlib import asynccontextmanager
from typing import Any, Optional, Sequence, Tuple

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.core.config import get_page_sizes
from daycare.core.exceptions import DaycareError, InternalError, NotFoundError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, Decision, ResourceKind, authorize
from daycare.core.scoping import Page, apply_filters, paginate, scope_clause


class BaseService:
    """Shared plumbing for the entity services.

    Subclasses set ``model``, ``kind`` and ``label``; every public operation
    authorizes first, then reads or writes inside ``transaction()``.
    """
    model: Any = None
    kind: ResourceKind = None
    label: str = "Resource"
    json_fields: Tuple[str, ...] = ()

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self):
        """Commit on success; roll back on any failure"""
        try:
            yield
            await self.db.commit()
        except DaycareError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error in {type(self).__name__}: {str(e)}", exc_info=True)
            raise InternalError()
        except Exception:
            await self.db.rollback()
            raise

    def authorize(self, actor: Optional[Actor], action: Action, resource: Any = None) -> Decision:
        return authorize(actor, action, self.kind, resource).raise_for_deny()

    @property
    def default_page_size(self) -> int:
        return get_page_sizes()[self.kind.value]

    async def fetch(self, record_id: int, *, model: Any = None, lock: bool = False, label: Optional[str] = None):
        """Load a row by id or raise NotFoundError; ``lock`` selects it FOR UPDATE"""
        model = model or self.model
        query = (
            select(model)
            .where(model.id == record_id)
            .execution_options(populate_existing=True)
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"{label or self.label} not found", details={"id": record_id})
        return record

    async def fetch_authorized(self, actor: Optional[Actor], record_id: int, action: Action, *, lock: bool = False):
        """Role check, then existence, then ownership"""
        self.authorize(actor, action)
        record = await self.fetch(record_id, lock=lock)
        self.authorize(actor, action, record)
        return record

    async def scoped_page(
        self,
        actor: Optional[Actor],
        clauses: Sequence[Any],
        order_by: Sequence[Any],
        page: int = 1,
        page_size: Optional[int] = None,
        action: Action = Action.READ_LIST,
    ) -> Page:
        decision = self.authorize(actor, action)
        query = apply_filters(select(self.model), scope_clause(self.model, decision.scope), *clauses)
        query = query.order_by(*order_by)
        size = self.default_page_size if page_size is None else page_size
        return await paginate(self.db, query, page, size)

    async def scoped_all(
        self,
        actor: Optional[Actor],
        clauses: Sequence[Any],
        action: Action = Action.READ_LIST,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
    ) -> list:
        """Every row inside the actor's scope for ``action``, unpaginated"""
        decision = self.authorize(actor, action)
        query = apply_filters(select(self.model), scope_clause(self.model, decision.scope), *clauses)
        query = query.order_by(*order_by).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    def dump(self, data: BaseModel, *, partial: bool = False) -> dict:
        """Column values from a request model; ``json_fields`` are JSON-encoded"""
        values = data.model_dump(exclude_unset=partial)
        encoded_fields = set(self.json_fields) & values.keys()
        if encoded_fields:
            values.update(data.model_dump(mode="json", include=encoded_fields, exclude_unset=partial))
        return values

    @staticmethod
    def apply_changes(record: Any, changes: dict) -> None:
        """Assign changed columns; an explicit null on a required column is ignored"""
        columns = record.__table__.columns
        for name, value in changes.items():
            if value is None and name in columns and not columns[name].nullable:
                continue
            setattr(record, name, value)

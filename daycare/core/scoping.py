# daycare/core/scoping.py
from dataclasses import dataclass
from datetime import date, datetime, time
from math import ceil
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from sqlalchemy import DateTime, Select, and_, false, func, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import RelationshipProperty

from daycare.core.config import settings
from daycare.core.exceptions import ValidationError
from daycare.core.permissions import Condition, MatchMode, ScopeFilter, ScopeOp

T = TypeVar("T")


def _condition_clause(model, condition: Condition):
    attr = getattr(model, condition.field)
    match condition.op:
        case ScopeOp.EQ:
            return attr == condition.value
        case ScopeOp.IN:
            values = list(condition.value)
            return attr.in_(values) if values else false()
        case ScopeOp.CONTAINS | ScopeOp.INTERSECTS:
            prop = attr.property
            if not isinstance(prop, RelationshipProperty):
                raise ValueError(f"{condition.field} is not a collection relationship")
            target = prop.mapper.class_
            if condition.op == ScopeOp.CONTAINS:
                return attr.any(target.id == condition.value)
            values = list(condition.value)
            return attr.any(target.id.in_(values)) if values else false()
        case _:
            raise ValueError(f"Invalid scope operator: {condition.op}")


def scope_clause(model, scope: Optional[ScopeFilter]):
    """SQL predicate selecting exactly the rows ``scope.matches`` accepts"""
    if scope is None or scope.is_unrestricted:
        return true()
    clauses = [_condition_clause(model, condition) for condition in scope.conditions]
    return and_(*clauses) if scope.match == MatchMode.ALL else or_(*clauses)


def search_clause(term: Optional[str], *columns):
    """Case-insensitive substring match over any of ``columns``"""
    if not term or not term.strip():
        return None
    needle = term.strip().lower()
    return or_(*(func.lower(column).contains(needle, autoescape=True) for column in columns))


def date_range_clause(column, start: Optional[date] = None, end: Optional[date] = None):
    """Inclusive range; a datetime column covers the whole end day"""
    is_datetime = isinstance(column.type, DateTime)
    clauses = []
    if start is not None:
        clauses.append(column >= (datetime.combine(start, time.min) if is_datetime else start))
    if end is not None:
        clauses.append(column <= (datetime.combine(end, time.max) if is_datetime else end))
    if not clauses:
        return None
    return and_(*clauses)


def apply_filters(query: Select, *clauses) -> Select:
    """Add every non-empty clause to the query's WHERE"""
    for clause in clauses:
        if clause is not None:
            query = query.where(clause)
    return query


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    pages: int
    page_size: int


def validate_paging(page: Any, page_size: Any) -> None:
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise ValidationError("Page must be a positive integer", details={"page": page})
    if (
        not isinstance(page_size, int)
        or isinstance(page_size, bool)
        or not 1 <= page_size <= settings.MAX_PAGE_SIZE
    ):
        raise ValidationError(
            f"Page size must be between 1 and {settings.MAX_PAGE_SIZE}",
            details={"page_size": page_size},
        )


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int,
    page_size: int,
) -> Page:
    """Run ``query`` for one 1-indexed page and count the full result set"""
    validate_paging(page, page_size)

    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(query.offset((page - 1) * page_size).limit(page_size))
    items: Sequence = result.scalars().unique().all()

    return Page(
        items=list(items),
        total=total,
        page=page,
        pages=ceil(total / page_size) if total else 0,
        page_size=page_size,
    )

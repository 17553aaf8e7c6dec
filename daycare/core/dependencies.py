# daycare/core/dependencies.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.core.database import get_db
from daycare.core.identity import Actor, resolve_actor
from daycare.services import (
    ActivityService,
    CalendarService,
    ChildService,
    FinanceService,
    InventoryService,
    MessageService,
    ProgressService,
    ReportingEngine,
    UserService,
)

# No auto error: a missing token becomes a None actor and the policy denies it
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[Actor]:
    token = credentials.credentials if credentials else None
    actor = await resolve_actor(db, token)
    request.state.actor_id = actor.id if actor else None
    return actor


# Service providers
def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)

def get_child_service(db: AsyncSession = Depends(get_db)) -> ChildService:
    return ChildService(db)

def get_activity_service(db: AsyncSession = Depends(get_db)) -> ActivityService:
    return ActivityService(db)

def get_finance_service(db: AsyncSession = Depends(get_db)) -> FinanceService:
    return FinanceService(db)

def get_message_service(db: AsyncSession = Depends(get_db)) -> MessageService:
    return MessageService(db)

def get_calendar_service(db: AsyncSession = Depends(get_db)) -> CalendarService:
    return CalendarService(db)

def get_inventory_service(db: AsyncSession = Depends(get_db)) -> InventoryService:
    return InventoryService(db)

def get_progress_service(db: AsyncSession = Depends(get_db)) -> ProgressService:
    return ProgressService(db)

def get_reporting_engine(db: AsyncSession = Depends(get_db)) -> ReportingEngine:
    return ReportingEngine(db)

"""
Pytest fixtures for the daycare test suite.

Provides:
- An in-memory SQLite database per test (aiosqlite + StaticPool)
- Factory fixtures for users, children, activities and transactions
- An httpx client bound to the ASGI app with the test session injected
"""

import itertools
import os
from datetime import date
from decimal import Decimal

# Settings are read at import time, so the environment comes first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-daycare-suite")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from daycare import create_app
from daycare.core.database import get_db
from daycare.models import Base, User
from daycare.schemas.activity import ActivityCreate
from daycare.schemas.child import ChildCreate
from daycare.schemas.enums import (
    ActivityType,
    Gender,
    TransactionCategory,
    TransactionType,
    UserRole,
)
from daycare.schemas.finance import TransactionCreate
from daycare.services import ActivityService, ChildService, FinanceService
from tests.helpers import as_actor


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session


# Factories


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def _make(role: UserRole = UserRole.PARENT, **overrides) -> User:
        n = next(counter)
        values = {
            "first_name": overrides.pop("first_name", f"{role.value.title()}{n}"),
            "last_name": overrides.pop("last_name", "Tester"),
            "email": overrides.pop("email", f"{role.value}{n}@sunnyside.org"),
            "role": role,
            "is_active": overrides.pop("is_active", True),
            "child_ids": [],
        }
        values.update(overrides)
        user = User(**values)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture
async def teacher(make_user):
    return await make_user(UserRole.TEACHER, first_name="Tess", last_name="Teacher")


@pytest.fixture
async def parent(make_user):
    return await make_user(UserRole.PARENT, first_name="Pat", last_name="Parent")


@pytest.fixture
async def finance_user(make_user):
    return await make_user(UserRole.FINANCE, first_name="Fin", last_name="Ance")


@pytest.fixture
async def staff(make_user):
    return await make_user(UserRole.STAFF, first_name="Sam", last_name="Staff")


@pytest.fixture
def make_child(db, admin):
    counter = itertools.count(1)

    async def _make(teacher: User, parents, **overrides):
        n = next(counter)
        data = {
            "first_name": f"Kid{n}",
            "last_name": "Tester",
            "date_of_birth": date(2021, 3, 15),
            "gender": Gender.FEMALE,
            "parent_ids": [p.id for p in parents],
            "teacher_id": teacher.id,
            "classroom": "Sunflowers",
            "monthly_fee": Decimal("650.00"),
        }
        data.update(overrides)
        return await ChildService(db).create(as_actor(admin), ChildCreate(**data))

    return _make


@pytest.fixture
def make_activity(db, admin):
    async def _make(teacher: User, participants=(), **overrides):
        data = {
            "title": "Finger painting",
            "description": "Primary colours on big paper",
            "activity_type": ActivityType.ARTS_CRAFTS,
            "date": date(2024, 1, 10),
            "start_time": "09:30",
            "end_time": "10:15",
            "location": "Art corner",
            "teacher_id": teacher.id,
            "max_participants": 5,
            "participant_ids": [c.id for c in participants],
        }
        data.update(overrides)
        return await ActivityService(db).create(as_actor(admin), ActivityCreate(**data))

    return _make


@pytest.fixture
def make_transaction(db, admin, finance_user):
    async def _make(approve: bool = False, **overrides):
        data = {
            "transaction_type": TransactionType.INCOME,
            "category": TransactionCategory.TUITION_FEES,
            "amount": Decimal("500.00"),
            "description": "January tuition",
            "transaction_date": date(2024, 1, 5),
        }
        data.update(overrides)
        service = FinanceService(db)
        transaction = await service.create(as_actor(finance_user), TransactionCreate(**data))
        if approve:
            transaction = await service.approve(as_actor(admin), transaction.id)
        return transaction

    return _make


# HTTP


@pytest.fixture
async def client(db):
    app = create_app()

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

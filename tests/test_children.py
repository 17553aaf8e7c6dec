"""
Tests for the child service: who sees which children and which fields each
role may change.
"""

from datetime import date
from decimal import Decimal

import pytest

from daycare.core.exceptions import ForbiddenError, NotFoundError
from daycare.schemas.child import ChildCreate, ChildFilters, ChildUpdate, MedicalInfo
from daycare.schemas.enums import FeeStatus, Gender, UserRole
from daycare.services import ChildService
from tests.helpers import as_actor


class TestAccess:

    async def test_parent_creating_child_is_forbidden(self, db, parent, teacher):
        data = ChildCreate(
            first_name="Zoe",
            last_name="Tester",
            date_of_birth=date(2021, 5, 5),
            gender=Gender.FEMALE,
            parent_ids=[parent.id],
            teacher_id=teacher.id,
            classroom="Tulips",
            monthly_fee=Decimal("600"),
        )
        with pytest.raises(ForbiddenError):
            await ChildService(db).create(as_actor(parent), data)

    async def test_teacher_may_enroll(self, db, parent, teacher):
        data = ChildCreate(
            first_name="Zoe",
            last_name="Tester",
            date_of_birth=date(2021, 5, 5),
            gender=Gender.FEMALE,
            parent_ids=[parent.id],
            teacher_id=teacher.id,
            classroom="Tulips",
            monthly_fee=Decimal("600"),
        )
        child = await ChildService(db).create(as_actor(teacher), data)
        assert child.enrollment_date == date.today()
        assert child.fee_status == FeeStatus.PENDING

    async def test_other_parent_cannot_read(self, db, make_user, make_child, parent, teacher):
        child = await make_child(teacher, [parent])
        stranger = await make_user(UserRole.PARENT)
        with pytest.raises(ForbiddenError):
            await ChildService(db).get(as_actor(stranger), child.id)

    async def test_missing_child_is_not_found_after_role_check(self, db, parent, finance_user):
        service = ChildService(db)
        with pytest.raises(NotFoundError):
            await service.get(as_actor(parent), 404)
        # No read permission at all beats a missing record
        with pytest.raises(ForbiddenError):
            await service.get(as_actor(finance_user), 404)

    async def test_staff_reads_everything(self, db, staff, parent, teacher, make_child):
        await make_child(teacher, [parent])
        await make_child(teacher, [parent])
        page = await ChildService(db).list(as_actor(staff))
        assert page.total == 2

    async def test_only_admin_deletes(self, db, teacher, parent, make_child):
        child = await make_child(teacher, [parent])
        with pytest.raises(ForbiddenError):
            await ChildService(db).delete(as_actor(teacher), child.id)


class TestFieldProjection:

    async def test_parent_updates_care_fields_only(self, db, parent, teacher, make_child):
        child = await make_child(teacher, [parent])
        updated = await ChildService(db).update(
            as_actor(parent),
            child.id,
            ChildUpdate(
                medical_info=MedicalInfo(allergies=["peanuts"]),
                classroom="Roses",
                monthly_fee=Decimal("1"),
            ),
        )
        assert updated.medical_info["allergies"] == ["peanuts"]
        assert updated.classroom == "Sunflowers"
        assert updated.monthly_fee == Decimal("650.00")

    async def test_teacher_moves_classroom_but_not_fees(self, db, parent, teacher, make_child):
        child = await make_child(teacher, [parent])
        updated = await ChildService(db).update(
            as_actor(teacher),
            child.id,
            ChildUpdate(classroom="Roses", fee_status=FeeStatus.PAID),
        )
        assert updated.classroom == "Roses"
        assert updated.fee_status == FeeStatus.PENDING

    async def test_admin_reassigns_teacher(self, db, admin, make_user, parent, teacher, make_child):
        child = await make_child(teacher, [parent])
        other = await make_user(UserRole.TEACHER)
        updated = await ChildService(db).update(as_actor(admin), child.id, ChildUpdate(teacher_id=other.id))
        assert updated.teacher_id == other.id


class TestQueries:

    async def test_filters(self, db, admin, parent, teacher, make_child):
        await make_child(teacher, [parent], first_name="Olive", classroom="Tulips")
        await make_child(teacher, [parent], first_name="Oscar", classroom="Roses")
        await make_child(teacher, [parent], first_name="Mia", classroom="Tulips", is_active=False)
        service = ChildService(db)

        page = await service.list(as_actor(admin), ChildFilters(search="os"))
        assert [c.first_name for c in page.items] == ["Oscar"]

        page = await service.list(as_actor(admin), ChildFilters(classroom="Tulips"))
        assert page.total == 2

        page = await service.list_by_classroom(as_actor(admin), "Tulips")
        assert [c.first_name for c in page.items] == ["Olive"]

    async def test_default_page_size(self, db, admin, parent, teacher, make_child):
        for _ in range(12):
            await make_child(teacher, [parent])
        page = await ChildService(db).list(as_actor(admin))
        assert page.page_size == 10
        assert page.pages == 2
        assert len(page.items) == 10

    async def test_statistics(self, db, admin, parent, teacher, make_child):
        await make_child(teacher, [parent], classroom="Tulips")
        await make_child(teacher, [parent], classroom="Tulips", is_active=False)
        stats = await ChildService(db).statistics(as_actor(admin))
        assert stats.total == 2
        assert stats.active == 1
        assert stats.by_classroom[0].classroom == "Tulips"

"""
Tests for list scoping and pagination.

The SQL predicate built from a ScopeFilter must select exactly the rows the
in-memory check accepts.
"""

import pytest
from sqlalchemy import select

from daycare.core.exceptions import ValidationError
from daycare.core.permissions import Action, ResourceKind, authorize
from daycare.core.scoping import apply_filters, paginate, scope_clause, search_clause
from daycare.models import Activity, Child, User
from daycare.schemas.enums import UserRole
from daycare.services import ChildService
from tests.helpers import as_actor


@pytest.fixture
async def household(make_user, make_child, teacher):
    """Two families; the second child has both parents"""
    mum = await make_user(UserRole.PARENT, first_name="Mum")
    dad = await make_user(UserRole.PARENT, first_name="Dad")
    other_teacher = await make_user(UserRole.TEACHER)
    first = await make_child(teacher, [mum], first_name="Ava")
    second = await make_child(teacher, [mum, dad], first_name="Ben")
    third = await make_child(other_teacher, [dad], first_name="Cal")
    return {
        "mum": mum,
        "dad": dad,
        "other_teacher": other_teacher,
        "children": [first, second, third],
    }


async def _scoped_ids(db, model, actor, action=Action.READ_LIST, kind=ResourceKind.CHILD):
    decision = authorize(actor, action, kind)
    query = apply_filters(select(model), scope_clause(model, decision.scope)).order_by(model.id)
    result = await db.execute(query)
    return [row.id for row in result.scalars().all()], decision.scope


class TestScopeClause:

    async def test_parent_sql_scope_matches_in_memory_scope(self, db, household):
        for name in ("mum", "dad"):
            actor = as_actor(household[name])
            ids, scope = await _scoped_ids(db, Child, actor)
            expected = [c.id for c in household["children"] if scope.matches(c)]
            assert ids == expected

    async def test_teacher_scope(self, db, household, teacher):
        ids, _ = await _scoped_ids(db, Child, as_actor(teacher))
        assert ids == [c.id for c in household["children"][:2]]

    async def test_parent_list_returns_only_own_children(self, db, household):
        page = await ChildService(db).list(as_actor(household["dad"]))
        names = sorted(child.first_name for child in page.items)
        assert names == ["Ben", "Cal"]
        assert page.total == 2

    async def test_parent_activity_scope_via_participants(
        self, db, household, make_activity, teacher
    ):
        ava, ben, cal = household["children"]
        joined = await make_activity(teacher, [ava])
        await make_activity(teacher, [cal], title="Story time")
        ids, _ = await _scoped_ids(
            db, Activity, as_actor(household["mum"]), kind=ResourceKind.ACTIVITY
        )
        assert ids == [joined.id]

    async def test_parent_without_children_sees_no_activities(self, db, make_user, make_activity, teacher):
        lonely = await make_user(UserRole.PARENT)
        await make_activity(teacher)
        ids, _ = await _scoped_ids(db, Activity, as_actor(lonely), kind=ResourceKind.ACTIVITY)
        assert ids == []


class TestSearchClause:

    def test_blank_term_adds_no_clause(self):
        assert search_clause(None, User.first_name) is None
        assert search_clause("   ", User.first_name) is None

    async def test_search_is_case_insensitive(self, db, make_user):
        await make_user(UserRole.STAFF, first_name="Marigold")
        await make_user(UserRole.STAFF, first_name="Rose")
        query = apply_filters(select(User), search_clause("MARI", User.first_name, User.last_name))
        result = await db.execute(query)
        assert [u.first_name for u in result.scalars().all()] == ["Marigold"]


class TestPaginate:

    async def test_pages_and_totals(self, db, make_user):
        for _ in range(7):
            await make_user(UserRole.STAFF)
        page = await paginate(db, select(User).order_by(User.id), page=2, page_size=3)
        assert page.total == 7
        assert page.pages == 3
        assert page.page == 2
        assert len(page.items) == 3

    async def test_empty_result_has_zero_pages(self, db):
        page = await paginate(db, select(User), page=1, page_size=10)
        assert page.total == 0
        assert page.pages == 0
        assert page.items == []

    @pytest.mark.parametrize("page,page_size", [(0, 10), (-1, 10), (1, 0), (1, 101)])
    async def test_invalid_paging_is_a_validation_error(self, db, page, page_size):
        with pytest.raises(ValidationError):
            await paginate(db, select(User), page=page, page_size=page_size)

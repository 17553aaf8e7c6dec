"""
Tests for inventory stock keeping.
"""

from decimal import Decimal

import pytest

from daycare.core.exceptions import ForbiddenError, ValidationError
from daycare.schemas.enums import InventoryCategory, ItemStatus
from daycare.schemas.inventory import ItemCreate, ItemFilters, ItemUpdate
from daycare.services import InventoryService
from tests.helpers import as_actor


def crayons(**overrides) -> ItemCreate:
    data = {
        "item_name": "Crayons",
        "category": InventoryCategory.ART_SUPPLIES,
        "quantity_current": 20,
        "quantity_minimum": 5,
        "quantity_maximum": 50,
        "unit_cost": Decimal("2.50"),
        "location_room": "Art room",
    }
    data.update(overrides)
    return ItemCreate(**data)


class TestStockLevels:

    async def test_low_stock_flag_on_create(self, db, staff):
        service = InventoryService(db)
        plenty = await service.create(as_actor(staff), crayons())
        scarce = await service.create(as_actor(staff), crayons(item_name="Glue", quantity_current=5))
        assert plenty.is_low_stock is False
        assert scarce.is_low_stock is True
        assert plenty.total_value == Decimal("50.00")

    async def test_adjusting_recomputes_low_stock(self, db, staff):
        service = InventoryService(db)
        item = await service.create(as_actor(staff), crayons())

        used = await service.adjust_quantity(as_actor(staff), item.id, -16, reason="Mural")
        assert used.quantity_current == 4
        assert used.is_low_stock is True

        restocked = await service.adjust_quantity(as_actor(staff), item.id, 30)
        assert restocked.quantity_current == 34
        assert restocked.is_low_stock is False

    async def test_quantity_never_goes_negative(self, db, staff):
        service = InventoryService(db)
        item = await service.create(as_actor(staff), crayons())
        item_id, actor = item.id, as_actor(staff)

        with pytest.raises(ValidationError):
            await service.adjust_quantity(actor, item_id, -21)

        reloaded = await service.get(actor, item_id)
        assert reloaded.quantity_current == 20

    async def test_raising_minimum_flags_item(self, db, staff):
        service = InventoryService(db)
        item = await service.create(as_actor(staff), crayons())
        updated = await service.update(as_actor(staff), item.id, ItemUpdate(quantity_minimum=25))
        assert updated.is_low_stock is True

    async def test_maximum_below_minimum(self, db, staff):
        with pytest.raises(ValidationError):
            await InventoryService(db).create(as_actor(staff), crayons(quantity_maximum=2))

    async def test_low_stock_list_skips_inactive_items(self, db, staff):
        service = InventoryService(db)
        await service.create(as_actor(staff), crayons(item_name="Glue", quantity_current=1))
        await service.create(
            as_actor(staff), crayons(item_name="Old paint", quantity_current=0, status=ItemStatus.DISPOSED)
        )
        await service.create(as_actor(staff), crayons())

        items = await service.low_stock(as_actor(staff))
        assert [item.item_name for item in items] == ["Glue"]

        page = await service.list(as_actor(staff), ItemFilters(low_stock=True))
        assert page.total == 2


class TestAccess:

    async def test_teacher_reads_but_cannot_change(self, db, staff, teacher):
        service = InventoryService(db)
        item = await service.create(as_actor(staff), crayons())
        assert (await service.get(as_actor(teacher), item.id)).item_name == "Crayons"
        with pytest.raises(ForbiddenError):
            await service.adjust_quantity(as_actor(teacher), item.id, -1)

    async def test_parent_has_no_access(self, db, parent):
        with pytest.raises(ForbiddenError):
            await InventoryService(db).list(as_actor(parent))

    async def test_teacher_cannot_see_low_stock_report(self, db, teacher):
        with pytest.raises(ForbiddenError):
            await InventoryService(db).low_stock(as_actor(teacher))

    async def test_staff_cannot_delete(self, db, admin, staff):
        service = InventoryService(db)
        item = await service.create(as_actor(staff), crayons())
        item_id, boss = item.id, as_actor(admin)
        with pytest.raises(ForbiddenError):
            await service.delete(as_actor(staff), item_id)
        await service.delete(boss, item_id)
        page = await service.list(boss)
        assert page.total == 0

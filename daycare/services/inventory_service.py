# daycare/services/inventory_service.py
from typing import List, Optional

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, project_update
from daycare.core.scoping import Page, search_clause
from daycare.models import InventoryItem
from daycare.schemas.enums import ItemStatus
from daycare.schemas.inventory import ItemCreate, ItemFilters, ItemUpdate
from daycare.services.base_service import BaseService

_QUANTITY_FIELDS = {"quantity_current", "quantity_minimum", "quantity_maximum"}


def _check_bounds(item: InventoryItem) -> None:
    if item.quantity_maximum is not None and item.quantity_maximum < item.quantity_minimum:
        raise ValidationError("Maximum quantity cannot be below minimum quantity")


class InventoryService(BaseService):
    model = InventoryItem
    kind = ResourceKind.INVENTORY_ITEM
    label = "Inventory item"
    json_fields = ("supplier",)

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[ItemFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or ItemFilters()
        clauses = [
            search_clause(
                filters.search,
                InventoryItem.item_name,
                InventoryItem.brand,
                InventoryItem.description,
            )
        ]
        if filters.category is not None:
            clauses.append(InventoryItem.category == filters.category)
        if filters.status is not None:
            clauses.append(InventoryItem.status == filters.status)
        if filters.condition is not None:
            clauses.append(InventoryItem.condition == filters.condition)
        if filters.location_room:
            clauses.append(InventoryItem.location_room == filters.location_room)
        if filters.low_stock is not None:
            clauses.append(InventoryItem.is_low_stock == filters.low_stock)
        return await self.scoped_page(
            actor, clauses, (InventoryItem.item_name, InventoryItem.id), page, page_size
        )

    async def get(self, actor: Optional[Actor], item_id: int) -> InventoryItem:
        return await self.fetch_authorized(actor, item_id, Action.READ)

    async def create(self, actor: Optional[Actor], data: ItemCreate) -> InventoryItem:
        self.authorize(actor, Action.CREATE)
        async with self.transaction():
            item = InventoryItem(**self.dump(data), created_by=actor.id, last_updated_by=actor.id)
            _check_bounds(item)
            item.recompute_low_stock()
            self.db.add(item)
            await self.db.flush()
            item_id = item.id
        logger.info(f"Added inventory item {item_id}", extra={"actor_id": actor.id})
        return await self.fetch(item_id)

    async def update(self, actor: Optional[Actor], item_id: int, data: ItemUpdate) -> InventoryItem:
        async with self.transaction():
            item = await self.fetch_authorized(actor, item_id, Action.UPDATE, lock=True)
            changes = project_update(actor, self.kind, self.dump(data, partial=True))
            self.apply_changes(item, changes)
            _check_bounds(item)
            if _QUANTITY_FIELDS & changes.keys():
                item.recompute_low_stock()
            item.last_updated_by = actor.id
        return await self.fetch(item_id)

    async def adjust_quantity(
        self,
        actor: Optional[Actor],
        item_id: int,
        delta: int,
        reason: Optional[str] = None,
    ) -> InventoryItem:
        async with self.transaction():
            item = await self.fetch_authorized(actor, item_id, Action.UPDATE, lock=True)
            new_quantity = item.quantity_current + delta
            if new_quantity < 0:
                raise ValidationError(
                    "Quantity cannot go below zero",
                    details={"quantity_current": item.quantity_current, "delta": delta},
                )
            item.quantity_current = new_quantity
            item.recompute_low_stock()
            item.last_updated_by = actor.id
        logger.info(
            f"Adjusted inventory item {item_id} by {delta}" + (f": {reason}" if reason else ""),
            extra={"actor_id": actor.id},
        )
        return await self.fetch(item_id)

    async def delete(self, actor: Optional[Actor], item_id: int) -> None:
        async with self.transaction():
            item = await self.fetch_authorized(actor, item_id, Action.DELETE, lock=True)
            await self.db.delete(item)
        logger.info(f"Deleted inventory item {item_id}", extra={"actor_id": actor.id})

    async def low_stock(self, actor: Optional[Actor]) -> List[InventoryItem]:
        """Active items at or below their minimum quantity"""
        return await self.scoped_all(
            actor,
            [InventoryItem.is_low_stock.is_(True), InventoryItem.status == ItemStatus.ACTIVE],
            action=Action.REPORT,
            order_by=(InventoryItem.item_name, InventoryItem.id),
        )

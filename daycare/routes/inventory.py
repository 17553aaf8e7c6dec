# daycare/routes/inventory.py
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_current_actor, get_inventory_service
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond, serialize
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.schemas.inventory import ItemCreate, ItemFilters, ItemResponse, ItemUpdate, QuantityAdjustment
from daycare.services import InventoryService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[ItemResponse]])
async def list_items(
    filters: Annotated[ItemFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(ItemResponse, result))


@router.get("/low-stock", response_model=ApiResponse[List[ItemResponse]])
async def low_stock_items(
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    return respond(serialize(ItemResponse, await service.low_stock(actor)))


@router.get("/{item_id}", response_model=ApiResponse[ItemResponse])
async def get_item(
    item_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    return respond(ItemResponse.model_validate(await service.get(actor, item_id)))


@router.post("", response_model=ApiResponse[ItemResponse], status_code=201)
async def create_item(
    data: ItemCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    item = await service.create(actor, data)
    return respond(ItemResponse.model_validate(item), "Inventory item created successfully")


@router.put("/{item_id}", response_model=ApiResponse[ItemResponse])
async def update_item(
    item_id: int,
    data: ItemUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    item = await service.update(actor, item_id, data)
    return respond(ItemResponse.model_validate(item), "Inventory item updated successfully")


@router.patch("/{item_id}/quantity", response_model=ApiResponse[ItemResponse])
async def adjust_quantity(
    item_id: int,
    data: QuantityAdjustment,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    item = await service.adjust_quantity(actor, item_id, data.delta, data.reason)
    return respond(ItemResponse.model_validate(item), "Quantity updated successfully")


@router.delete("/{item_id}", response_model=ApiResponse[None])
async def delete_item(
    item_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: InventoryService = Depends(get_inventory_service),
):
    await service.delete(actor, item_id)
    return respond(message="Inventory item deleted successfully")

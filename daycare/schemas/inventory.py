# daycare/schemas/inventory.py
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from .common import ORMModel, PageParams
from .enums import InventoryCategory, InventoryUnit, ItemCondition, ItemStatus


class Supplier(BaseModel):
    name: str
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ItemCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=100)
    category: InventoryCategory
    description: Optional[str] = Field(None, max_length=500)
    brand: Optional[str] = Field(None, max_length=100)
    quantity_current: int = Field(..., ge=0)
    quantity_minimum: int = Field(0, ge=0)
    quantity_maximum: Optional[int] = Field(None, ge=0)
    unit: InventoryUnit = InventoryUnit.PIECES
    location_room: Optional[str] = Field(None, max_length=50)
    location_shelf: Optional[str] = Field(None, max_length=50)
    condition: ItemCondition = ItemCondition.GOOD
    status: ItemStatus = ItemStatus.ACTIVE
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[Supplier] = None
    notes: Optional[str] = None


class ItemUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[InventoryCategory] = None
    description: Optional[str] = Field(None, max_length=500)
    brand: Optional[str] = Field(None, max_length=100)
    quantity_current: Optional[int] = Field(None, ge=0)
    quantity_minimum: Optional[int] = Field(None, ge=0)
    quantity_maximum: Optional[int] = Field(None, ge=0)
    unit: Optional[InventoryUnit] = None
    location_room: Optional[str] = Field(None, max_length=50)
    location_shelf: Optional[str] = Field(None, max_length=50)
    condition: Optional[ItemCondition] = None
    status: Optional[ItemStatus] = None
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[Supplier] = None
    notes: Optional[str] = None


class QuantityAdjustment(BaseModel):
    delta: int = Field(..., description="Positive to restock, negative to consume")
    reason: Optional[str] = None


class ItemFilters(PageParams):
    search: Optional[str] = Field(None, description="Matches item name, brand or description")
    category: Optional[InventoryCategory] = None
    status: Optional[ItemStatus] = None
    condition: Optional[ItemCondition] = None
    location_room: Optional[str] = None
    low_stock: Optional[bool] = None


class ItemResponse(ORMModel):
    id: int
    item_name: str
    category: InventoryCategory
    description: Optional[str] = None
    brand: Optional[str] = None
    quantity_current: int
    quantity_minimum: int
    quantity_maximum: Optional[int] = None
    unit: InventoryUnit
    location_room: Optional[str] = None
    location_shelf: Optional[str] = None
    condition: ItemCondition
    status: ItemStatus
    unit_cost: Optional[Decimal] = None
    total_value: Decimal
    supplier: Optional[Supplier] = None
    is_low_stock: bool
    notes: Optional[str] = None
    created_by: Optional[int] = None
    last_updated_by: Optional[int] = None
    updated_at: datetime

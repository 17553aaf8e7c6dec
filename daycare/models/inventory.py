from decimal import Decimal
from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, Numeric, JSON
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import InventoryCategory, InventoryUnit, ItemCondition, ItemStatus


class InventoryItem(TimestampMixin, Base):
    __tablename__ = "inventory_items"

    item_name = Column(String(100), nullable=False, index=True)
    category = Column(enum_column(InventoryCategory), nullable=False, index=True)
    description = Column(Text, nullable=True)
    brand = Column(String(100), nullable=True)

    quantity_current = Column(Integer, nullable=False, default=0)
    quantity_minimum = Column(Integer, nullable=False, default=0)
    quantity_maximum = Column(Integer, nullable=True)
    unit = Column(enum_column(InventoryUnit), default=InventoryUnit.PIECES, nullable=False)

    location_room = Column(String(50), nullable=True, index=True)
    location_shelf = Column(String(50), nullable=True)

    condition = Column(enum_column(ItemCondition), default=ItemCondition.GOOD, nullable=False)
    status = Column(enum_column(ItemStatus), default=ItemStatus.ACTIVE, nullable=False, index=True)
    unit_cost = Column(Numeric(10, 2), nullable=True)
    supplier = Column(JSON, nullable=True)

    # Derived from the quantities; never written directly
    is_low_stock = Column(Boolean, default=False, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    last_updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def recompute_low_stock(self) -> bool:
        self.is_low_stock = (self.quantity_current or 0) <= (self.quantity_minimum or 0)
        return self.is_low_stock

    @property
    def total_value(self) -> Decimal:
        if self.unit_cost is None:
            return Decimal("0")
        return Decimal(self.quantity_current or 0) * Decimal(self.unit_cost)

    def __repr__(self):
        return f"<InventoryItem(id={self.id}, name={self.item_name}, qty={self.quantity_current})>"

"""
Data contracts for local inventory records and Shopify payloads.

Shopify shapes are parsed straight from the Admin API JSON; unknown keys are
ignored so API version bumps that add fields do not break parsing.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import settings


class InventoryFields(BaseModel):
    """Editable fields of an inventory record (everything the store does not assign)."""

    product_name: str = ""
    local_name: str = ""
    sku: str = ""
    sellable_stock: int = Field(default=0, ge=0)
    unusable_stock: int = Field(default=0, ge=0)
    hold_stock: int = Field(default=0, ge=0)
    design: str = ""
    color: str = ""
    supplier: str = ""
    reorder_level: int = Field(default=settings.DEFAULT_REORDER_LEVEL, ge=0)

    @field_validator(
        "product_name", "local_name", "sku", "design", "color", "supplier", mode="before"
    )
    @classmethod
    def _none_to_blank(cls, value):
        return "" if value is None else value


class InventoryRecord(InventoryFields):
    """A stored SKU record. `version` increments on every write."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    version: int = 1
    created_at: datetime | None = None

    @property
    def total(self) -> int:
        return self.sellable_stock + self.unusable_stock + self.hold_stock

    def editable_fields(self) -> InventoryFields:
        return InventoryFields(**self.model_dump(include=set(InventoryFields.model_fields)))


class StorefrontVariant(BaseModel):
    id: int | None = None
    sku: str | None = None
    inventory_quantity: int = 0
    inventory_item_id: int | None = None


class StorefrontProduct(BaseModel):
    id: int
    title: str = ""
    product_type: str | None = None
    variants: list[StorefrontVariant] = Field(default_factory=list)


class StorefrontLineItem(BaseModel):
    sku: str | None = None
    name: str = ""
    quantity: int = 0


class StorefrontOrder(BaseModel):
    id: int
    name: str = ""
    created_at: datetime | None = None
    line_items: list[StorefrontLineItem] = Field(default_factory=list)


class StorefrontLocation(BaseModel):
    id: int
    name: str = ""


class SyncState(BaseModel):
    """
    Bookkeeping carried between sync runs.

    Only the latest successful catalog import / order sync time is kept; the
    caller persists it (see core.state).
    """

    last_sync_time: datetime | None = None

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

AdjustmentType = Literal["ADD", "REMOVE", "REPLACE"]


class InventoryItemRead(BaseModel):
    """Product master row; sku doubles as the barcode value."""
    id: UUID = Field(..., description="Item ID")
    sku: str = Field(..., description="SKU / barcode")
    item_name: str = Field(..., description="Item name")
    category: Optional[str] = Field(None)
    product_class: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    size: Optional[str] = Field(None)
    brand: Optional[str] = Field(None)
    uom: str = Field("pcs")
    unit_price: Optional[float] = Field(None)
    current_stock: float = Field(0)
    image_url: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class InventoryItemCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=100)
    item_name: str = Field(..., min_length=1)
    category: Optional[str] = Field(None)
    product_class: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    size: Optional[str] = Field(None)
    brand: Optional[str] = Field(None)
    uom: str = Field("pcs")
    unit_price: Optional[float] = Field(None, ge=0)
    current_stock: float = Field(0, ge=0)


class InventoryItemUpdate(BaseModel):
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    item_name: Optional[str] = Field(None)
    category: Optional[str] = Field(None)
    product_class: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    size: Optional[str] = Field(None)
    brand: Optional[str] = Field(None)
    uom: Optional[str] = Field(None)
    unit_price: Optional[float] = Field(None, ge=0)


class AdjustmentReasonRead(BaseModel):
    id: UUID
    reason_name: str
    description: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True


class AdjustmentReasonCreate(BaseModel):
    reason_name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    is_active: bool = Field(True)


class AdjustmentLineIn(BaseModel):
    item_id: UUID = Field(..., description="Inventory item")
    quantity: float = Field(..., ge=0, description="Quantity to add/remove, or the new stock for REPLACE")


class AdjustmentCreate(BaseModel):
    adjustment_type: AdjustmentType = Field(..., description="ADD, REMOVE or REPLACE")
    reason_id: Optional[UUID] = Field(None)
    custom_reason: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    items: List[AdjustmentLineIn] = Field(..., min_length=1)


class AdjustmentItemRead(BaseModel):
    item_id: UUID
    sku: str
    item_name: str
    quantity_before: float
    adjustment_quantity: float
    quantity_after: float
    replace_quantity: Optional[float] = None
    unit: str

    class Config:
        from_attributes = True


class AdjustmentRead(BaseModel):
    id: UUID
    adjustment_type: str
    reason_id: Optional[UUID] = None
    custom_reason: Optional[str] = None
    notes: Optional[str] = None
    adjusted_by_user_id: Optional[UUID] = None
    adjustment_date: datetime
    status: str
    items: List[AdjustmentItemRead] = Field(default_factory=list)

    class Config:
        from_attributes = True


class InventoryLogRead(BaseModel):
    id: UUID
    item_type: str
    item_id: Optional[UUID] = None
    item_name: str
    item_code: Optional[str] = None
    quantity: float
    old_quantity: Optional[float] = None
    new_quantity: Optional[float] = None
    unit: Optional[str] = None
    action: str
    reference_type: Optional[str] = None
    reference_id: Optional[UUID] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

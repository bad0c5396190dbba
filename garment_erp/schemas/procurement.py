from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

PoStatus = Literal["draft", "sent", "partially_received", "received", "cancelled"]
ItemType = Literal["fabric", "item"]
QualityStatus = Literal["pending", "approved", "rejected", "damaged"]


class PurchaseOrderItemRead(BaseModel):
    id: UUID
    item_type: str
    item_id: Optional[UUID] = None
    item_name: str
    quantity: float
    unit: Optional[str] = None
    unit_price: float
    gst_rate: float
    total_price: float

    class Config:
        from_attributes = True


class PurchaseOrderItemIn(BaseModel):
    item_type: ItemType = Field("item")
    item_id: Optional[UUID] = Field(None, description="Fabric or inventory item id")
    item_name: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    unit: Optional[str] = Field(None)
    unit_price: float = Field(0, ge=0)
    gst_rate: float = Field(0, ge=0)


class PurchaseOrderRead(BaseModel):
    """Purchase order with lines and computed totals."""
    id: UUID = Field(..., description="PO ID")
    po_number: str = Field(..., description="PO number")
    supplier_id: UUID = Field(..., description="Supplier")
    order_date: date
    expected_date: Optional[date] = None
    status: str
    subtotal: float = 0
    tax_amount: float = 0
    total_amount: float = 0
    notes: Optional[str] = None
    items: List[PurchaseOrderItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderCreate(BaseModel):
    supplier_id: UUID = Field(..., description="Supplier")
    po_number: Optional[str] = Field(None, description="Generated when omitted")
    order_date: Optional[date] = Field(None)
    expected_date: Optional[date] = Field(None)
    status: PoStatus = Field("draft")
    notes: Optional[str] = Field(None)
    items: List[PurchaseOrderItemIn] = Field(..., min_length=1)


class PurchaseOrderUpdate(BaseModel):
    expected_date: Optional[date] = Field(None)
    status: Optional[PoStatus] = Field(None)
    notes: Optional[str] = Field(None)
    items: Optional[List[PurchaseOrderItemIn]] = Field(None, description="Replaces the lines when given")


class GrnItemRead(BaseModel):
    id: UUID
    po_item_id: Optional[UUID] = None
    item_type: str
    item_id: Optional[UUID] = None
    item_name: str
    unit: Optional[str] = None
    ordered_quantity: float
    received_quantity: float
    approved_quantity: float
    rejected_quantity: float
    quality_status: str
    quality_notes: Optional[str] = None
    stock_posted: bool

    class Config:
        from_attributes = True


class GrnItemIn(BaseModel):
    po_item_id: Optional[UUID] = Field(None, description="PO line being received")
    item_type: ItemType = Field("item")
    item_id: Optional[UUID] = Field(None)
    item_name: Optional[str] = Field(None, description="Taken from the PO line when omitted")
    unit: Optional[str] = Field(None)
    ordered_quantity: Optional[float] = Field(None, ge=0)
    received_quantity: float = Field(..., ge=0)


class GrnRead(BaseModel):
    """Goods receipt note."""
    id: UUID
    grn_number: str
    purchase_order_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    received_date: date
    status: str
    received_by_name: Optional[str] = None
    notes: Optional[str] = None
    items: List[GrnItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GrnCreate(BaseModel):
    purchase_order_id: Optional[UUID] = Field(None)
    supplier_id: Optional[UUID] = Field(None, description="Taken from the PO when omitted")
    received_date: Optional[date] = Field(None)
    received_by_name: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    items: List[GrnItemIn] = Field(..., min_length=1)


class GrnInspectionItem(BaseModel):
    grn_item_id: UUID
    quality_status: QualityStatus
    approved_quantity: Optional[float] = Field(None, ge=0)
    rejected_quantity: Optional[float] = Field(None, ge=0)
    quality_notes: Optional[str] = Field(None)


class GrnInspectionRequest(BaseModel):
    items: List[GrnInspectionItem] = Field(..., min_length=1)

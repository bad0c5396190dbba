from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

DispatchStatus = Literal["pending", "packed", "shipped", "delivered"]


class DispatchItemRead(BaseModel):
    size_name: str
    quantity: int

    class Config:
        from_attributes = True


class DispatchItemIn(BaseModel):
    size_name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)


class DispatchRead(BaseModel):
    """Dispatch of QC-approved pieces of an order."""
    id: UUID
    dispatch_number: str = Field(..., description="DSP-yyyymmdd-nnn")
    order_id: UUID
    dispatch_date: date
    status: str
    courier_name: Optional[str] = None
    tracking_number: Optional[str] = None
    delivery_address: Optional[str] = None
    estimated_delivery: Optional[date] = None
    actual_delivery: Optional[date] = None
    notes: Optional[str] = None
    items: List[DispatchItemRead] = Field(default_factory=list)
    total_quantity: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DispatchCreate(BaseModel):
    order_id: UUID
    dispatch_date: Optional[date] = Field(None)
    courier_name: Optional[str] = Field(None)
    tracking_number: Optional[str] = Field(None)
    delivery_address: Optional[str] = Field(None, description="Defaults to the customer's address")
    estimated_delivery: Optional[date] = Field(None)
    notes: Optional[str] = Field(None)
    items: List[DispatchItemIn] = Field(..., min_length=1)


class DispatchStatusUpdate(BaseModel):
    status: DispatchStatus
    courier_name: Optional[str] = Field(None)
    tracking_number: Optional[str] = Field(None)


class DispatchableOrder(BaseModel):
    """How many approved pieces of an order are still available to ship."""
    order_id: UUID
    approved_quantity: int = 0
    dispatched_quantity: int = 0
    available_quantity: int = 0

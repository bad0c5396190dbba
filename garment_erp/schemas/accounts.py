from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

InvoiceStatus = Literal["draft", "sent", "paid", "partially_paid", "overdue", "cancelled"]


class InvoiceItemRead(BaseModel):
    id: UUID
    description: str
    hsn_code: Optional[str] = None
    quantity: float
    unit_price: float
    total_price: float
    gst_rate: float
    gst_amount: float

    class Config:
        from_attributes = True


class InvoiceItemIn(BaseModel):
    description: str = Field(..., min_length=1)
    hsn_code: Optional[str] = Field(None)
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(0, ge=0)
    gst_rate: float = Field(0, ge=0)


class InvoiceRead(BaseModel):
    """Invoice with lines and computed totals."""
    id: UUID = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="Invoice number, e.g. TUC/IN/007")
    customer_id: UUID
    order_id: Optional[UUID] = None
    invoice_date: date
    due_date: Optional[date] = None
    status: str
    subtotal: float = 0
    tax_amount: float = 0
    total_amount: float = 0
    paid_amount: float = 0
    balance_amount: float = 0
    notes: Optional[str] = None
    items: List[InvoiceItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    """Lines are copied from the order when order_id is given and items are omitted."""
    customer_id: Optional[UUID] = Field(None, description="Taken from the order when omitted")
    order_id: Optional[UUID] = Field(None)
    invoice_date: Optional[date] = Field(None)
    due_date: Optional[date] = Field(None)
    status: InvoiceStatus = Field("draft")
    notes: Optional[str] = Field(None)
    items: Optional[List[InvoiceItemIn]] = Field(None)


class InvoiceUpdate(BaseModel):
    due_date: Optional[date] = Field(None)
    status: Optional[InvoiceStatus] = Field(None)
    notes: Optional[str] = Field(None)
    items: Optional[List[InvoiceItemIn]] = Field(None, description="Replaces the lines when given")


class PaymentRequest(BaseModel):
    amount: float = Field(..., gt=0, description="Amount received")


class GstBreakdownRow(BaseModel):
    gst_rate: float
    taxable_value: float
    gst_amount: float


class GstBreakdown(BaseModel):
    invoice_id: UUID
    rows: List[GstBreakdownRow] = Field(default_factory=list)
    subtotal: float = 0
    tax_amount: float = 0
    total_amount: float = 0

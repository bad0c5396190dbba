from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from garment_erp.db.models.sales import DEFAULT_ORDER_GST_RATE

CustomerType = Literal["Retail", "Wholesale", "Corporate", "B2B", "B2C", "Enterprise"]
CustomerTier = Literal["bronze", "silver", "gold", "platinum"]
OrderStatus = Literal["pending", "confirmed", "in_production", "quality_check", "completed", "cancelled"]


class CustomerRead(BaseModel):
    """Customer read model."""
    id: UUID = Field(..., description="Customer ID")
    company_name: str = Field(..., description="Company name")
    contact_person: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    city: Optional[str] = Field(None)
    state: Optional[str] = Field(None)
    pincode: Optional[str] = Field(None)
    gstin: Optional[str] = Field(None)
    pan: Optional[str] = Field(None)
    customer_type: str = Field("Retail")
    customer_tier: str = Field("bronze")
    credit_limit: float = Field(0)
    outstanding_amount: float = Field(0)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class CustomerCreate(BaseModel):
    company_name: str = Field(..., min_length=1)
    contact_person: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    city: Optional[str] = Field(None)
    state: Optional[str] = Field(None)
    pincode: Optional[str] = Field(None)
    gstin: Optional[str] = Field(None)
    pan: Optional[str] = Field(None)
    customer_type: CustomerType = Field("Retail")
    customer_tier: CustomerTier = Field("bronze")
    credit_limit: float = Field(0, ge=0)


class CustomerUpdate(BaseModel):
    company_name: Optional[str] = Field(None)
    contact_person: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    city: Optional[str] = Field(None)
    state: Optional[str] = Field(None)
    pincode: Optional[str] = Field(None)
    gstin: Optional[str] = Field(None)
    pan: Optional[str] = Field(None)
    customer_type: Optional[CustomerType] = Field(None)
    customer_tier: Optional[CustomerTier] = Field(None)
    credit_limit: Optional[float] = Field(None, ge=0)
    outstanding_amount: Optional[float] = Field(None)


class OrderItemRead(BaseModel):
    id: UUID = Field(..., description="Order item ID")
    order_id: UUID = Field(..., description="Order ID")
    product_category_id: Optional[UUID] = Field(None)
    product_description: str = Field(..., description="What is being made")
    fabric_id: Optional[UUID] = Field(None)
    color: Optional[str] = Field(None)
    gsm: Optional[int] = Field(None)
    size_type_id: Optional[UUID] = Field(None)
    sizes_quantities: Dict[str, int] = Field(default_factory=dict)
    size_prices: Optional[Dict[str, float]] = Field(None)
    quantity: int = Field(0)
    unit_price: float = Field(0)
    total_price: float = Field(0)
    gst_rate: Optional[float] = Field(None)
    remarks: Optional[str] = Field(None)
    image_urls: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True


class OrderItemCreate(BaseModel):
    product_category_id: Optional[UUID] = Field(None)
    product_description: str = Field(..., min_length=1)
    fabric_id: Optional[UUID] = Field(None)
    color: Optional[str] = Field(None)
    gsm: Optional[int] = Field(None, ge=0)
    size_type_id: Optional[UUID] = Field(None)
    sizes_quantities: Dict[str, int] = Field(..., description="Pieces per size")
    size_prices: Optional[Dict[str, float]] = Field(None, description="Per-size price where it differs from unit_price")
    unit_price: float = Field(0, ge=0)
    gst_rate: Optional[float] = Field(None, ge=0)
    remarks: Optional[str] = Field(None)
    image_urls: List[str] = Field(default_factory=list)


class OrderRead(BaseModel):
    """Order with its items and computed totals."""
    id: UUID = Field(..., description="Order ID")
    order_number: str = Field(..., description="Order number, e.g. TUC/25-26/JUL/004")
    customer_id: UUID = Field(..., description="Customer ID")
    order_date: date = Field(..., description="Order date")
    expected_delivery_date: Optional[date] = Field(None)
    status: str = Field(..., description="Order status")
    sales_manager: Optional[str] = Field(None)
    gst_rate: float = Field(0)
    total_amount: float = Field(0)
    tax_amount: float = Field(0)
    final_amount: float = Field(0)
    advance_amount: float = Field(0)
    balance_amount: float = Field(0)
    notes: Optional[str] = Field(None)
    items: List[OrderItemRead] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class OrderCreate(BaseModel):
    customer_id: UUID = Field(..., description="Customer ID")
    order_date: Optional[date] = Field(None, description="Defaults to today")
    expected_delivery_date: Optional[date] = Field(None)
    status: OrderStatus = Field("pending")
    sales_manager: Optional[str] = Field(None)
    gst_rate: float = Field(DEFAULT_ORDER_GST_RATE, ge=0, description="Order GST percentage")
    advance_amount: float = Field(0, ge=0)
    notes: Optional[str] = Field(None)
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderUpdate(BaseModel):
    """Header changes; when items are given they replace the existing ones."""
    customer_id: Optional[UUID] = Field(None)
    order_date: Optional[date] = Field(None)
    expected_delivery_date: Optional[date] = Field(None)
    sales_manager: Optional[str] = Field(None)
    gst_rate: Optional[float] = Field(None, ge=0)
    advance_amount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None)
    items: Optional[List[OrderItemCreate]] = Field(None)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus = Field(..., description="New status")


class SizeQuantity(BaseModel):
    size_name: str = Field(..., description="Size")
    quantity: int = Field(..., description="Pieces")


class OrderSizesRead(BaseModel):
    order_id: UUID
    total_quantity: int = Field(0)
    sizes: List[SizeQuantity] = Field(default_factory=list, description="Ordered sizes, sorted")

from __future__ import annotations

from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garment_erp.db.base import Base, JSONType, Money, TimestampMixin, UUIDPkMixin

DEFAULT_ORDER_GST_RATE = 18


class Customer(UUIDPkMixin, TimestampMixin, Base):
    """Customer master (company buying garments)."""
    __tablename__ = "customers"

    company_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    contact_person: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gstin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_type: Mapped[str] = mapped_column(Text, nullable=False, default="Retail", server_default="Retail")
    customer_tier: Mapped[str] = mapped_column(Text, nullable=False, default="bronze", server_default="bronze")
    credit_limit: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    outstanding_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")


class Order(UUIDPkMixin, TimestampMixin, Base):
    """Customer order header; totals are derived from the items."""
    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    customer_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending", server_default="pending")
    sales_manager: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gst_rate: Mapped[float] = mapped_column(
        Money, nullable=False, default=DEFAULT_ORDER_GST_RATE, server_default=str(DEFAULT_ORDER_GST_RATE)
    )
    total_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    tax_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    final_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    advance_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    balance_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at",
        lazy="selectin",
    )


class OrderItem(UUIDPkMixin, TimestampMixin, Base):
    """Order line: one product in one fabric/colour with a size breakdown."""
    __tablename__ = "order_items"

    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_category_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("product_categories.id", ondelete="SET NULL"), nullable=True
    )
    product_description: Mapped[str] = mapped_column(Text, nullable=False)
    fabric_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("fabrics.id", ondelete="SET NULL"), nullable=True
    )
    color: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gsm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    size_type_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("size_types.id", ondelete="SET NULL"), nullable=True
    )
    sizes_quantities: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    size_prices: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    unit_price: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    total_price: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    gst_rate: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_urls: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)

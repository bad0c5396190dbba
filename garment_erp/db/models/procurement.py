from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garment_erp.db.base import Base, Measure, Money, TimestampMixin, UUIDPkMixin


class PurchaseOrder(UUIDPkMixin, TimestampMixin, Base):
    """Purchase order header."""
    __tablename__ = "purchase_orders"

    po_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    supplier_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft", server_default="draft")
    subtotal: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    tax_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    total_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[list["PurchaseOrderItem"]] = relationship(
        "PurchaseOrderItem", cascade="all, delete-orphan", order_by="PurchaseOrderItem.created_at", lazy="selectin"
    )


class PurchaseOrderItem(UUIDPkMixin, TimestampMixin, Base):
    """Purchase order line; item_type says whether item_id is a fabric or an inventory item."""
    __tablename__ = "purchase_order_items"

    purchase_order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_type: Mapped[str] = mapped_column(Text, nullable=False)
    item_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[float] = mapped_column(Measure, nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_price: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    gst_rate: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    total_price: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")


class GoodsReceiptNote(UUIDPkMixin, TimestampMixin, Base):
    """Goods receipt against a purchase order, inspected item by item."""
    __tablename__ = "goods_receipt_notes"

    grn_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    purchase_order_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("purchase_orders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    supplier_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    received_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft", server_default="draft")
    received_by_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[list["GrnItem"]] = relationship(
        "GrnItem", cascade="all, delete-orphan", order_by="GrnItem.created_at", lazy="selectin"
    )


class GrnItem(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "grn_items"

    grn_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("goods_receipt_notes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    po_item_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("purchase_order_items.id", ondelete="SET NULL"), nullable=True, index=True
    )
    item_type: Mapped[str] = mapped_column(Text, nullable=False)
    item_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ordered_quantity: Mapped[float] = mapped_column(Measure, nullable=False, default=0, server_default="0")
    received_quantity: Mapped[float] = mapped_column(Measure, nullable=False, default=0, server_default="0")
    approved_quantity: Mapped[float] = mapped_column(Measure, nullable=False, default=0, server_default="0")
    rejected_quantity: Mapped[float] = mapped_column(Measure, nullable=False, default=0, server_default="0")
    quality_status: Mapped[str] = mapped_column(Text, nullable=False, default="pending", server_default="pending")
    quality_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stock_posted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

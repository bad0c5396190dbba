from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garment_erp.db.base import Base, Measure, Money, TimestampMixin, UUIDPkMixin, utcnow


class InventoryItem(UUIDPkMixin, TimestampMixin, Base):
    """Stocked product or trim; the SKU doubles as the barcode payload."""
    __tablename__ = "inventory_items"

    sku: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    product_class: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    size: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    brand: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uom: Mapped[str] = mapped_column(Text, nullable=False, default="pcs", server_default="pcs")
    unit_price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    current_stock: Mapped[float] = mapped_column(Measure, nullable=False, default=0, server_default="0")
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class AdjustmentReason(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "inventory_adjustment_reasons"

    reason_name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")


class InventoryAdjustment(UUIDPkMixin, TimestampMixin, Base):
    """Manual stock correction (ADD, REMOVE or REPLACE) over one or more items."""
    __tablename__ = "inventory_adjustments"

    adjustment_type: Mapped[str] = mapped_column(Text, nullable=False)
    reason_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("inventory_adjustment_reasons.id", ondelete="SET NULL"), nullable=True
    )
    custom_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    adjusted_by_user_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    adjustment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="COMPLETED", server_default="COMPLETED")

    items: Mapped[list["InventoryAdjustmentItem"]] = relationship(
        "InventoryAdjustmentItem", cascade="all, delete-orphan", lazy="selectin"
    )


class InventoryAdjustmentItem(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "inventory_adjustment_items"

    adjustment_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("inventory_adjustments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False)
    sku: Mapped[str] = mapped_column(Text, nullable=False)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity_before: Mapped[float] = mapped_column(Measure, nullable=False)
    adjustment_quantity: Mapped[float] = mapped_column(Measure, nullable=False)
    quantity_after: Mapped[float] = mapped_column(Measure, nullable=False)
    replace_quantity: Mapped[Optional[float]] = mapped_column(Measure, nullable=True)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="pcs", server_default="pcs")


class InventoryLog(UUIDPkMixin, TimestampMixin, Base):
    """Audit trail of every stock movement (GRN, cutting, adjustment, manual)."""
    __tablename__ = "inventory_logs"

    item_type: Mapped[str] = mapped_column(Text, nullable=False)
    item_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    item_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[float] = mapped_column(Measure, nullable=False)
    old_quantity: Mapped[Optional[float]] = mapped_column(Measure, nullable=True)
    new_quantity: Mapped[Optional[float]] = mapped_column(Measure, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    reference_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

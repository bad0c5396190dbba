from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garment_erp.db.base import Base, TimestampMixin, UUIDPkMixin


class DispatchOrder(UUIDPkMixin, TimestampMixin, Base):
    """Shipment of QC-approved pieces of an order (delivery challan)."""
    __tablename__ = "dispatch_orders"

    dispatch_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    order_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    dispatch_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending", server_default="pending")
    courier_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tracking_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    delivery_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    estimated_delivery: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    actual_delivery: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[list["DispatchOrderItem"]] = relationship(
        "DispatchOrderItem", cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def total_quantity(self) -> int:
        return sum(i.quantity or 0 for i in self.items)


class DispatchOrderItem(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "dispatch_order_items"

    dispatch_order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("dispatch_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    size_name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

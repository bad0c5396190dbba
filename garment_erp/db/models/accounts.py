from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from garment_erp.db.base import Base, Measure, Money, TimestampMixin, UUIDPkMixin


class Invoice(UUIDPkMixin, TimestampMixin, Base):
    """GST tax invoice raised to a customer."""
    __tablename__ = "invoices"

    invoice_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    customer_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    order_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft", server_default="draft")
    subtotal: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    tax_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    total_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    paid_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    balance_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[list["InvoiceItem"]] = relationship(
        "InvoiceItem", cascade="all, delete-orphan", order_by="InvoiceItem.created_at", lazy="selectin"
    )


class InvoiceItem(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "invoice_items"

    invoice_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    hsn_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[float] = mapped_column(Measure, nullable=False)
    unit_price: Mapped[float] = mapped_column(Money, nullable=False)
    total_price: Mapped[float] = mapped_column(Money, nullable=False)
    gst_rate: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")
    gst_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0, server_default="0")

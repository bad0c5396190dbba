from __future__ import annotations

from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, JSONType, Measure, TimestampMixin, UUIDPkMixin


class Batch(UUIDPkMixin, TimestampMixin, Base):
    """Group of tailors that receives portions of orders for stitching."""
    __tablename__ = "batches"

    batch_name: Mapped[str] = mapped_column(Text, nullable=False)
    batch_code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    tailor_type: Mapped[str] = mapped_column(Text, nullable=False, default="single_needle", server_default="single_needle")
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    current_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    status: Mapped[str] = mapped_column(Text, nullable=False, default="active", server_default="active")
    batch_leader_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def available_capacity(self) -> int:
        return max(0, (self.max_capacity or 0) - (self.current_capacity or 0))


class OrderBatchAssignment(UUIDPkMixin, TimestampMixin, Base):
    """Portion of an order handed to a batch; per-size quantities live in the distributions."""
    __tablename__ = "order_batch_assignments"

    order_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("batches.id", ondelete="RESTRICT"), nullable=False, index=True)
    assignment_date: Mapped[date] = mapped_column(Date, nullable=False)
    assigned_by_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class OrderBatchSizeDistribution(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "order_batch_size_distributions"
    __table_args__ = (
        UniqueConstraint("order_batch_assignment_id", "size_name", name="uq_order_batch_size_distributions_assignment_size"),
    )

    order_batch_assignment_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("order_batch_assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    size_name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    picked_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class OrderCuttingAssignment(UUIDPkMixin, TimestampMixin, Base):
    """Order (or part of it) assigned to a cutting master."""
    __tablename__ = "order_cutting_assignments"

    order_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    cutting_master_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    cutting_master_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assigned_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completed_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    cut_quantities_by_size: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="assigned", server_default="assigned")
    assigned_date: Mapped[date] = mapped_column(Date, nullable=False)
    assigned_by_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class CuttingProgress(UUIDPkMixin, TimestampMixin, Base):
    """Order-level running total of pieces cut, per size."""
    __tablename__ = "cutting_progress"

    order_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    cut_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    cut_quantities_by_size: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)


class FabricUsageRecord(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "fabric_usage_records"

    order_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    fabric_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("fabrics.id", ondelete="RESTRICT"), nullable=False)
    used_quantity: Mapped[float] = mapped_column(Measure, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="meters", server_default="meters")
    cutting_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    used_by_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

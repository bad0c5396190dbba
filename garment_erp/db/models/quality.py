from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, TimestampMixin, UUIDPkMixin


class QcReview(UUIDPkMixin, TimestampMixin, Base):
    """Cumulative QC outcome for one size of one batch assignment."""
    __tablename__ = "qc_reviews"
    __table_args__ = (
        UniqueConstraint("order_batch_assignment_id", "size_name", name="uq_qc_reviews_assignment_size"),
    )

    order_batch_assignment_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("order_batch_assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    size_name: Mapped[str] = mapped_column(Text, nullable=False)
    picked_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    approved_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    rejected_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

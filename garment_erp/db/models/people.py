from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, TimestampMixin, UUIDPkMixin


class Department(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    head_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Designation(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "designations"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    department_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")


class Employee(UUIDPkMixin, TimestampMixin, Base):
    """Factory employee; cutting masters are employees with a cutting designation."""
    __tablename__ = "employees"

    employee_code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    designation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    department_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    personal_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    personal_email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    joining_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")


class Tailor(UUIDPkMixin, TimestampMixin, Base):
    """Stitching worker, optionally a member (or leader) of a batch."""
    __tablename__ = "tailors"

    tailor_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    tailor_type: Mapped[str] = mapped_column(Text, nullable=False, default="single_needle", server_default="single_needle")
    batch_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("batches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_batch_leader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    personal_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="active", server_default="active")

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, TimestampMixin, UUIDPkMixin

USER_STATUS_PENDING = "pending_approval"
USER_STATUS_APPROVED = "approved"
USER_STATUS_REJECTED = "rejected"

ROLE_ADMIN = "admin"
ROLE_SALES = "sales manager"
ROLE_PRODUCTION = "production manager"
ROLE_GRAPHICS = "graphic & printing"
ROLE_PROCUREMENT = "procurement manager"
ROLE_CUTTING = "cutting master"
ROLE_QC = "qc manager"
ROLE_DISPATCH = "packaging & dispatch manager"
ROLE_CUSTOMER = "customer"

BUSINESS_ROLES = (
    ROLE_ADMIN,
    ROLE_SALES,
    ROLE_PRODUCTION,
    ROLE_GRAPHICS,
    ROLE_PROCUREMENT,
    ROLE_CUTTING,
    ROLE_QC,
    ROLE_DISPATCH,
    ROLE_CUSTOMER,
)


class User(UUIDPkMixin, TimestampMixin, Base):
    """Application user (login identity and profile)."""
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    department: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default=USER_STATUS_PENDING, server_default=USER_STATUS_PENDING
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    is_superadmin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")


class Role(UUIDPkMixin, TimestampMixin, Base):
    """Business role (admin, cutting master, qc manager, ...)."""
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class UserRole(UUIDPkMixin, TimestampMixin, Base):
    """Association of users to roles."""
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )

    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)

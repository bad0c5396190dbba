from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, TimestampMixin, UUIDPkMixin


class SidebarItem(UUIDPkMixin, TimestampMixin, Base):
    """Navigation entry; items form a tree through parent_id."""
    __tablename__ = "sidebar_items"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parent_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("sidebar_items.id", ondelete="CASCADE"), nullable=True, index=True
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")


class RoleSidebarPermission(UUIDPkMixin, TimestampMixin, Base):
    """Sidebar visibility granted to a role."""
    __tablename__ = "role_sidebar_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "sidebar_item_id", name="uq_role_sidebar_permissions_role_item"),
    )

    role_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    sidebar_item_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("sidebar_items.id", ondelete="CASCADE"), nullable=False
    )
    can_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")


class UserSidebarPermission(UUIDPkMixin, TimestampMixin, Base):
    """Per-user sidebar permission; is_override rows replace role permissions entirely."""
    __tablename__ = "user_sidebar_permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "sidebar_item_id", name="uq_user_sidebar_permissions_user_item"),
    )

    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sidebar_item_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("sidebar_items.id", ondelete="CASCADE"), nullable=False
    )
    can_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    is_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

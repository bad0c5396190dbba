from __future__ import annotations

from typing import Iterable, List
from uuid import UUID

from sqlalchemy import delete, select

from garment_erp.db.models.navigation import RoleSidebarPermission, SidebarItem, UserSidebarPermission
from .base import CrudRepository


class SidebarRepository(CrudRepository[SidebarItem]):
    """Sidebar items and the role/user permissions attached to them."""
    model = SidebarItem
    search_columns = ("title", "url")
    order_by = ("sort_order", "title")

    async def all_items(self) -> List[SidebarItem]:
        res = await self.scalars(select(SidebarItem).order_by(SidebarItem.sort_order, SidebarItem.title))
        return list(res)

    async def role_permissions(self, role_ids: Iterable[UUID]) -> List[RoleSidebarPermission]:
        ids = list(role_ids)
        if not ids:
            return []
        res = await self.scalars(select(RoleSidebarPermission).where(RoleSidebarPermission.role_id.in_(ids)))
        return list(res)

    async def user_permissions(self, user_id: UUID) -> List[UserSidebarPermission]:
        res = await self.scalars(select(UserSidebarPermission).where(UserSidebarPermission.user_id == user_id))
        return list(res)

    async def replace_role_permissions(self, role_id: UUID, rows: Iterable[dict]) -> None:
        await self.execute(delete(RoleSidebarPermission).where(RoleSidebarPermission.role_id == role_id))
        await self.add_all(RoleSidebarPermission(role_id=role_id, **row) for row in rows)
        await self.flush()

    async def replace_user_permissions(self, user_id: UUID, rows: Iterable[dict]) -> None:
        await self.execute(delete(UserSidebarPermission).where(UserSidebarPermission.user_id == user_id))
        await self.add_all(UserSidebarPermission(user_id=user_id, **row) for row in rows)
        await self.flush()

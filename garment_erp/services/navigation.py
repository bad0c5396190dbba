from __future__ import annotations

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.cache import QueryCache, get_query_cache
from garment_erp.core.errors import BusinessRuleError, NotFoundError
from garment_erp.db.models.security import ROLE_ADMIN, User
from garment_erp.repositories.navigation import SidebarRepository
from garment_erp.repositories.security import SecurityRepository
from garment_erp.schemas.navigation import (
    SidebarNodeRead,
    SidebarPermissionEntry,
    UserSidebarPermissionEntry,
)
from garment_erp.services.base import BaseService
from garment_erp.services.permissions import build_sidebar_tree


class NavigationService(BaseService):
    """Effective sidebar per user and maintenance of role/user sidebar permissions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = SidebarRepository(session)
        self.security = SecurityRepository(session)

    # PUBLIC_INTERFACE
    async def sidebar_for(self, user: User) -> List[SidebarNodeRead]:
        """Sidebar tree for the user, cached under user_permissions."""
        key = QueryCache.build_key("user_permissions", "sidebar", user.id)

        async def _load() -> List[SidebarNodeRead]:
            roles = await self.security.list_roles_for_user(user.id)
            admin = bool(user.is_superadmin) or any(r.name == ROLE_ADMIN for r in roles)
            tree = build_sidebar_tree(
                await self.repo.all_items(),
                await self.repo.role_permissions([r.id for r in roles]),
                await self.repo.user_permissions(user.id),
                is_admin=admin,
            )
            return [SidebarNodeRead.model_validate(node) for node in tree]

        return await get_query_cache().get_or_load(key, _load, data_type="user_permissions")

    async def _check_items(self, item_ids) -> None:
        known = {item.id for item in await self.repo.all_items()}
        unknown = [str(i) for i in item_ids if i not in known]
        if unknown:
            raise BusinessRuleError("Unknown sidebar items", {"sidebar_item_ids": unknown})

    # PUBLIC_INTERFACE
    async def role_permissions(self, role_id: UUID) -> List[SidebarPermissionEntry]:
        return [SidebarPermissionEntry.model_validate(p) for p in await self.repo.role_permissions([role_id])]

    # PUBLIC_INTERFACE
    async def replace_role_permissions(
        self, role_id: UUID, entries: List[SidebarPermissionEntry]
    ) -> List[SidebarPermissionEntry]:
        """Replace the role's whole permission set."""
        if not await self.security.get_role_by_id(role_id):
            raise NotFoundError("Role not found")
        await self._check_items([e.sidebar_item_id for e in entries])
        rows = {e.sidebar_item_id: e.model_dump() for e in entries}
        await self.repo.replace_role_permissions(role_id, rows.values())
        await self.repo.commit()
        self.invalidate("user_permissions")
        return await self.role_permissions(role_id)

    # PUBLIC_INTERFACE
    async def user_permissions(self, user_id: UUID) -> List[UserSidebarPermissionEntry]:
        return [UserSidebarPermissionEntry.model_validate(p) for p in await self.repo.user_permissions(user_id)]

    # PUBLIC_INTERFACE
    async def replace_user_permissions(
        self, user_id: UUID, entries: List[UserSidebarPermissionEntry]
    ) -> List[UserSidebarPermissionEntry]:
        """Replace the user's personal permissions; an empty list restores role permissions."""
        if not await self.security.get_user_by_id(user_id):
            raise NotFoundError("User not found")
        await self._check_items([e.sidebar_item_id for e in entries])
        rows = {e.sidebar_item_id: e.model_dump() for e in entries}
        await self.repo.replace_user_permissions(user_id, rows.values())
        await self.repo.commit()
        self.invalidate("user_permissions")
        return await self.user_permissions(user_id)

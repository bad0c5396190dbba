from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select

from garment_erp.db.models.security import Role, User, UserRole
from .base import BaseRepository


class SecurityRepository(BaseRepository):
    """Repository for user/role management."""

    # Users
    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def count_users(self) -> int:
        stmt = select(func.count(User.id))
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def list_users(
        self,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[User]:
        stmt = select(User)
        if status:
            stmt = stmt.where(User.status == status)
        if search:
            like = f"%{search.strip()}%"
            stmt = stmt.where(or_(User.email.ilike(like), User.full_name.ilike(like)))
        stmt = stmt.order_by(User.created_at.desc()).offset(offset).limit(limit)
        result = await self.scalars(stmt)
        return list(result)

    async def create_user(
        self,
        *,
        email: str,
        full_name: Optional[str],
        hashed_password: str,
        status: str,
        phone: Optional[str] = None,
        department: Optional[str] = None,
        is_active: bool = True,
        is_superadmin: bool = False,
    ) -> User:
        user = User(
            email=email.strip().lower(),
            full_name=full_name,
            phone=phone,
            department=department,
            hashed_password=hashed_password,
            status=status,
            is_active=is_active,
            is_superadmin=is_superadmin,
        )
        await self.add(user)
        await self.flush()
        return user

    async def delete_user(self, user: User) -> None:
        await self.session.delete(user)
        await self.flush()

    async def list_roles_for_user(self, user_id: UUID) -> List[Role]:
        stmt = (
            select(Role)
            .join(UserRole, Role.id == UserRole.role_id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        result = await self.scalars(stmt)
        return list(result)

    async def role_names_for_user(self, user_id: UUID) -> List[str]:
        return [r.name for r in await self.list_roles_for_user(user_id)]

    # Roles
    async def list_roles(self, limit: int = 100, offset: int = 0) -> List[Role]:
        stmt = select(Role).order_by(Role.name).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def get_role_by_id(self, role_id: UUID) -> Optional[Role]:
        stmt = select(Role).where(Role.id == role_id)
        return await self.scalar_one_or_none(stmt)

    async def get_role_by_name(self, name: str) -> Optional[Role]:
        stmt = select(Role).where(func.lower(Role.name) == name.strip().lower())
        return await self.scalar_one_or_none(stmt)

    async def create_role(self, name: str, description: Optional[str] = None) -> Role:
        role = Role(name=name.strip().lower(), description=description)
        await self.add(role)
        await self.flush()
        return role

    async def delete_role(self, role: Role) -> None:
        await self.session.delete(role)
        await self.flush()

    # Associations
    async def get_user_role(self, user_id: UUID, role_id: UUID) -> Optional[UserRole]:
        stmt = select(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        return await self.scalar_one_or_none(stmt)

    async def assign_role_to_user(self, user_id: UUID, role_id: UUID) -> None:
        if await self.get_user_role(user_id, role_id):
            return
        await self.add(UserRole(user_id=user_id, role_id=role_id))
        await self.flush()

    async def remove_role_from_user(self, user_id: UUID, role_id: UUID) -> None:
        stmt = delete(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        await self.execute(stmt)

    async def clear_roles_for_user(self, user_id: UUID) -> None:
        await self.execute(delete(UserRole).where(UserRole.user_id == user_id))

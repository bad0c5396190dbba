from __future__ import annotations

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from garment_erp.core.security import get_password_hash, verify_password
from garment_erp.db.models.security import (
    ROLE_ADMIN,
    USER_STATUS_APPROVED,
    USER_STATUS_PENDING,
    USER_STATUS_REJECTED,
    User,
)
from garment_erp.repositories.security import SecurityRepository
from garment_erp.schemas.auth import RegisterRequest, UserCreate, UserRead, UserUpdate
from garment_erp.services.base import BaseService

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


class UserAdminService(BaseService):
    """
    Account lifecycle: self registration, admin approval and user maintenance.

    Every insert/update/delete of a user is pushed to subscribers of the
    users change feed.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = SecurityRepository(session)

    async def to_read(self, user: User) -> UserRead:
        roles = await self.repo.role_names_for_user(user.id)
        return UserRead.model_validate(user).model_copy(update={"roles": roles})

    async def _get(self, user_id: UUID) -> User:
        user = await self.repo.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", {"user_id": str(user_id)})
        return user

    async def _set_roles(self, user_id: UUID, role_names: Iterable[str]) -> None:
        await self.repo.clear_roles_for_user(user_id)
        for name in role_names:
            role = await self.repo.get_role_by_name(name)
            if not role:
                raise BusinessRuleError(f"Unknown role: {name}", {"role": name})
            await self.repo.assign_role_to_user(user_id, role.id)

    async def _after_write(self, event: str, user: User) -> None:
        self.invalidate("user_profile", "user_permissions")
        await self.publish_change(USERS_TABLE, event, user)

    # PUBLIC_INTERFACE
    async def register(self, payload: RegisterRequest) -> User:
        """
        Create a self-registered account in pending_approval.

        The very first account becomes an approved admin so the system can be
        bootstrapped.
        """
        if await self.repo.get_user_by_email(payload.email):
            raise ConflictError("User with this email already exists")

        first_user = await self.repo.count_users() == 0
        user = await self.repo.create_user(
            email=payload.email,
            full_name=payload.full_name,
            phone=payload.phone,
            department=payload.department,
            hashed_password=get_password_hash(payload.password),
            status=USER_STATUS_APPROVED if first_user else USER_STATUS_PENDING,
        )
        if first_user:
            role = await self.repo.get_role_by_name(ROLE_ADMIN)
            if not role:
                role = await self.repo.create_role(ROLE_ADMIN, "Administrator")
            await self.repo.assign_role_to_user(user.id, role.id)
            logger.info("First user %s registered as admin", user.email)
        await self.repo.commit()
        await self._after_write("INSERT", user)
        return user

    # PUBLIC_INTERFACE
    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, else None."""
        user = await self.repo.get_user_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

    # PUBLIC_INTERFACE
    async def create_user(self, payload: UserCreate) -> User:
        """Admin-created accounts skip the approval queue."""
        if await self.repo.get_user_by_email(payload.email):
            raise ConflictError("User with this email already exists")
        user = await self.repo.create_user(
            email=payload.email,
            full_name=payload.full_name,
            phone=payload.phone,
            department=payload.department,
            hashed_password=get_password_hash(payload.password),
            status=USER_STATUS_APPROVED,
            is_active=payload.is_active if payload.is_active is not None else True,
            is_superadmin=bool(payload.is_superadmin),
        )
        await self._set_roles(user.id, payload.roles)
        await self.repo.commit()
        await self._after_write("INSERT", user)
        return user

    # PUBLIC_INTERFACE
    async def update_user(self, user_id: UUID, payload: UserUpdate) -> User:
        user = await self._get(user_id)
        values = payload.model_dump(exclude_unset=True, exclude={"password"})
        if "email" in values and values["email"]:
            other = await self.repo.get_user_by_email(values["email"])
            if other and other.id != user.id:
                raise ConflictError("User with this email already exists")
            values["email"] = values["email"].strip().lower()
        if payload.password:
            values["hashed_password"] = get_password_hash(payload.password)
        for key, value in values.items():
            setattr(user, key, value)
        await self.repo.commit()
        await self._after_write("UPDATE", user)
        return user

    # PUBLIC_INTERFACE
    async def delete_user(self, user_id: UUID, acting_user_id: Optional[UUID] = None) -> None:
        user = await self._get(user_id)
        if acting_user_id and user.id == acting_user_id:
            raise BusinessRuleError("You cannot delete your own account")
        await self.repo.clear_roles_for_user(user.id)
        await self.repo.delete_user(user)
        await self.repo.commit()
        await self._after_write("DELETE", user)

    # PUBLIC_INTERFACE
    async def approve(self, user_id: UUID, role_name: str) -> User:
        """Approve a user and make `role_name` their only role."""
        user = await self._get(user_id)
        await self._set_roles(user.id, [role_name])
        user.status = USER_STATUS_APPROVED
        await self.repo.commit()
        logger.info("User %s approved as %s", user.email, role_name)
        await self._after_write("UPDATE", user)
        return user

    # PUBLIC_INTERFACE
    async def reject(self, user_id: UUID) -> User:
        user = await self._get(user_id)
        user.status = USER_STATUS_REJECTED
        await self.repo.commit()
        logger.info("User %s rejected", user.email)
        await self._after_write("UPDATE", user)
        return user

    # PUBLIC_INTERFACE
    async def assign_role(self, user_id: UUID, role_id: UUID) -> List[str]:
        user = await self._get(user_id)
        role = await self.repo.get_role_by_id(role_id)
        if not role:
            raise NotFoundError("Role not found")
        await self.repo.assign_role_to_user(user.id, role.id)
        await self.repo.commit()
        self.invalidate("user_permissions")
        return await self.repo.role_names_for_user(user.id)

    # PUBLIC_INTERFACE
    async def revoke_role(self, user_id: UUID, role_id: UUID) -> List[str]:
        user = await self._get(user_id)
        await self.repo.remove_role_from_user(user.id, role_id)
        await self.repo.commit()
        self.invalidate("user_permissions")
        return await self.repo.role_names_for_user(user.id)

    # PUBLIC_INTERFACE
    async def set_avatar(self, user: User, url: Optional[str]) -> Optional[str]:
        """Store the new avatar url and return the previous one for cleanup."""
        previous = user.avatar_url
        user.avatar_url = url
        await self.repo.commit()
        await self._after_write("UPDATE", user)
        return previous

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.logging import user_id_var
from garment_erp.core.security import TOKEN_ACCESS, decode_token
from garment_erp.db.models.security import ROLE_ADMIN, USER_STATUS_APPROVED, User
from garment_erp.db.session import get_async_session
from garment_erp.repositories.security import SecurityRepository

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# PUBLIC_INTERFACE
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Resolve and return the current user from the Authorization bearer token.

    Only access tokens are accepted; refresh tokens are rejected with 401.
    """
    try:
        payload = decode_token(token, expected_type=TOKEN_ACCESS)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user_id = payload["sub"]

    repo = SecurityRepository(session)
    try:
        user = await repo.get_user_by_id(UUID(str(user_id)))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


# PUBLIC_INTERFACE
async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Ensure user is active and approved; tags log records with the user id."""
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    if user.status != USER_STATUS_APPROVED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending approval")
    user_id_var.set(str(user.id))
    return user


# PUBLIC_INTERFACE
async def get_current_user_roles(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> List[str]:
    """Role names of the current user."""
    return await SecurityRepository(session).role_names_for_user(user.id)


# PUBLIC_INTERFACE
def is_admin(user: User, roles: List[str]) -> bool:
    return bool(user.is_superadmin) or ROLE_ADMIN in roles


# PUBLIC_INTERFACE
def require_roles(*required: str):
    """
    Create a dependency that requires the current user to hold one of the
    specified roles. Superadmins and the admin role always pass. Resolves to the user.
    """
    required_set = {r.lower() for r in required} | {ROLE_ADMIN}

    async def _dep(user: User = Depends(get_current_active_user), session: AsyncSession = Depends(get_async_session)) -> User:
        if user.is_superadmin:
            return user
        repo = SecurityRepository(session)
        role_set = {name.lower() for name in await repo.role_names_for_user(user.id)}
        if role_set.isdisjoint(required_set):
            logger.info("Access denied; user roles=%s required=%s", sorted(role_set), sorted(required_set))
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user

    return _dep

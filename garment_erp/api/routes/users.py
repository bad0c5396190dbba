from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import get_current_active_user, require_roles
from garment_erp.db.models.security import ROLE_ADMIN, User
from garment_erp.db.session import get_async_session
from garment_erp.schemas.auth import ApproveRequest, UserCreate, UserRead, UserUpdate
from garment_erp.services.users import UserAdminService

router = APIRouter(
    prefix="/admin/users",
    tags=["Users"],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserRead],
    summary="List users",
    description="List users, optionally filtered by approval status or a name/email search.",
)
async def list_users(
    session: AsyncSession = Depends(get_async_session),
    status_filter: Optional[str] = Query(None, alias="status", description="pending_approval | approved | rejected"),
    search: Optional[str] = Query(None, description="Substring of email or full name"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[UserRead]:
    svc = UserAdminService(session)
    users = await svc.repo.list_users(status=status_filter, search=search, limit=limit, offset=offset)
    return [await svc.to_read(u) for u in users]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create an approved user with the given roles.",
)
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    user = await svc.create_user(payload)
    return await svc.to_read(user)


# PUBLIC_INTERFACE
@router.get("/{user_id}", response_model=UserRead, summary="Get user")
async def get_user(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    return await svc.to_read(await svc._get(user_id))


# PUBLIC_INTERFACE
@router.patch("/{user_id}", response_model=UserRead, summary="Update user")
async def update_user(
    payload: UserUpdate,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    user = await svc.update_user(user_id, payload)
    return await svc.to_read(user)


# PUBLIC_INTERFACE
@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
async def delete_user(
    user_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await UserAdminService(session).delete_user(user_id, acting_user_id=current_user.id)


# PUBLIC_INTERFACE
@router.post(
    "/{user_id}/approve",
    response_model=UserRead,
    summary="Approve user",
    description="Approve a pending account and make the given role its only role.",
)
async def approve_user(
    payload: ApproveRequest,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    user = await svc.approve(user_id, payload.role)
    return await svc.to_read(user)


# PUBLIC_INTERFACE
@router.post("/{user_id}/reject", response_model=UserRead, summary="Reject user")
async def reject_user(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    user = await svc.reject(user_id)
    return await svc.to_read(user)


# PUBLIC_INTERFACE
@router.post("/{user_id}/roles/{role_id}", response_model=UserRead, summary="Assign role to user")
async def assign_role(
    user_id: UUID,
    role_id: UUID,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    await svc.assign_role(user_id, role_id)
    return await svc.to_read(await svc._get(user_id))


# PUBLIC_INTERFACE
@router.delete("/{user_id}/roles/{role_id}", response_model=UserRead, summary="Remove role from user")
async def remove_role(
    user_id: UUID,
    role_id: UUID,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    svc = UserAdminService(session)
    await svc.revoke_role(user_id, role_id)
    return await svc.to_read(await svc._get(user_id))

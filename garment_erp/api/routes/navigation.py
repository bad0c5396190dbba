from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_ADMIN
from garment_erp.db.session import get_async_session
from garment_erp.repositories.navigation import SidebarRepository
from garment_erp.schemas.navigation import (
    RolePermissionsUpdate,
    SidebarItemCreate,
    SidebarItemRead,
    SidebarItemUpdate,
    SidebarPermissionEntry,
    UserPermissionsUpdate,
    UserSidebarPermissionEntry,
)
from garment_erp.services.catalog import CatalogService
from garment_erp.services.navigation import NavigationService

router = APIRouter(
    prefix="/navigation",
    tags=["Navigation"],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)


def _items(session: AsyncSession) -> CatalogService:
    return CatalogService(session, SidebarRepository(session), "Sidebar item", data_types=("user_permissions",))


# PUBLIC_INTERFACE
@router.get("/items", response_model=List[SidebarItemRead], summary="List sidebar items")
async def list_sidebar_items(session: AsyncSession = Depends(get_async_session)) -> List[SidebarItemRead]:
    items = await SidebarRepository(session).all_items()
    return [SidebarItemRead.model_validate(i) for i in items]


# PUBLIC_INTERFACE
@router.post(
    "/items",
    response_model=SidebarItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create sidebar item",
)
async def create_sidebar_item(
    payload: SidebarItemCreate,
    session: AsyncSession = Depends(get_async_session),
) -> SidebarItemRead:
    item = await _items(session).create(payload.model_dump())
    return SidebarItemRead.model_validate(item)


# PUBLIC_INTERFACE
@router.patch("/items/{item_id}", response_model=SidebarItemRead, summary="Update sidebar item")
async def update_sidebar_item(
    payload: SidebarItemUpdate,
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> SidebarItemRead:
    values = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "parent_id"}
    item = await _items(session).update(item_id, values)
    return SidebarItemRead.model_validate(item)


# PUBLIC_INTERFACE
@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete sidebar item")
async def delete_sidebar_item(
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await _items(session).delete(item_id)


# PUBLIC_INTERFACE
@router.get(
    "/roles/{role_id}/permissions",
    response_model=List[SidebarPermissionEntry],
    summary="Role sidebar permissions",
)
async def get_role_permissions(
    role_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[SidebarPermissionEntry]:
    return await NavigationService(session).role_permissions(role_id)


# PUBLIC_INTERFACE
@router.put(
    "/roles/{role_id}/permissions",
    response_model=List[SidebarPermissionEntry],
    summary="Replace role sidebar permissions",
    description="Replace the role's whole permission set with the given entries.",
)
async def put_role_permissions(
    payload: RolePermissionsUpdate,
    role_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[SidebarPermissionEntry]:
    return await NavigationService(session).replace_role_permissions(role_id, payload.permissions)


# PUBLIC_INTERFACE
@router.get(
    "/users/{user_id}/permissions",
    response_model=List[UserSidebarPermissionEntry],
    summary="User sidebar overrides",
)
async def get_user_permissions(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[UserSidebarPermissionEntry]:
    return await NavigationService(session).user_permissions(user_id)


# PUBLIC_INTERFACE
@router.put(
    "/users/{user_id}/permissions",
    response_model=List[UserSidebarPermissionEntry],
    summary="Replace user sidebar overrides",
    description="Replace the user's personal permissions. An empty list falls back to role permissions.",
)
async def put_user_permissions(
    payload: UserPermissionsUpdate,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[UserSidebarPermissionEntry]:
    return await NavigationService(session).replace_user_permissions(user_id, payload.permissions)

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.cache import get_query_cache
from garment_erp.core.deps import require_roles
from garment_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from garment_erp.db.models.security import ROLE_ADMIN, Role
from garment_erp.db.session import get_async_session
from garment_erp.repositories.security import SecurityRepository
from garment_erp.schemas.auth import RoleCreate, RoleRead, RoleUpdate

router = APIRouter(
    prefix="/admin/roles",
    tags=["Roles"],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)


async def _load_role(repo: SecurityRepository, role_id: UUID) -> Role:
    role = await repo.get_role_by_id(role_id)
    if role is None:
        raise NotFoundError("Role not found", {"role_id": str(role_id)})
    return role


async def _ensure_name_free(repo: SecurityRepository, name: str, keep_id: UUID | None = None) -> None:
    other = await repo.get_role_by_name(name)
    if other is not None and other.id != keep_id:
        raise ConflictError(f"Role '{other.name}' already exists")


# PUBLIC_INTERFACE
@router.get("", response_model=List[RoleRead], summary="List roles")
async def list_roles(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[RoleRead]:
    roles = await SecurityRepository(session).list_roles(limit=limit, offset=offset)
    return [RoleRead.model_validate(r) for r in roles]


# PUBLIC_INTERFACE
@router.post("", response_model=RoleRead, status_code=status.HTTP_201_CREATED, summary="Create role")
async def create_role(
    payload: RoleCreate,
    session: AsyncSession = Depends(get_async_session),
) -> RoleRead:
    """Add a role that can then be granted on approval or through /admin/users."""
    repo = SecurityRepository(session)
    await _ensure_name_free(repo, payload.name)
    role = await repo.create_role(payload.name, payload.description)
    await repo.commit()
    return RoleRead.model_validate(role)


# PUBLIC_INTERFACE
@router.get("/{role_id}", response_model=RoleRead, summary="Get role")
async def get_role(
    role_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> RoleRead:
    return RoleRead.model_validate(await _load_role(SecurityRepository(session), role_id))


# PUBLIC_INTERFACE
@router.patch("/{role_id}", response_model=RoleRead, summary="Update role")
async def update_role(
    payload: RoleUpdate,
    role_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> RoleRead:
    """Rename or re-describe a role. Cached permission lookups are dropped."""
    repo = SecurityRepository(session)
    role = await _load_role(repo, role_id)
    if payload.name:
        if role.name == ROLE_ADMIN and payload.name.strip().lower() != ROLE_ADMIN:
            raise BusinessRuleError("The admin role cannot be renamed")
        await _ensure_name_free(repo, payload.name, keep_id=role.id)
        role.name = payload.name.strip().lower()
    if payload.description is not None:
        role.description = payload.description
    await repo.commit()
    get_query_cache().invalidate_data_type("user_permissions")
    return RoleRead.model_validate(role)


# PUBLIC_INTERFACE
@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete role")
async def delete_role(
    role_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    repo = SecurityRepository(session)
    role = await _load_role(repo, role_id)
    if role.name == ROLE_ADMIN:
        raise BusinessRuleError("The admin role cannot be deleted")
    await repo.delete_role(role)
    await repo.commit()
    get_query_cache().invalidate_data_type("user_permissions")

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import get_current_active_user, require_roles
from garment_erp.db.models.security import ROLE_PROCUREMENT, ROLE_PRODUCTION, ROLE_SALES
from garment_erp.db.session import get_async_session
from garment_erp.repositories.masters import (
    FabricRepository,
    ProductCategoryRepository,
    SizeTypeRepository,
    SupplierRepository,
)
from garment_erp.schemas.masters import (
    FabricCreate,
    FabricRead,
    FabricUpdate,
    ProductCategoryCreate,
    ProductCategoryRead,
    ProductCategoryUpdate,
    SizeTypeCreate,
    SizeTypeRead,
    SizeTypeUpdate,
    SupplierCreate,
    SupplierRead,
    SupplierUpdate,
)
from garment_erp.services.catalog import CatalogService
from garment_erp.services.sizes import create_size_order

router = APIRouter(prefix="/masters", tags=["Masters"])

VIEW = Depends(get_current_active_user)
MANAGE = Depends(require_roles(ROLE_SALES, ROLE_PRODUCTION, ROLE_PROCUREMENT))


def _size_types(session: AsyncSession) -> CatalogService:
    return CatalogService(session, SizeTypeRepository(session), "Size type", ("products",), ("size_name",))


def _categories(session: AsyncSession) -> CatalogService:
    return CatalogService(session, ProductCategoryRepository(session), "Category", ("products",), ("category_name",))


def _fabrics(session: AsyncSession) -> CatalogService:
    return CatalogService(
        session, FabricRepository(session), "Fabric", ("fabrics", "dashboard_metrics"), ("fabric_code",)
    )


def _suppliers(session: AsyncSession) -> CatalogService:
    return CatalogService(session, SupplierRepository(session), "Supplier", ("suppliers",), ("supplier_code",))


# PUBLIC_INTERFACE
@router.get("/size-types", response_model=List[SizeTypeRead], summary="List size types", dependencies=[VIEW])
async def list_size_types(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[SizeTypeRead]:
    rows = await _size_types(session).list_entities(search=search, limit=limit, offset=offset)
    return [SizeTypeRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/size-types",
    response_model=SizeTypeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create size type",
    description="size_order is derived from the order of available_sizes when omitted.",
    dependencies=[MANAGE],
)
async def create_size_type(payload: SizeTypeCreate, session: AsyncSession = Depends(get_async_session)) -> SizeTypeRead:
    values = payload.model_dump()
    if not values.get("size_order"):
        values["size_order"] = create_size_order(values["available_sizes"])
    return SizeTypeRead.model_validate(await _size_types(session).create(values))


# PUBLIC_INTERFACE
@router.patch(
    "/size-types/{size_type_id}", response_model=SizeTypeRead, summary="Update size type", dependencies=[MANAGE]
)
async def update_size_type(
    payload: SizeTypeUpdate,
    size_type_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> SizeTypeRead:
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "available_sizes" in values and "size_order" not in values:
        values["size_order"] = create_size_order(values["available_sizes"])
    return SizeTypeRead.model_validate(await _size_types(session).update(size_type_id, values))


# PUBLIC_INTERFACE
@router.delete(
    "/size-types/{size_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete size type",
    dependencies=[MANAGE],
)
async def delete_size_type(size_type_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _size_types(session).delete(size_type_id)


# PUBLIC_INTERFACE
@router.get(
    "/categories", response_model=List[ProductCategoryRead], summary="List product categories", dependencies=[VIEW]
)
async def list_categories(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ProductCategoryRead]:
    rows = await _categories(session).list_entities(search=search, limit=limit, offset=offset)
    return [ProductCategoryRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/categories",
    response_model=ProductCategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create product category",
    dependencies=[MANAGE],
)
async def create_category(
    payload: ProductCategoryCreate, session: AsyncSession = Depends(get_async_session)
) -> ProductCategoryRead:
    return ProductCategoryRead.model_validate(await _categories(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch(
    "/categories/{category_id}",
    response_model=ProductCategoryRead,
    summary="Update product category",
    dependencies=[MANAGE],
)
async def update_category(
    payload: ProductCategoryUpdate,
    category_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ProductCategoryRead:
    entity = await _categories(session).update(category_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return ProductCategoryRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete product category",
    dependencies=[MANAGE],
)
async def delete_category(category_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _categories(session).delete(category_id, file_fields=("category_image_url",))


# PUBLIC_INTERFACE
@router.put(
    "/categories/{category_id}/image",
    response_model=ProductCategoryRead,
    summary="Upload category image",
    dependencies=[MANAGE],
)
async def upload_category_image(
    category_id: UUID = Path(...),
    file: UploadFile = File(..., description="Image file"),
    session: AsyncSession = Depends(get_async_session),
) -> ProductCategoryRead:
    entity = await _categories(session).replace_image(category_id, "category_image_url", file, "category-images")
    return ProductCategoryRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.get("/fabrics", response_model=List[FabricRead], summary="List fabrics", dependencies=[VIEW])
async def list_fabrics(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None, description="Name, code or color"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[FabricRead]:
    rows = await _fabrics(session).list_entities(search=search, limit=limit, offset=offset)
    return [FabricRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/fabrics/{fabric_id}", response_model=FabricRead, summary="Get fabric", dependencies=[VIEW])
async def get_fabric(fabric_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> FabricRead:
    return FabricRead.model_validate(await _fabrics(session).get(fabric_id))


# PUBLIC_INTERFACE
@router.post(
    "/fabrics",
    response_model=FabricRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create fabric",
    dependencies=[MANAGE],
)
async def create_fabric(payload: FabricCreate, session: AsyncSession = Depends(get_async_session)) -> FabricRead:
    return FabricRead.model_validate(await _fabrics(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch("/fabrics/{fabric_id}", response_model=FabricRead, summary="Update fabric", dependencies=[MANAGE])
async def update_fabric(
    payload: FabricUpdate,
    fabric_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> FabricRead:
    entity = await _fabrics(session).update(fabric_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return FabricRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/fabrics/{fabric_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete fabric",
    dependencies=[MANAGE],
)
async def delete_fabric(fabric_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _fabrics(session).delete(fabric_id, file_fields=("image_url",))


# PUBLIC_INTERFACE
@router.put("/fabrics/{fabric_id}/image", response_model=FabricRead, summary="Upload fabric image", dependencies=[MANAGE])
async def upload_fabric_image(
    fabric_id: UUID = Path(...),
    file: UploadFile = File(..., description="Image file"),
    session: AsyncSession = Depends(get_async_session),
) -> FabricRead:
    entity = await _fabrics(session).replace_image(fabric_id, "image_url", file, "fabric-images")
    return FabricRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.get("/suppliers", response_model=List[SupplierRead], summary="List suppliers", dependencies=[VIEW])
async def list_suppliers(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[SupplierRead]:
    rows = await _suppliers(session).list_entities(search=search, limit=limit, offset=offset)
    return [SupplierRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/suppliers/{supplier_id}", response_model=SupplierRead, summary="Get supplier", dependencies=[VIEW])
async def get_supplier(
    supplier_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> SupplierRead:
    return SupplierRead.model_validate(await _suppliers(session).get(supplier_id))


# PUBLIC_INTERFACE
@router.post(
    "/suppliers",
    response_model=SupplierRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create supplier",
    dependencies=[MANAGE],
)
async def create_supplier(payload: SupplierCreate, session: AsyncSession = Depends(get_async_session)) -> SupplierRead:
    return SupplierRead.model_validate(await _suppliers(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch("/suppliers/{supplier_id}", response_model=SupplierRead, summary="Update supplier", dependencies=[MANAGE])
async def update_supplier(
    payload: SupplierUpdate,
    supplier_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> SupplierRead:
    entity = await _suppliers(session).update(supplier_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return SupplierRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/suppliers/{supplier_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete supplier",
    dependencies=[MANAGE],
)
async def delete_supplier(supplier_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _suppliers(session).delete(supplier_id)

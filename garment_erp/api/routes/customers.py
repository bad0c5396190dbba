from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_DISPATCH, ROLE_PRODUCTION, ROLE_SALES
from garment_erp.db.session import get_async_session
from garment_erp.schemas.common import BulkUploadResult
from garment_erp.schemas.sales import CustomerCreate, CustomerRead, CustomerUpdate
from garment_erp.services.customers import CustomerService
from garment_erp.services.exports import (
    CUSTOMER_TEMPLATE_COLUMNS,
    CUSTOMER_TEMPLATE_SAMPLE,
    export_dataframe,
    template_dataframe,
)

router = APIRouter(prefix="/customers", tags=["Customers"])

VIEW = Depends(require_roles(ROLE_SALES, ROLE_PRODUCTION, ROLE_DISPATCH))
MANAGE = Depends(require_roles(ROLE_SALES))


# PUBLIC_INTERFACE
@router.get("", response_model=List[CustomerRead], summary="List customers", dependencies=[VIEW])
async def list_customers(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None, description="Company, contact, phone, email or GSTIN"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[CustomerRead]:
    return await CustomerService(session).list_customers(search=search, limit=limit, offset=offset)


# PUBLIC_INTERFACE
@router.get(
    "/template",
    summary="Customer upload template",
    description="CSV with the upload columns and one sample row.",
    dependencies=[MANAGE],
)
async def download_template() -> StreamingResponse:
    df = template_dataframe(CUSTOMER_TEMPLATE_COLUMNS, CUSTOMER_TEMPLATE_SAMPLE)
    return export_dataframe(df, "customer_template", "csv")


# PUBLIC_INTERFACE
@router.post(
    "/bulk-upload",
    response_model=BulkUploadResult,
    summary="Bulk upload customers",
    description="Import customers from a CSV/XLSX laid out like the template. Invalid rows are reported and skipped.",
    dependencies=[MANAGE],
)
async def bulk_upload_customers(
    file: UploadFile = File(..., description="CSV or XLSX file"),
    session: AsyncSession = Depends(get_async_session),
) -> BulkUploadResult:
    content = await file.read()
    return await CustomerService(session).bulk_upload(content, file.filename)


# PUBLIC_INTERFACE
@router.get(
    "/export",
    summary="Export customers",
    description="Customers with order count, last order date and lifetime value as csv, xlsx or pdf.",
    dependencies=[VIEW],
)
async def export_customers(
    session: AsyncSession = Depends(get_async_session),
    format: str = Query("csv", pattern="^(csv|xlsx|pdf)$"),
) -> StreamingResponse:
    df = await CustomerService(session).export_dataframe()
    return export_dataframe(df, "customers", format)


# PUBLIC_INTERFACE
@router.get("/{customer_id}", response_model=CustomerRead, summary="Get customer", dependencies=[VIEW])
async def get_customer(
    customer_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(session).get(customer_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
    dependencies=[MANAGE],
)
async def create_customer(payload: CustomerCreate, session: AsyncSession = Depends(get_async_session)) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(session).create_customer(payload))


# PUBLIC_INTERFACE
@router.patch("/{customer_id}", response_model=CustomerRead, summary="Update customer", dependencies=[MANAGE])
async def update_customer(
    payload: CustomerUpdate,
    customer_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> CustomerRead:
    return CustomerRead.model_validate(await CustomerService(session).update_customer(customer_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete customer",
    description="Customers with orders cannot be deleted.",
    dependencies=[MANAGE],
)
async def delete_customer(customer_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await CustomerService(session).delete_customer(customer_id)

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_SALES
from garment_erp.db.session import get_async_session
from garment_erp.schemas.accounts import GstBreakdown, InvoiceCreate, InvoiceRead, InvoiceUpdate, PaymentRequest
from garment_erp.services.invoices import InvoiceService

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
    dependencies=[Depends(require_roles(ROLE_SALES))],
)


# PUBLIC_INTERFACE
@router.get("", response_model=List[InvoiceRead], summary="List invoices")
async def list_invoices(
    session: AsyncSession = Depends(get_async_session),
    status_filter: Optional[str] = Query(None, alias="status", description="draft | sent | partially_paid | paid | overdue | cancelled"),
    customer_id: Optional[UUID] = Query(None),
    order_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[InvoiceRead]:
    rows = await InvoiceService(session).repo.list_entities(
        search=search,
        filters={"status": status_filter, "customer_id": customer_id, "order_id": order_id},
        limit=limit,
        offset=offset,
    )
    return [InvoiceRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
    description="Lines are copied from the order when none are given; GST and totals are computed server-side.",
)
async def create_invoice(payload: InvoiceCreate, session: AsyncSession = Depends(get_async_session)) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(session).create_invoice(payload))


# PUBLIC_INTERFACE
@router.get("/{invoice_id}", response_model=InvoiceRead, summary="Get invoice")
async def get_invoice(invoice_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(session).get(invoice_id))


# PUBLIC_INTERFACE
@router.patch("/{invoice_id}", response_model=InvoiceRead, summary="Update invoice")
async def update_invoice(
    payload: InvoiceUpdate,
    invoice_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(session).update_invoice(invoice_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete invoice",
    description="Invoices with payments cannot be deleted.",
)
async def delete_invoice(invoice_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await InvoiceService(session).delete_invoice(invoice_id)


# PUBLIC_INTERFACE
@router.post(
    "/{invoice_id}/payments",
    response_model=InvoiceRead,
    summary="Record payment",
    description="Adds to the paid amount; the status becomes partially_paid or paid. Overpayment is rejected.",
)
async def record_payment(
    payload: PaymentRequest,
    invoice_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await InvoiceService(session).record_payment(invoice_id, payload.amount))


# PUBLIC_INTERFACE
@router.get("/{invoice_id}/gst-breakdown", response_model=GstBreakdown, summary="GST breakdown by rate")
async def gst_breakdown(invoice_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> GstBreakdown:
    return await InvoiceService(session).gst_breakdown(invoice_id)

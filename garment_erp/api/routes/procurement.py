from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_PROCUREMENT, ROLE_PRODUCTION
from garment_erp.db.session import get_async_session
from garment_erp.repositories.procurement import GrnRepository, PurchaseOrderRepository
from garment_erp.schemas.procurement import (
    GrnCreate,
    GrnInspectionRequest,
    GrnRead,
    PurchaseOrderCreate,
    PurchaseOrderRead,
    PurchaseOrderUpdate,
)
from garment_erp.services.procurement import ProcurementService

router = APIRouter(prefix="/procurement", tags=["Procurement"])

VIEW = Depends(require_roles(ROLE_PROCUREMENT, ROLE_PRODUCTION))
MANAGE = Depends(require_roles(ROLE_PROCUREMENT))


# PUBLIC_INTERFACE
@router.get(
    "/purchase-orders", response_model=List[PurchaseOrderRead], summary="List purchase orders", dependencies=[VIEW]
)
async def list_purchase_orders(
    session: AsyncSession = Depends(get_async_session),
    status_filter: Optional[str] = Query(None, alias="status"),
    supplier_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[PurchaseOrderRead]:
    rows = await PurchaseOrderRepository(session).list_entities(
        search=search, filters={"status": status_filter, "supplier_id": supplier_id}, limit=limit, offset=offset
    )
    return [PurchaseOrderRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/purchase-orders",
    response_model=PurchaseOrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create purchase order",
    description="Line amounts, GST and totals are computed server-side; the PO number is generated when omitted.",
    dependencies=[MANAGE],
)
async def create_purchase_order(
    payload: PurchaseOrderCreate, session: AsyncSession = Depends(get_async_session)
) -> PurchaseOrderRead:
    return PurchaseOrderRead.model_validate(await ProcurementService(session).create_po(payload))


# PUBLIC_INTERFACE
@router.get(
    "/purchase-orders/{po_id}", response_model=PurchaseOrderRead, summary="Get purchase order", dependencies=[VIEW]
)
async def get_purchase_order(
    po_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> PurchaseOrderRead:
    return PurchaseOrderRead.model_validate(await ProcurementService(session).get_po(po_id))


# PUBLIC_INTERFACE
@router.patch(
    "/purchase-orders/{po_id}",
    response_model=PurchaseOrderRead,
    summary="Update purchase order",
    dependencies=[MANAGE],
)
async def update_purchase_order(
    payload: PurchaseOrderUpdate,
    po_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> PurchaseOrderRead:
    return PurchaseOrderRead.model_validate(await ProcurementService(session).update_po(po_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/purchase-orders/{po_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete purchase order",
    description="Purchase orders with goods receipts cannot be deleted.",
    dependencies=[MANAGE],
)
async def delete_purchase_order(po_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await ProcurementService(session).delete_po(po_id)


# PUBLIC_INTERFACE
@router.get("/grns", response_model=List[GrnRead], summary="List goods receipts", dependencies=[VIEW])
async def list_grns(
    session: AsyncSession = Depends(get_async_session),
    purchase_order_id: Optional[UUID] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[GrnRead]:
    rows = await GrnRepository(session).list_entities(
        search=search,
        filters={"purchase_order_id": purchase_order_id, "status": status_filter},
        limit=limit,
        offset=offset,
    )
    return [GrnRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/grns",
    response_model=GrnRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record goods receipt",
    description="Against a PO line, the received quantity cannot exceed what is still outstanding.",
    dependencies=[MANAGE],
)
async def create_grn(payload: GrnCreate, session: AsyncSession = Depends(get_async_session)) -> GrnRead:
    return GrnRead.model_validate(await ProcurementService(session).create_grn(payload))


# PUBLIC_INTERFACE
@router.get("/grns/{grn_id}", response_model=GrnRead, summary="Get goods receipt", dependencies=[VIEW])
async def get_grn(grn_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> GrnRead:
    return GrnRead.model_validate(await ProcurementService(session).get_grn(grn_id))


# PUBLIC_INTERFACE
@router.post(
    "/grns/{grn_id}/inspection",
    response_model=GrnRead,
    summary="Inspect goods receipt",
    description="Record line quality. Approved quantities are added to fabric or item stock once per line.",
    dependencies=[MANAGE],
)
async def inspect_grn(
    payload: GrnInspectionRequest,
    grn_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> GrnRead:
    return GrnRead.model_validate(await ProcurementService(session).inspect_grn(grn_id, payload))

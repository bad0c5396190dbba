from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Query, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_DISPATCH, ROLE_PROCUREMENT, ROLE_PRODUCTION, ROLE_SALES, User
from garment_erp.db.session import get_async_session
from garment_erp.repositories.inventory import (
    AdjustmentReasonRepository,
    InventoryAdjustmentRepository,
    InventoryItemRepository,
    InventoryLogRepository,
)
from garment_erp.schemas.common import BulkUploadResult
from garment_erp.schemas.inventory import (
    AdjustmentCreate,
    AdjustmentRead,
    AdjustmentReasonCreate,
    AdjustmentReasonRead,
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
    InventoryLogRead,
)
from garment_erp.services.catalog import CatalogService
from garment_erp.services.documents import LabelData, render_barcode_labels
from garment_erp.services.exports import (
    FABRIC_TEMPLATE_COLUMNS,
    FABRIC_TEMPLATE_SAMPLE,
    INVENTORY_TEMPLATE_COLUMNS,
    INVENTORY_TEMPLATE_SAMPLE,
    export_dataframe,
    template_dataframe,
)
from garment_erp.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])

VIEW = Depends(require_roles(ROLE_PROCUREMENT, ROLE_PRODUCTION, ROLE_SALES, ROLE_DISPATCH))
MANAGE = Depends(require_roles(ROLE_PROCUREMENT))


# PUBLIC_INTERFACE
@router.get("/items", response_model=List[InventoryItemRead], summary="List inventory items", dependencies=[VIEW])
async def list_items(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None, description="SKU, name, category, brand or color"),
    category: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[InventoryItemRead]:
    rows = await InventoryItemRepository(session).list_entities(
        search=search, filters={"category": category}, limit=limit, offset=offset
    )
    return [InventoryItemRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get(
    "/items/by-sku/{sku}",
    response_model=InventoryItemRead,
    summary="Look up item by SKU",
    description="Barcode scan lookup; the match is case-insensitive.",
    dependencies=[VIEW],
)
async def get_item_by_sku(sku: str = Path(...), session: AsyncSession = Depends(get_async_session)) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).get_by_sku(sku))


# PUBLIC_INTERFACE
@router.get(
    "/items/labels.pdf",
    summary="Barcode labels",
    description="Code128 label sheet for the selected items; the SKU is the barcode value.",
    response_class=Response,
    dependencies=[VIEW],
)
async def item_labels(
    item_ids: List[UUID] = Query(..., description="Items to print"),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    items = await InventoryItemRepository(session).get_many(item_ids)
    labels = [
        LabelData(
            sku=i.sku,
            item_name=i.item_name,
            unit_price=float(i.unit_price) if i.unit_price is not None else None,
            size=i.size,
            color=i.color,
        )
        for i in items
    ]
    return Response(
        content=render_barcode_labels(labels),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="barcode_labels.pdf"'},
    )


# PUBLIC_INTERFACE
@router.get("/items/template", summary="Inventory upload template", dependencies=[MANAGE])
async def item_template() -> StreamingResponse:
    return export_dataframe(
        template_dataframe(INVENTORY_TEMPLATE_COLUMNS, INVENTORY_TEMPLATE_SAMPLE), "inventory_template", "csv"
    )


# PUBLIC_INTERFACE
@router.post(
    "/items/bulk-upload",
    response_model=BulkUploadResult,
    summary="Bulk upload inventory items",
    description="Rows with a duplicate or missing SKU are reported and skipped.",
    dependencies=[MANAGE],
)
async def bulk_upload_items(
    file: UploadFile = File(..., description="CSV or XLSX file"),
    session: AsyncSession = Depends(get_async_session),
) -> BulkUploadResult:
    return await InventoryService(session).bulk_upload_items(await file.read(), file.filename)


# PUBLIC_INTERFACE
@router.get("/fabrics/template", summary="Fabric upload template", dependencies=[MANAGE])
async def fabric_template() -> StreamingResponse:
    return export_dataframe(template_dataframe(FABRIC_TEMPLATE_COLUMNS, FABRIC_TEMPLATE_SAMPLE), "fabric_template", "csv")


# PUBLIC_INTERFACE
@router.post(
    "/fabrics/bulk-upload",
    response_model=BulkUploadResult,
    summary="Bulk upload fabrics",
    dependencies=[MANAGE],
)
async def bulk_upload_fabrics(
    file: UploadFile = File(..., description="CSV or XLSX file"),
    session: AsyncSession = Depends(get_async_session),
) -> BulkUploadResult:
    return await InventoryService(session).bulk_upload_fabrics(await file.read(), file.filename)


# PUBLIC_INTERFACE
@router.get("/items/{item_id}", response_model=InventoryItemRead, summary="Get inventory item", dependencies=[VIEW])
async def get_item(item_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> InventoryItemRead:
    svc = CatalogService(session, InventoryItemRepository(session), "Inventory item")
    return InventoryItemRead.model_validate(await svc.get(item_id))


# PUBLIC_INTERFACE
@router.post(
    "/items",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create inventory item",
    description="A non-zero current_stock is logged as opening stock.",
    dependencies=[MANAGE],
)
async def create_item(
    payload: InventoryItemCreate, session: AsyncSession = Depends(get_async_session)
) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).create_item(payload))


# PUBLIC_INTERFACE
@router.patch(
    "/items/{item_id}",
    response_model=InventoryItemRead,
    summary="Update inventory item",
    description="Stock is changed through adjustments, not here.",
    dependencies=[MANAGE],
)
async def update_item(
    payload: InventoryItemUpdate,
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryItemRead:
    return InventoryItemRead.model_validate(await InventoryService(session).update_item(item_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete inventory item",
    dependencies=[MANAGE],
)
async def delete_item(item_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await InventoryService(session).delete_item(item_id)


# PUBLIC_INTERFACE
@router.get(
    "/logs",
    response_model=List[InventoryLogRead],
    summary="Stock movement log",
    description="Newest first; filter by item, item type (item | fabric) or reference.",
    dependencies=[VIEW],
)
async def list_inventory_logs(
    session: AsyncSession = Depends(get_async_session),
    item_id: Optional[UUID] = Query(None),
    item_type: Optional[str] = Query(None),
    reference_type: Optional[str] = Query(None),
    reference_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[InventoryLogRead]:
    rows = await InventoryLogRepository(session).list_logs(
        item_id=item_id,
        item_type=item_type,
        reference_type=reference_type,
        reference_id=reference_id,
        limit=limit,
        offset=offset,
    )
    return [InventoryLogRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get(
    "/adjustment-reasons",
    response_model=List[AdjustmentReasonRead],
    summary="List adjustment reasons",
    dependencies=[VIEW],
)
async def list_adjustment_reasons(
    session: AsyncSession = Depends(get_async_session),
    active_only: bool = Query(True),
) -> List[AdjustmentReasonRead]:
    rows = await AdjustmentReasonRepository(session).list_entities(
        filters={"is_active": True if active_only else None}, limit=1000
    )
    return [AdjustmentReasonRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/adjustment-reasons",
    response_model=AdjustmentReasonRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create adjustment reason",
    dependencies=[MANAGE],
)
async def create_adjustment_reason(
    payload: AdjustmentReasonCreate, session: AsyncSession = Depends(get_async_session)
) -> AdjustmentReasonRead:
    svc = CatalogService(session, AdjustmentReasonRepository(session), "Adjustment reason", (), ("reason_name",))
    return AdjustmentReasonRead.model_validate(await svc.create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.get("/adjustments", response_model=List[AdjustmentRead], summary="List stock adjustments", dependencies=[VIEW])
async def list_adjustments(
    session: AsyncSession = Depends(get_async_session),
    adjustment_type: Optional[str] = Query(None, description="ADD | REMOVE | REPLACE"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[AdjustmentRead]:
    rows = await InventoryAdjustmentRepository(session).list_entities(
        filters={"adjustment_type": adjustment_type}, limit=limit, offset=offset
    )
    return [AdjustmentRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/adjustments",
    response_model=AdjustmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Adjust stock",
    description=(
        "ADD or REMOVE a quantity, or REPLACE the stock with a counted quantity, over several "
        "items at once. Removing more than is in stock is rejected."
    ),
)
async def create_adjustment(
    payload: AdjustmentCreate,
    user: User = Depends(require_roles(ROLE_PROCUREMENT)),
    session: AsyncSession = Depends(get_async_session),
) -> AdjustmentRead:
    adjustment = await InventoryService(session).create_adjustment(payload, adjusted_by_user_id=user.id)
    return AdjustmentRead.model_validate(adjustment)

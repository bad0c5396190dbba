from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import get_current_active_user, require_roles
from garment_erp.core.settings import get_app_settings
from garment_erp.db.models.security import ROLE_CUTTING, ROLE_PRODUCTION, ROLE_QC, User
from garment_erp.db.session import get_async_session
from garment_erp.repositories.production import BatchRepository
from garment_erp.schemas.production import (
    BatchAssignmentRead,
    BatchCreate,
    BatchDistributionRequest,
    BatchRead,
    BatchReassignRequest,
    BatchReassignResult,
    BatchUpdate,
    CuttingAssignmentCreate,
    CuttingAssignmentRead,
    CuttingProgressRead,
    CuttingReassignRequest,
    CuttingReassignResult,
    CuttingUpdateRequest,
    PickerRow,
    PickRequest,
)
from garment_erp.schemas.realtime import KpiSnapshot
from garment_erp.services.documents import render_batch_sheet
from garment_erp.services.production import ProductionService

router = APIRouter(prefix="/production", tags=["Production"])

VIEW = Depends(require_roles(ROLE_PRODUCTION, ROLE_CUTTING, ROLE_QC))
MANAGE = Depends(require_roles(ROLE_PRODUCTION))
PICK = Depends(require_roles(ROLE_PRODUCTION, ROLE_QC))


def _actor(user: User) -> str:
    return user.full_name or user.email


# PUBLIC_INTERFACE
@router.get("/batches", response_model=List[BatchRead], summary="List batches", dependencies=[VIEW])
async def list_batches(
    session: AsyncSession = Depends(get_async_session),
    status_filter: Optional[str] = Query(None, alias="status", description="active | inactive"),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[BatchRead]:
    rows = await BatchRepository(session).list_entities(
        search=search, filters={"status": status_filter}, limit=limit, offset=offset
    )
    return [BatchRead.model_validate(b) for b in rows]


# PUBLIC_INTERFACE
@router.get(
    "/batches/available",
    response_model=List[BatchRead],
    summary="Available batches",
    description="Active batches with spare capacity.",
    dependencies=[VIEW],
)
async def list_available_batches(session: AsyncSession = Depends(get_async_session)) -> List[BatchRead]:
    return [BatchRead.model_validate(b) for b in await BatchRepository(session).list_available()]


# PUBLIC_INTERFACE
@router.post(
    "/batches",
    response_model=BatchRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create batch",
    dependencies=[MANAGE],
)
async def create_batch(payload: BatchCreate, session: AsyncSession = Depends(get_async_session)) -> BatchRead:
    return BatchRead.model_validate(await ProductionService(session).create_batch(payload))


# PUBLIC_INTERFACE
@router.patch("/batches/{batch_id}", response_model=BatchRead, summary="Update batch", dependencies=[MANAGE])
async def update_batch(
    payload: BatchUpdate,
    batch_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> BatchRead:
    return BatchRead.model_validate(await ProductionService(session).update_batch(batch_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/batches/{batch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete batch",
    description="Batches that still hold order assignments cannot be deleted.",
    dependencies=[MANAGE],
)
async def delete_batch(batch_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await ProductionService(session).delete_batch(batch_id)


# PUBLIC_INTERFACE
@router.put(
    "/orders/{order_id}/batch-distribution",
    response_model=List[BatchAssignmentRead],
    summary="Distribute order to batches",
    description=(
        "Replace the order's batch split. For every size the batch shares must add up "
        "to exactly the ordered quantity."
    ),
)
async def distribute_order(
    payload: BatchDistributionRequest,
    order_id: UUID = Path(...),
    user: User = Depends(require_roles(ROLE_PRODUCTION)),
    session: AsyncSession = Depends(get_async_session),
) -> List[BatchAssignmentRead]:
    return await ProductionService(session).distribute_order(order_id, payload, assigned_by_name=_actor(user))


# PUBLIC_INTERFACE
@router.get(
    "/batch-assignments", response_model=List[BatchAssignmentRead], summary="List batch assignments", dependencies=[VIEW]
)
async def list_batch_assignments(
    session: AsyncSession = Depends(get_async_session),
    order_id: Optional[UUID] = Query(None),
    batch_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[BatchAssignmentRead]:
    return await ProductionService(session).list_assignments(
        order_id=order_id, batch_id=batch_id, limit=limit, offset=offset
    )


# PUBLIC_INTERFACE
@router.get(
    "/batch-assignments/{assignment_id}",
    response_model=BatchAssignmentRead,
    summary="Get batch assignment",
    dependencies=[VIEW],
)
async def get_batch_assignment(
    assignment_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> BatchAssignmentRead:
    return await ProductionService(session).get_assignment(assignment_id)


# PUBLIC_INTERFACE
@router.post(
    "/batch-assignments/{assignment_id}/reassign",
    response_model=BatchReassignResult,
    summary="Reassign batch",
    description="Move all or some unpicked pieces of an assignment to another active batch.",
)
async def reassign_batch(
    payload: BatchReassignRequest,
    assignment_id: UUID = Path(...),
    user: User = Depends(require_roles(ROLE_PRODUCTION)),
    session: AsyncSession = Depends(get_async_session),
) -> BatchReassignResult:
    return await ProductionService(session).reassign_batch(assignment_id, payload, assigned_by_name=_actor(user))


# PUBLIC_INTERFACE
@router.get(
    "/batch-assignments/{assignment_id}/sheet.pdf",
    summary="Batch assignment sheet",
    response_class=Response,
    dependencies=[VIEW],
)
async def batch_sheet_pdf(
    assignment_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> Response:
    data = await ProductionService(session).batch_sheet_data(assignment_id)
    pdf = render_batch_sheet(data, get_app_settings().COMPANY_NAME)
    filename = f"batch_sheet_{data.order_number.replace('/', '-')}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# PUBLIC_INTERFACE
@router.post(
    "/batch-assignments/{assignment_id}/pick",
    response_model=BatchAssignmentRead,
    summary="Record picked pieces",
    description="Add newly picked pieces per size; a size cannot exceed what is still remaining in the batch.",
    dependencies=[PICK],
)
async def pick_from_batch(
    payload: PickRequest,
    assignment_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> BatchAssignmentRead:
    return await ProductionService(session).pick(assignment_id, payload.size_picks)


# PUBLIC_INTERFACE
@router.get(
    "/picker",
    response_model=List[PickerRow],
    summary="Picker view",
    description="Every batch assignment with per-size assigned, picked, rejected and remaining.",
    dependencies=[PICK],
)
async def picker_view(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(1000, ge=1, le=5000),
    offset: int = Query(0, ge=0),
) -> List[PickerRow]:
    return await ProductionService(session).picker_rows(limit=limit, offset=offset)


# PUBLIC_INTERFACE
@router.get(
    "/cutting-assignments",
    response_model=List[CuttingAssignmentRead],
    summary="List cutting assignments",
    dependencies=[VIEW],
)
async def list_cutting_assignments(
    session: AsyncSession = Depends(get_async_session),
    order_id: Optional[UUID] = Query(None),
    cutting_master_id: Optional[UUID] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[CuttingAssignmentRead]:
    rows = await ProductionService(session).list_cutting_assignments(
        order_id=order_id, cutting_master_id=cutting_master_id, status=status_filter, limit=limit, offset=offset
    )
    return [CuttingAssignmentRead.model_validate(a) for a in rows]


# PUBLIC_INTERFACE
@router.post(
    "/orders/{order_id}/cutting-assignments",
    response_model=CuttingAssignmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Assign cutting master",
)
async def assign_cutting_master(
    payload: CuttingAssignmentCreate,
    order_id: UUID = Path(...),
    user: User = Depends(require_roles(ROLE_PRODUCTION)),
    session: AsyncSession = Depends(get_async_session),
) -> CuttingAssignmentRead:
    assignment = await ProductionService(session).assign_cutting(order_id, payload, assigned_by_name=_actor(user))
    return CuttingAssignmentRead.model_validate(assignment)


# PUBLIC_INTERFACE
@router.post(
    "/cutting-assignments/{assignment_id}/reassign",
    response_model=CuttingReassignResult,
    summary="Reassign cutting master",
    description="Move all or part of the uncut quantity to another cutting master.",
)
async def reassign_cutting_master(
    payload: CuttingReassignRequest,
    assignment_id: UUID = Path(...),
    user: User = Depends(require_roles(ROLE_PRODUCTION)),
    session: AsyncSession = Depends(get_async_session),
) -> CuttingReassignResult:
    return await ProductionService(session).reassign_cutting(assignment_id, payload, assigned_by_name=_actor(user))


# PUBLIC_INTERFACE
@router.get(
    "/orders/{order_id}/cutting",
    response_model=CuttingProgressRead,
    summary="Cutting progress",
    dependencies=[VIEW],
)
async def get_cutting_progress(
    order_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> CuttingProgressRead:
    return await ProductionService(session).cutting_progress(order_id)


# PUBLIC_INTERFACE
@router.post(
    "/orders/{order_id}/cutting",
    response_model=CuttingProgressRead,
    summary="Record cut pieces",
    description=(
        "Add newly cut pieces per size, clamped to what is left. New cuts require a fabric "
        "usage entry, which is deducted from fabric stock."
    ),
)
async def record_cutting(
    payload: CuttingUpdateRequest,
    order_id: UUID = Path(...),
    user: User = Depends(require_roles(ROLE_PRODUCTION, ROLE_CUTTING)),
    session: AsyncSession = Depends(get_async_session),
) -> CuttingProgressRead:
    return await ProductionService(session).update_cutting(order_id, payload, used_by_name=_actor(user))


# PUBLIC_INTERFACE
@router.get(
    "/kpis",
    response_model=KpiSnapshot,
    summary="Production KPIs",
    description="Cutting pending, stitching assigned and QC totals with the pass rate.",
    dependencies=[Depends(get_current_active_user)],
)
async def production_kpis(session: AsyncSession = Depends(get_async_session)) -> KpiSnapshot:
    return await ProductionService(session).compute_kpis()

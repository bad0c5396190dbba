from __future__ import annotations

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.core.settings import get_app_settings
from garment_erp.db.models.security import ROLE_DISPATCH, ROLE_SALES
from garment_erp.db.session import get_async_session
from garment_erp.repositories.dispatch import COMPLETED_STATUSES, PENDING_STATUSES
from garment_erp.schemas.dispatch import DispatchableOrder, DispatchCreate, DispatchRead, DispatchStatusUpdate
from garment_erp.services.dispatch import DispatchService
from garment_erp.services.documents import render_dispatch_challan

router = APIRouter(prefix="/dispatch", tags=["Dispatch"])

VIEW = Depends(require_roles(ROLE_DISPATCH, ROLE_SALES))
MANAGE = Depends(require_roles(ROLE_DISPATCH))


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[DispatchRead],
    summary="List dispatches",
    description="pending covers pending and packed; completed covers shipped and delivered.",
    dependencies=[VIEW],
)
async def list_dispatches(
    session: AsyncSession = Depends(get_async_session),
    stage: Literal["pending", "completed"] = Query("pending"),
    order_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[DispatchRead]:
    statuses = PENDING_STATUSES if stage == "pending" else COMPLETED_STATUSES
    rows = await DispatchService(session).repo.list_by_statuses(statuses, order_id=order_id, limit=limit, offset=offset)
    return [DispatchRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get(
    "/orders/{order_id}/dispatchable",
    response_model=DispatchableOrder,
    summary="Dispatchable quantity",
    description="QC-approved pieces of the order and how many are still unshipped.",
    dependencies=[VIEW],
)
async def dispatchable_quantity(
    order_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> DispatchableOrder:
    return await DispatchService(session).dispatchable(order_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=DispatchRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create dispatch",
    description="Pieces shipped cannot exceed the order's QC-approved pieces not yet dispatched.",
    dependencies=[MANAGE],
)
async def create_dispatch(payload: DispatchCreate, session: AsyncSession = Depends(get_async_session)) -> DispatchRead:
    return DispatchRead.model_validate(await DispatchService(session).create_dispatch(payload))


# PUBLIC_INTERFACE
@router.get("/{dispatch_id}", response_model=DispatchRead, summary="Get dispatch", dependencies=[VIEW])
async def get_dispatch(dispatch_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> DispatchRead:
    return DispatchRead.model_validate(await DispatchService(session).get(dispatch_id))


# PUBLIC_INTERFACE
@router.put(
    "/{dispatch_id}/status",
    response_model=DispatchRead,
    summary="Change dispatch status",
    dependencies=[MANAGE],
)
async def update_dispatch_status(
    payload: DispatchStatusUpdate,
    dispatch_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> DispatchRead:
    return DispatchRead.model_validate(await DispatchService(session).update_status(dispatch_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{dispatch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete dispatch",
    description="Only pending or packed dispatches can be deleted.",
    dependencies=[MANAGE],
)
async def delete_dispatch(dispatch_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await DispatchService(session).delete_dispatch(dispatch_id)


# PUBLIC_INTERFACE
@router.get(
    "/{dispatch_id}/challan.pdf",
    summary="Delivery challan",
    response_class=Response,
    dependencies=[VIEW],
)
async def dispatch_challan(dispatch_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> Response:
    data = await DispatchService(session).challan_data(dispatch_id)
    pdf = render_dispatch_challan(data, get_app_settings().COMPANY_NAME)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="challan_{data.dispatch_number}.pdf"'},
    )

from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import (
    ROLE_CUTTING,
    ROLE_DISPATCH,
    ROLE_GRAPHICS,
    ROLE_PRODUCTION,
    ROLE_QC,
    ROLE_SALES,
)
from garment_erp.db.session import get_async_session
from garment_erp.schemas.production import OrderProductionStatus
from garment_erp.schemas.sales import OrderCreate, OrderRead, OrderSizesRead, OrderStatusUpdate, OrderUpdate
from garment_erp.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

VIEW = Depends(require_roles(ROLE_SALES, ROLE_PRODUCTION, ROLE_GRAPHICS, ROLE_CUTTING, ROLE_QC, ROLE_DISPATCH))
MANAGE = Depends(require_roles(ROLE_SALES))
STATUS = Depends(require_roles(ROLE_SALES, ROLE_PRODUCTION, ROLE_QC, ROLE_DISPATCH))


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[OrderRead],
    summary="List orders",
    description="Newest first. search matches the order number or the customer's company name.",
    dependencies=[VIEW],
)
async def list_orders(
    session: AsyncSession = Depends(get_async_session),
    status_filter: Optional[str] = Query(None, alias="status"),
    customer_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[OrderRead]:
    orders = await OrderService(session).repo.list_orders(
        status=status_filter,
        customer_id=customer_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return [OrderRead.model_validate(o) for o in orders]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Creates the order and its items. Order number, item totals and GST are computed server-side.",
    dependencies=[MANAGE],
)
async def create_order(payload: OrderCreate, session: AsyncSession = Depends(get_async_session)) -> OrderRead:
    return OrderRead.model_validate(await OrderService(session).create_order(payload))


# PUBLIC_INTERFACE
@router.get("/{order_id}", response_model=OrderRead, summary="Get order", dependencies=[VIEW])
async def get_order(order_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> OrderRead:
    return OrderRead.model_validate(await OrderService(session).get(order_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{order_id}",
    response_model=OrderRead,
    summary="Update order",
    description="Header fields are merged; items, when given, replace the existing items.",
    dependencies=[MANAGE],
)
async def update_order(
    payload: OrderUpdate,
    order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    return OrderRead.model_validate(await OrderService(session).update_order(order_id, payload))


# PUBLIC_INTERFACE
@router.put("/{order_id}/status", response_model=OrderRead, summary="Change order status", dependencies=[STATUS])
async def update_order_status(
    payload: OrderStatusUpdate,
    order_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    return OrderRead.model_validate(await OrderService(session).update_status(order_id, payload.status))


# PUBLIC_INTERFACE
@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete order",
    description="Deletes the order with its items and batch assignments.",
    dependencies=[MANAGE],
)
async def delete_order(order_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await OrderService(session).delete_order(order_id)


# PUBLIC_INTERFACE
@router.get("/{order_id}/sizes", response_model=OrderSizesRead, summary="Order size totals", dependencies=[VIEW])
async def get_order_sizes(
    order_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> OrderSizesRead:
    return await OrderService(session).sizes(order_id)


# PUBLIC_INTERFACE
@router.get(
    "/{order_id}/production-status",
    response_model=OrderProductionStatus,
    summary="Order production status",
    description="Per-size ordered, cut, batch-assigned, picked and QC quantities.",
    dependencies=[VIEW],
)
async def get_production_status(
    order_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> OrderProductionStatus:
    return await OrderService(session).production_status(order_id)

from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, NotFoundError
from garment_erp.db.models.dispatch import DispatchOrder, DispatchOrderItem
from garment_erp.repositories.dispatch import PENDING_STATUSES, DispatchRepository
from garment_erp.repositories.production import BatchAssignmentRepository
from garment_erp.repositories.quality import QcReviewRepository
from garment_erp.repositories.sales import CustomerRepository, OrderRepository
from garment_erp.schemas.dispatch import DispatchableOrder, DispatchCreate, DispatchStatusUpdate
from garment_erp.services.base import BaseService
from garment_erp.services.documents import ChallanData
from garment_erp.services.pricing import next_daily_number
from garment_erp.services.sizes import PICKER_SIZE_ORDER, sort_sizes

logger = logging.getLogger(__name__)

DISPATCH_TABLE = "dispatch_orders"


class DispatchService(BaseService):
    """Shipping of QC-approved pieces, bounded by what has not shipped yet."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = DispatchRepository(session)
        self.orders = OrderRepository(session)

    async def get(self, dispatch_id: UUID) -> DispatchOrder:
        dispatch = await self.repo.get(dispatch_id)
        if not dispatch:
            raise NotFoundError("Dispatch not found")
        return dispatch

    async def _approved_quantity(self, order_id: UUID) -> int:
        assignments = await BatchAssignmentRepository(self.session).list_assignments(order_id=order_id)
        reviews = await QcReviewRepository(self.session).for_assignments(a.id for a in assignments)
        return sum(int(r.approved_quantity or 0) for r in reviews)

    # PUBLIC_INTERFACE
    async def dispatchable(self, order_id: UUID, exclude_dispatch_id: Optional[UUID] = None) -> DispatchableOrder:
        """QC-approved pieces of the order and how many of them are still unshipped."""
        if not await self.orders.get(order_id):
            raise NotFoundError("Order not found")
        approved = await self._approved_quantity(order_id)
        dispatched = sum((await self.repo.dispatched_by_size(order_id, exclude_dispatch_id)).values())
        return DispatchableOrder(
            order_id=order_id,
            approved_quantity=approved,
            dispatched_quantity=dispatched,
            available_quantity=max(0, approved - dispatched),
        )

    # PUBLIC_INTERFACE
    async def create_dispatch(self, payload: DispatchCreate, today: Optional[date] = None) -> DispatchOrder:
        order = await self.orders.get(payload.order_id)
        if not order:
            raise NotFoundError("Order not found")
        items = [i for i in payload.items if i.quantity > 0]
        total = sum(i.quantity for i in items)
        if total <= 0:
            raise BusinessRuleError("Enter at least one quantity to dispatch")
        available = await self.dispatchable(order.id)
        if total > available.available_quantity:
            raise BusinessRuleError(
                f"Dispatch quantity {total} exceeds the {available.available_quantity} approved pieces not yet dispatched",
                available.model_dump(mode="json"),
            )

        address = payload.delivery_address
        if not address:
            customer = await CustomerRepository(self.session).get(order.customer_id)
            address = customer.address if customer else None

        today = today or date.today()
        number = next_daily_number(
            "DSP", await self.repo.last_number_with_prefix(f"DSP-{today.strftime('%Y%m%d')}-"), today
        )
        dispatch = DispatchOrder(
            dispatch_number=number,
            order_id=order.id,
            dispatch_date=payload.dispatch_date or today,
            status="pending",
            courier_name=payload.courier_name,
            tracking_number=payload.tracking_number,
            delivery_address=address,
            estimated_delivery=payload.estimated_delivery,
            notes=payload.notes,
        )
        dispatch.items = [DispatchOrderItem(order_id=order.id, size_name=i.size_name, quantity=i.quantity) for i in items]
        await self.repo.add(dispatch)
        await self.repo.commit()
        logger.info("Created dispatch %s for order %s (%d pieces)", number, order.order_number, total)
        self.invalidate("dashboard_metrics")
        await self.publish_change(DISPATCH_TABLE, "INSERT", dispatch)
        return dispatch

    # PUBLIC_INTERFACE
    async def update_status(
        self, dispatch_id: UUID, payload: DispatchStatusUpdate, today: Optional[date] = None
    ) -> DispatchOrder:
        """Move a dispatch along; delivery stamps actual_delivery."""
        dispatch = await self.get(dispatch_id)
        dispatch.status = payload.status
        if payload.courier_name is not None:
            dispatch.courier_name = payload.courier_name
        if payload.tracking_number is not None:
            dispatch.tracking_number = payload.tracking_number
        if payload.status == "delivered":
            dispatch.actual_delivery = today or date.today()
        await self.repo.commit()
        self.invalidate("dashboard_metrics")
        await self.publish_change(DISPATCH_TABLE, "UPDATE", dispatch)
        return dispatch

    # PUBLIC_INTERFACE
    async def delete_dispatch(self, dispatch_id: UUID) -> None:
        dispatch = await self.get(dispatch_id)
        if dispatch.status not in PENDING_STATUSES:
            raise BusinessRuleError("Only pending or packed dispatches can be deleted")
        await self.repo.delete(dispatch)
        self.invalidate("dashboard_metrics")
        await self.publish_change(DISPATCH_TABLE, "DELETE", dispatch)

    # PUBLIC_INTERFACE
    async def challan_data(self, dispatch_id: UUID) -> ChallanData:
        dispatch = await self.get(dispatch_id)
        order = await self.orders.get(dispatch.order_id)
        customers = await self.orders.customer_names([order.customer_id]) if order else {}
        quantities = {i.size_name: int(i.quantity or 0) for i in dispatch.items}
        return ChallanData(
            dispatch_number=dispatch.dispatch_number,
            dispatch_date=dispatch.dispatch_date,
            order_number=order.order_number if order else "",
            customer_name=customers.get(order.customer_id) if order else None,
            delivery_address=dispatch.delivery_address,
            courier_name=dispatch.courier_name,
            tracking_number=dispatch.tracking_number,
            approved_quantity=await self._approved_quantity(dispatch.order_id),
            items=[(s, quantities[s]) for s in sort_sizes(quantities, reference=PICKER_SIZE_ORDER)],
            notes=dispatch.notes,
        )

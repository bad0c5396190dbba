from __future__ import annotations

from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select

from garment_erp.db.models.dispatch import DispatchOrder, DispatchOrderItem
from .base import CrudRepository

PENDING_STATUSES = ("pending", "packed")
COMPLETED_STATUSES = ("shipped", "delivered")


class DispatchRepository(CrudRepository[DispatchOrder]):
    """Repository for dispatch orders (items load with the dispatch)."""
    model = DispatchOrder
    search_columns = ("dispatch_number", "courier_name", "tracking_number")

    async def list_by_statuses(
        self, statuses: Sequence[str], *, order_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[DispatchOrder]:
        stmt = select(DispatchOrder).where(DispatchOrder.status.in_(list(statuses)))
        if order_id:
            stmt = stmt.where(DispatchOrder.order_id == order_id)
        stmt = stmt.order_by(DispatchOrder.created_at.desc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def dispatched_by_size(self, order_id: UUID, exclude_dispatch_id: Optional[UUID] = None) -> Dict[str, int]:
        stmt = (
            select(DispatchOrderItem.size_name, func.coalesce(func.sum(DispatchOrderItem.quantity), 0))
            .where(DispatchOrderItem.order_id == order_id)
            .group_by(DispatchOrderItem.size_name)
        )
        if exclude_dispatch_id:
            stmt = stmt.where(DispatchOrderItem.dispatch_order_id != exclude_dispatch_id)
        res = await self.execute(stmt)
        return {row[0]: int(row[1] or 0) for row in res.all()}

    async def last_number_with_prefix(self, prefix: str) -> Optional[str]:
        stmt = (
            select(DispatchOrder.dispatch_number)
            .where(DispatchOrder.dispatch_number.like(f"{prefix}%"))
            .order_by(DispatchOrder.dispatch_number.desc())
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)

    async def count_by_statuses(self, statuses: Sequence[str]) -> int:
        res = await self.execute(select(func.count(DispatchOrder.id)).where(DispatchOrder.status.in_(list(statuses))))
        return int(res.scalar_one())

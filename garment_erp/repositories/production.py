from __future__ import annotations

from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select

from garment_erp.db.models.production import (
    Batch,
    CuttingProgress,
    FabricUsageRecord,
    OrderBatchAssignment,
    OrderBatchSizeDistribution,
    OrderCuttingAssignment,
)
from garment_erp.db.models.quality import QcReview
from .base import BaseRepository, CrudRepository


class BatchRepository(CrudRepository[Batch]):
    """Repository for tailoring batches."""
    model = Batch
    search_columns = ("batch_name", "batch_code", "batch_leader_name")
    order_by = ("batch_name",)

    async def list_available(self) -> List[Batch]:
        """Active batches with spare capacity."""
        stmt = (
            select(Batch)
            .where(Batch.status == "active")
            .where(Batch.max_capacity - Batch.current_capacity > 0)
            .order_by(Batch.batch_name)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def names(self, batch_ids: Iterable[UUID]) -> Dict[UUID, Batch]:
        ids = list(set(batch_ids))
        if not ids:
            return {}
        res = await self.scalars(select(Batch).where(Batch.id.in_(ids)))
        return {b.id: b for b in res}


class BatchAssignmentRepository(BaseRepository):
    """Order-to-batch assignments and their per-size distributions."""

    async def get(self, assignment_id: UUID) -> Optional[OrderBatchAssignment]:
        return await self.session.get(OrderBatchAssignment, assignment_id)

    async def list_assignments(
        self,
        *,
        order_id: Optional[UUID] = None,
        batch_id: Optional[UUID] = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> List[OrderBatchAssignment]:
        stmt = select(OrderBatchAssignment)
        if order_id:
            stmt = stmt.where(OrderBatchAssignment.order_id == order_id)
        if batch_id:
            stmt = stmt.where(OrderBatchAssignment.batch_id == batch_id)
        stmt = stmt.order_by(OrderBatchAssignment.created_at.desc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def find_for_order_and_batch(self, order_id: UUID, batch_id: UUID) -> Optional[OrderBatchAssignment]:
        stmt = (
            select(OrderBatchAssignment)
            .where(OrderBatchAssignment.order_id == order_id, OrderBatchAssignment.batch_id == batch_id)
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)

    async def distributions(self, assignment_ids: Iterable[UUID]) -> List[OrderBatchSizeDistribution]:
        ids = list(assignment_ids)
        if not ids:
            return []
        stmt = select(OrderBatchSizeDistribution).where(
            OrderBatchSizeDistribution.order_batch_assignment_id.in_(ids)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def distributions_by_assignment(
        self, assignment_ids: Iterable[UUID]
    ) -> Dict[UUID, List[OrderBatchSizeDistribution]]:
        grouped: Dict[UUID, List[OrderBatchSizeDistribution]] = {}
        for dist in await self.distributions(assignment_ids):
            grouped.setdefault(dist.order_batch_assignment_id, []).append(dist)
        return grouped

    async def delete_for_order(self, order_id: UUID) -> int:
        """Delete an order's assignments together with their distributions and QC reviews."""
        stmt = select(OrderBatchAssignment.id).where(OrderBatchAssignment.order_id == order_id)
        ids = list(await self.scalars(stmt))
        if not ids:
            return 0
        await self.execute(delete(QcReview).where(QcReview.order_batch_assignment_id.in_(ids)))
        await self.execute(
            delete(OrderBatchSizeDistribution).where(OrderBatchSizeDistribution.order_batch_assignment_id.in_(ids))
        )
        await self.execute(delete(OrderBatchAssignment).where(OrderBatchAssignment.id.in_(ids)))
        return len(ids)

    async def total_distributed(self) -> int:
        res = await self.execute(select(func.coalesce(func.sum(OrderBatchSizeDistribution.quantity), 0)))
        return int(res.scalar_one() or 0)

    async def total_picked(self) -> int:
        res = await self.execute(select(func.coalesce(func.sum(OrderBatchSizeDistribution.picked_quantity), 0)))
        return int(res.scalar_one() or 0)


class CuttingRepository(BaseRepository):
    """Cutting master assignments, per-order cutting progress and fabric usage."""

    async def get_assignment(self, assignment_id: UUID) -> Optional[OrderCuttingAssignment]:
        return await self.session.get(OrderCuttingAssignment, assignment_id)

    async def list_assignments(
        self,
        *,
        order_id: Optional[UUID] = None,
        cutting_master_id: Optional[UUID] = None,
        status: Optional[str] = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> List[OrderCuttingAssignment]:
        stmt = select(OrderCuttingAssignment)
        if order_id:
            stmt = stmt.where(OrderCuttingAssignment.order_id == order_id)
        if cutting_master_id:
            stmt = stmt.where(OrderCuttingAssignment.cutting_master_id == cutting_master_id)
        if status:
            stmt = stmt.where(OrderCuttingAssignment.status == status)
        stmt = stmt.order_by(OrderCuttingAssignment.created_at.asc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def find_for_master(self, order_id: UUID, cutting_master_id: UUID) -> Optional[OrderCuttingAssignment]:
        stmt = (
            select(OrderCuttingAssignment)
            .where(
                OrderCuttingAssignment.order_id == order_id,
                OrderCuttingAssignment.cutting_master_id == cutting_master_id,
            )
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)

    async def open_assignments(self) -> List[OrderCuttingAssignment]:
        stmt = select(OrderCuttingAssignment).where(OrderCuttingAssignment.status != "completed")
        res = await self.scalars(stmt)
        return list(res)

    async def get_progress(self, order_id: UUID) -> Optional[CuttingProgress]:
        stmt = select(CuttingProgress).where(CuttingProgress.order_id == order_id)
        return await self.scalar_one_or_none(stmt)

    async def progress_for_orders(self, order_ids: Iterable[UUID]) -> Dict[UUID, CuttingProgress]:
        ids = list(order_ids)
        if not ids:
            return {}
        res = await self.scalars(select(CuttingProgress).where(CuttingProgress.order_id.in_(ids)))
        return {p.order_id: p for p in res}

    async def fabric_usage_for_order(self, order_id: UUID) -> List[FabricUsageRecord]:
        stmt = (
            select(FabricUsageRecord)
            .where(FabricUsageRecord.order_id == order_id)
            .order_by(FabricUsageRecord.created_at.desc())
        )
        res = await self.scalars(stmt)
        return list(res)

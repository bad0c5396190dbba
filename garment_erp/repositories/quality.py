from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select

from garment_erp.db.models.quality import QcReview
from .base import BaseRepository


class QcReviewRepository(BaseRepository):
    """Repository for per-size QC reviews of batch assignments."""

    async def for_assignments(self, assignment_ids: Iterable[UUID]) -> List[QcReview]:
        ids = list(assignment_ids)
        if not ids:
            return []
        res = await self.scalars(select(QcReview).where(QcReview.order_batch_assignment_id.in_(ids)))
        return list(res)

    async def by_assignment_and_size(self, assignment_ids: Iterable[UUID]) -> Dict[Tuple[UUID, str], QcReview]:
        return {(r.order_batch_assignment_id, r.size_name): r for r in await self.for_assignments(assignment_ids)}

    async def get(self, assignment_id: UUID, size_name: str) -> Optional[QcReview]:
        stmt = select(QcReview).where(
            QcReview.order_batch_assignment_id == assignment_id, QcReview.size_name == size_name
        )
        return await self.scalar_one_or_none(stmt)

    async def totals(self) -> Tuple[int, int]:
        """(approved, rejected) across all reviews."""
        res = await self.execute(
            select(
                func.coalesce(func.sum(QcReview.approved_quantity), 0),
                func.coalesce(func.sum(QcReview.rejected_quantity), 0),
            )
        )
        approved, rejected = res.one()
        return int(approved or 0), int(rejected or 0)

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select

from garment_erp.db.models.inventory import (
    AdjustmentReason,
    InventoryAdjustment,
    InventoryItem,
    InventoryLog,
)
from .base import BaseRepository, CrudRepository


class InventoryItemRepository(CrudRepository[InventoryItem]):
    """Repository for the product master (one row per SKU)."""
    model = InventoryItem
    search_columns = ("sku", "item_name", "category", "brand", "color")
    order_by = ("item_name",)

    async def get_by_sku(self, sku: str) -> Optional[InventoryItem]:
        stmt = select(InventoryItem).where(func.lower(InventoryItem.sku) == sku.strip().lower())
        return await self.scalar_one_or_none(stmt)

    async def get_many(self, item_ids: Iterable[UUID]) -> List[InventoryItem]:
        ids = list(item_ids)
        if not ids:
            return []
        res = await self.scalars(select(InventoryItem).where(InventoryItem.id.in_(ids)))
        by_id = {item.id: item for item in res}
        return [by_id[i] for i in ids if i in by_id]

    async def count_out_of_stock(self) -> int:
        res = await self.execute(select(func.count(InventoryItem.id)).where(InventoryItem.current_stock <= 0))
        return int(res.scalar_one())


class AdjustmentReasonRepository(CrudRepository[AdjustmentReason]):
    model = AdjustmentReason
    search_columns = ("reason_name",)
    order_by = ("reason_name",)


class InventoryAdjustmentRepository(CrudRepository[InventoryAdjustment]):
    model = InventoryAdjustment
    order_by = ("-adjustment_date",)


class InventoryLogRepository(BaseRepository):
    """Append-only stock movement log."""

    async def list_logs(
        self,
        *,
        item_id: Optional[UUID] = None,
        item_type: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[InventoryLog]:
        stmt = select(InventoryLog)
        if item_id:
            stmt = stmt.where(InventoryLog.item_id == item_id)
        if item_type:
            stmt = stmt.where(InventoryLog.item_type == item_type)
        if reference_type:
            stmt = stmt.where(InventoryLog.reference_type == reference_type)
        if reference_id:
            stmt = stmt.where(InventoryLog.reference_id == reference_id)
        stmt = stmt.order_by(InventoryLog.created_at.desc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def log(self, **values) -> InventoryLog:
        entry = InventoryLog(**values)
        await self.add(entry)
        return entry

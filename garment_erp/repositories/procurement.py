from __future__ import annotations

from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy import func, select

from garment_erp.db.models.procurement import GoodsReceiptNote, GrnItem, PurchaseOrder
from .base import CrudRepository


class PurchaseOrderRepository(CrudRepository[PurchaseOrder]):
    """Repository for purchase orders (items load with the PO)."""
    model = PurchaseOrder
    search_columns = ("po_number", "notes")

    async def last_number_with_prefix(self, prefix: str) -> Optional[str]:
        stmt = (
            select(PurchaseOrder.po_number)
            .where(PurchaseOrder.po_number.like(f"{prefix}%"))
            .order_by(PurchaseOrder.po_number.desc())
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)


class GrnRepository(CrudRepository[GoodsReceiptNote]):
    """Repository for goods receipt notes."""
    model = GoodsReceiptNote
    search_columns = ("grn_number", "received_by_name", "notes")

    async def last_number_with_prefix(self, prefix: str) -> Optional[str]:
        stmt = (
            select(GoodsReceiptNote.grn_number)
            .where(GoodsReceiptNote.grn_number.like(f"{prefix}%"))
            .order_by(GoodsReceiptNote.grn_number.desc())
            .limit(1)
        )
        return await self.scalar_one_or_none(stmt)

    async def received_by_po_item(self, po_item_ids: Iterable[UUID], exclude_grn_id: Optional[UUID] = None) -> Dict[UUID, float]:
        """Quantity already received per purchase order line across GRNs."""
        ids = list(po_item_ids)
        if not ids:
            return {}
        stmt = (
            select(GrnItem.po_item_id, func.coalesce(func.sum(GrnItem.received_quantity), 0))
            .where(GrnItem.po_item_id.in_(ids))
            .group_by(GrnItem.po_item_id)
        )
        if exclude_grn_id:
            stmt = stmt.where(GrnItem.grn_id != exclude_grn_id)
        res = await self.execute(stmt)
        return {row[0]: float(row[1] or 0) for row in res.all()}

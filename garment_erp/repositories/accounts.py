from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select

from garment_erp.db.models.accounts import Invoice
from .base import CrudRepository


class InvoiceRepository(CrudRepository[Invoice]):
    """Repository for invoices (items load with the invoice)."""
    model = Invoice
    search_columns = ("invoice_number", "notes")

    async def last_invoice_number(self) -> Optional[str]:
        stmt = select(Invoice.invoice_number).order_by(Invoice.created_at.desc()).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def revenue(self) -> float:
        res = await self.execute(select(func.coalesce(func.sum(Invoice.total_amount), 0)))
        return float(res.scalar_one() or 0)

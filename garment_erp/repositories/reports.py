from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import Select, func, select

from garment_erp.db.models.accounts import Invoice
from garment_erp.db.models.inventory import InventoryItem
from garment_erp.db.models.production import (
    CuttingProgress,
    OrderBatchAssignment,
    OrderBatchSizeDistribution,
)
from garment_erp.db.models.quality import QcReview
from garment_erp.db.models.sales import Customer, Order, OrderItem
from .base import BaseRepository


class ReportRepository(BaseRepository):
    """Flat row queries behind the exported reports."""

    async def _fetch_all(self, stmt: Select) -> Sequence:
        res = await self.execute(stmt)
        return list(res.all())

    async def order_rows(
        self,
        *,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List:
        quantity_sub = (
            select(func.coalesce(func.sum(OrderItem.quantity), 0))
            .where(OrderItem.order_id == Order.id)
            .scalar_subquery()
        )
        stmt = (
            select(
                Order.order_number,
                Customer.company_name,
                Order.order_date,
                Order.expected_delivery_date,
                Order.status,
                Order.sales_manager,
                quantity_sub.label("total_quantity"),
                Order.total_amount,
                Order.tax_amount,
                Order.final_amount,
                Order.advance_amount,
                Order.balance_amount,
            )
            .outerjoin(Customer, Customer.id == Order.customer_id)
            .order_by(Order.order_date.desc(), Order.order_number.desc())
        )
        if status:
            stmt = stmt.where(Order.status == status)
        if date_from:
            stmt = stmt.where(Order.order_date >= date_from)
        if date_to:
            stmt = stmt.where(Order.order_date <= date_to)
        return await self._fetch_all(stmt)

    async def production_rows(self, *, status: Optional[str] = None) -> List:
        """Per order: ordered, cut, distributed, picked, approved and rejected pieces."""
        ordered_sub = (
            select(func.coalesce(func.sum(OrderItem.quantity), 0))
            .where(OrderItem.order_id == Order.id)
            .scalar_subquery()
        )
        cut_sub = (
            select(func.coalesce(func.max(CuttingProgress.cut_quantity), 0))
            .where(CuttingProgress.order_id == Order.id)
            .scalar_subquery()
        )
        distributed_sub = (
            select(func.coalesce(func.sum(OrderBatchSizeDistribution.quantity), 0))
            .join(
                OrderBatchAssignment,
                OrderBatchAssignment.id == OrderBatchSizeDistribution.order_batch_assignment_id,
            )
            .where(OrderBatchAssignment.order_id == Order.id)
            .scalar_subquery()
        )
        picked_sub = (
            select(func.coalesce(func.sum(OrderBatchSizeDistribution.picked_quantity), 0))
            .join(
                OrderBatchAssignment,
                OrderBatchAssignment.id == OrderBatchSizeDistribution.order_batch_assignment_id,
            )
            .where(OrderBatchAssignment.order_id == Order.id)
            .scalar_subquery()
        )
        approved_sub = (
            select(func.coalesce(func.sum(QcReview.approved_quantity), 0))
            .join(OrderBatchAssignment, OrderBatchAssignment.id == QcReview.order_batch_assignment_id)
            .where(OrderBatchAssignment.order_id == Order.id)
            .scalar_subquery()
        )
        rejected_sub = (
            select(func.coalesce(func.sum(QcReview.rejected_quantity), 0))
            .join(OrderBatchAssignment, OrderBatchAssignment.id == QcReview.order_batch_assignment_id)
            .where(OrderBatchAssignment.order_id == Order.id)
            .scalar_subquery()
        )
        stmt = (
            select(
                Order.order_number,
                Customer.company_name,
                Order.status,
                Order.expected_delivery_date,
                ordered_sub.label("ordered"),
                cut_sub.label("cut"),
                distributed_sub.label("distributed"),
                picked_sub.label("picked"),
                approved_sub.label("approved"),
                rejected_sub.label("rejected"),
            )
            .outerjoin(Customer, Customer.id == Order.customer_id)
            .order_by(Order.order_date.desc(), Order.order_number.desc())
        )
        if status:
            stmt = stmt.where(Order.status == status)
        return await self._fetch_all(stmt)

    async def inventory_rows(self, *, category: Optional[str] = None) -> List[InventoryItem]:
        stmt = select(InventoryItem).order_by(InventoryItem.item_name)
        if category:
            stmt = stmt.where(InventoryItem.category == category)
        res = await self.scalars(stmt)
        return list(res)

    async def invoice_rows(
        self,
        *,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List:
        stmt = (
            select(
                Invoice.invoice_number,
                Customer.company_name,
                Invoice.invoice_date,
                Invoice.due_date,
                Invoice.status,
                Invoice.subtotal,
                Invoice.tax_amount,
                Invoice.total_amount,
                Invoice.paid_amount,
                Invoice.balance_amount,
            )
            .outerjoin(Customer, Customer.id == Invoice.customer_id)
            .order_by(Invoice.invoice_date.desc(), Invoice.invoice_number.desc())
        )
        if status:
            stmt = stmt.where(Invoice.status == status)
        if date_from:
            stmt = stmt.where(Invoice.invoice_date >= date_from)
        if date_to:
            stmt = stmt.where(Invoice.invoice_date <= date_to)
        return await self._fetch_all(stmt)

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select

from garment_erp.db.models.accounts import Invoice
from garment_erp.db.models.sales import Customer, Order
from .base import CrudRepository


class CustomerRepository(CrudRepository[Customer]):
    """Repository for customers."""
    model = Customer
    search_columns = ("company_name", "contact_person", "phone")
    order_by = ("company_name",)

    async def order_stats(self) -> Dict[UUID, dict]:
        """Per customer: order count, last order date and sum of order final amounts."""
        stmt = select(
            Order.customer_id,
            func.count(Order.id),
            func.max(Order.order_date),
            func.coalesce(func.sum(Order.final_amount), 0),
        ).group_by(Order.customer_id)
        res = await self.execute(stmt)
        return {
            row[0]: {"total_orders": int(row[1]), "last_order_date": row[2], "order_value": float(row[3] or 0)}
            for row in res.all()
        }

    async def invoice_totals(self) -> Dict[UUID, float]:
        stmt = select(Invoice.customer_id, func.coalesce(func.sum(Invoice.total_amount), 0)).group_by(Invoice.customer_id)
        res = await self.execute(stmt)
        return {row[0]: float(row[1] or 0) for row in res.all()}


class OrderRepository(CrudRepository[Order]):
    """Repository for sales orders (items load with the order)."""
    model = Order
    search_columns = ("order_number", "sales_manager", "notes")

    async def list_orders(
        self,
        *,
        status: Optional[str],
        customer_id: Optional[UUID],
        search: Optional[str],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int,
        offset: int,
    ) -> List[Order]:
        stmt = select(Order).outerjoin(Customer, Customer.id == Order.customer_id)
        if status:
            stmt = stmt.where(Order.status == status)
        if customer_id:
            stmt = stmt.where(Order.customer_id == customer_id)
        if date_from:
            stmt = stmt.where(Order.order_date >= date_from)
        if date_to:
            stmt = stmt.where(Order.order_date <= date_to)
        if search and search.strip():
            like = f"%{search.strip()}%"
            stmt = stmt.where(or_(Order.order_number.ilike(like), Customer.company_name.ilike(like)))
        stmt = stmt.order_by(Order.created_at.desc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def last_order_number(self) -> Optional[str]:
        stmt = select(Order.order_number).order_by(Order.created_at.desc(), Order.order_number.desc()).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def customer_names(self, customer_ids) -> Dict[UUID, str]:
        ids = list({cid for cid in customer_ids if cid})
        if not ids:
            return {}
        res = await self.execute(select(Customer.id, Customer.company_name).where(Customer.id.in_(ids)))
        return {row[0]: row[1] for row in res.all()}

    async def count_by_status(self) -> Dict[str, int]:
        res = await self.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
        return {row[0]: int(row[1]) for row in res.all()}

    async def get_many(self, order_ids) -> Dict[UUID, Order]:
        ids = list({oid for oid in order_ids if oid})
        if not ids:
            return {}
        res = await self.scalars(select(Order).where(Order.id.in_(ids)))
        return {o.id: o for o in res}

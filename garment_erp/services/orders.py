from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, NotFoundError
from garment_erp.db.models.sales import Order, OrderItem
from garment_erp.repositories.production import BatchAssignmentRepository, CuttingRepository
from garment_erp.repositories.quality import QcReviewRepository
from garment_erp.repositories.sales import CustomerRepository, OrderRepository
from garment_erp.schemas.production import CuttingAssignmentRead, OrderProductionStatus, SizeProductionStatus
from garment_erp.schemas.sales import OrderCreate, OrderItemCreate, OrderSizesRead, OrderUpdate, SizeQuantity
from garment_erp.services.base import BaseService
from garment_erp.services.pricing import calculate_order_totals, calculate_size_based_total, next_order_number
from garment_erp.services.sizes import aggregate_sizes, sort_size_quantities, sort_sizes

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"


def order_sizes(order: Order) -> Dict[str, int]:
    """Total pieces per size across all items of the order (zero sizes dropped)."""
    return aggregate_sizes(item.sizes_quantities for item in order.items)


def order_total_quantity(order: Order) -> int:
    return sum(int(item.quantity or 0) for item in order.items)


def _build_item(payload: OrderItemCreate) -> OrderItem:
    sizes: Dict[str, int] = {}
    for size, qty in payload.sizes_quantities.items():
        if qty < 0:
            raise BusinessRuleError(f"Quantity for size {size} cannot be negative", {"size": size})
        if size.strip():
            sizes[size.strip()] = int(qty)
    prices = {k: float(v) for k, v in (payload.size_prices or {}).items() if k in sizes} or None
    return OrderItem(
        product_category_id=payload.product_category_id,
        product_description=payload.product_description,
        fabric_id=payload.fabric_id,
        color=payload.color,
        gsm=payload.gsm,
        size_type_id=payload.size_type_id,
        sizes_quantities=sizes,
        size_prices=prices,
        quantity=sum(sizes.values()),
        unit_price=payload.unit_price,
        total_price=calculate_size_based_total(sizes, prices, payload.unit_price),
        gst_rate=payload.gst_rate,
        remarks=payload.remarks,
        image_urls=list(payload.image_urls),
    )


def _apply_totals(order: Order) -> None:
    totals = calculate_order_totals(
        (item.total_price for item in order.items), order.gst_rate or 0, order.advance_amount or 0
    )
    order.total_amount = totals.total_amount
    order.tax_amount = totals.tax_amount
    order.final_amount = totals.final_amount
    order.balance_amount = totals.balance_amount


class OrderService(BaseService):
    """Sales orders: numbering, item pricing, header totals and production progress."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = OrderRepository(session)
        self.customers = CustomerRepository(session)

    async def get(self, order_id: UUID) -> Order:
        order = await self.repo.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def _check_customer(self, customer_id: UUID) -> None:
        if not await self.customers.get(customer_id):
            raise BusinessRuleError("Customer does not exist", {"customer_id": str(customer_id)})

    async def _after_write(self, event: str, order: Order) -> None:
        self.invalidate("orders", "order_items", "dashboard_metrics")
        await self.publish_change(ORDERS_TABLE, event, order)

    # PUBLIC_INTERFACE
    async def create_order(self, payload: OrderCreate, today: Optional[date] = None) -> Order:
        """Create an order with its items; the number and all totals are computed here."""
        await self._check_customer(payload.customer_id)
        today = today or date.today()
        number = next_order_number(await self.repo.last_order_number(), today)

        order = Order(
            order_number=number,
            customer_id=payload.customer_id,
            order_date=payload.order_date or today,
            expected_delivery_date=payload.expected_delivery_date,
            status=payload.status,
            sales_manager=payload.sales_manager,
            gst_rate=payload.gst_rate,
            advance_amount=payload.advance_amount,
            notes=payload.notes,
        )
        order.items = [_build_item(item) for item in payload.items]
        _apply_totals(order)
        await self.repo.add(order)
        await self.repo.commit()
        logger.info("Created order %s with %d items", order.order_number, len(order.items))
        await self._after_write("INSERT", order)
        return order

    # PUBLIC_INTERFACE
    async def update_order(self, order_id: UUID, payload: OrderUpdate) -> Order:
        """Update header fields; items, when given, replace the existing ones."""
        order = await self.get(order_id)
        data = payload.model_dump(exclude_unset=True)
        items = data.pop("items", None)
        if data.get("customer_id"):
            await self._check_customer(data["customer_id"])
        for key, value in data.items():
            if value is not None:
                setattr(order, key, value)
        if items is not None:
            if not payload.items:
                raise BusinessRuleError("An order needs at least one item")
            order.items = [_build_item(item) for item in payload.items]
        _apply_totals(order)
        await self.repo.commit()
        await self._after_write("UPDATE", order)
        return order

    # PUBLIC_INTERFACE
    async def update_status(self, order_id: UUID, status: str) -> Order:
        order = await self.get(order_id)
        order.status = status
        await self.repo.commit()
        logger.info("Order %s moved to %s", order.order_number, status)
        await self._after_write("UPDATE", order)
        return order

    # PUBLIC_INTERFACE
    async def delete_order(self, order_id: UUID) -> None:
        """Delete an order together with its items and batch assignments."""
        order = await self.get(order_id)
        await BatchAssignmentRepository(self.session).delete_for_order(order.id)
        await self.repo.delete(order, commit=False)
        await self.repo.commit()
        self.invalidate("batches", "production_orders")
        await self._after_write("DELETE", order)

    # PUBLIC_INTERFACE
    async def sizes(self, order_id: UUID) -> OrderSizesRead:
        """Aggregated, sorted size totals of all items."""
        order = await self.get(order_id)
        pairs = sort_size_quantities(order_sizes(order))
        return OrderSizesRead(
            order_id=order.id,
            total_quantity=sum(q for _, q in pairs),
            sizes=[SizeQuantity(size_name=s, quantity=q) for s, q in pairs],
        )

    # PUBLIC_INTERFACE
    async def production_status(self, order_id: UUID) -> OrderProductionStatus:
        """
        Per-size progress of an order: ordered, cut, assigned to batches,
        picked, and QC approved/rejected, plus the cutting assignments.
        """
        order = await self.get(order_id)
        ordered = order_sizes(order)

        cutting = CuttingRepository(self.session)
        progress = await cutting.get_progress(order.id)
        cut = {k: int(v or 0) for k, v in ((progress.cut_quantities_by_size if progress else None) or {}).items()}

        batches = BatchAssignmentRepository(self.session)
        assignment_ids = [a.id for a in await batches.list_assignments(order_id=order.id)]
        assigned: Dict[str, int] = {}
        picked: Dict[str, int] = {}
        for dist in await batches.distributions(assignment_ids):
            assigned[dist.size_name] = assigned.get(dist.size_name, 0) + int(dist.quantity or 0)
            picked[dist.size_name] = picked.get(dist.size_name, 0) + int(dist.picked_quantity or 0)

        approved: Dict[str, int] = {}
        rejected: Dict[str, int] = {}
        for review in await QcReviewRepository(self.session).for_assignments(assignment_ids):
            approved[review.size_name] = approved.get(review.size_name, 0) + int(review.approved_quantity or 0)
            rejected[review.size_name] = rejected.get(review.size_name, 0) + int(review.rejected_quantity or 0)

        all_sizes = set(ordered) | set(cut) | set(assigned)
        rows: List[SizeProductionStatus] = [
            SizeProductionStatus(
                size_name=size,
                ordered=ordered.get(size, 0),
                cut=cut.get(size, 0),
                assigned_to_batches=assigned.get(size, 0),
                picked=picked.get(size, 0),
                approved=approved.get(size, 0),
                rejected=rejected.get(size, 0),
            )
            for size in sort_sizes(all_sizes)
        ]
        return OrderProductionStatus(
            order_id=order.id,
            order_number=order.order_number,
            status=order.status,
            sizes=rows,
            cutting_assignments=[
                CuttingAssignmentRead.model_validate(a) for a in await cutting.list_assignments(order_id=order.id)
            ],
        )

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, NotFoundError
from garment_erp.db.models.accounts import Invoice, InvoiceItem
from garment_erp.db.models.sales import Order
from garment_erp.repositories.accounts import InvoiceRepository
from garment_erp.repositories.sales import CustomerRepository, OrderRepository
from garment_erp.schemas.accounts import (
    GstBreakdown,
    GstBreakdownRow,
    InvoiceCreate,
    InvoiceItemIn,
    InvoiceUpdate,
)
from garment_erp.services.base import BaseService
from garment_erp.services.pricing import (
    calculate_average_unit_price,
    calculate_document_totals,
    calculate_line_amounts,
    next_invoice_number,
)

logger = logging.getLogger(__name__)

INVOICES_TABLE = "invoices"


def _lines_from_order(order: Order) -> List[InvoiceItemIn]:
    lines = []
    for item in order.items:
        if not item.quantity:
            continue
        description = item.product_description
        if item.color:
            description = f"{description} ({item.color})"
        lines.append(
            InvoiceItemIn(
                description=description,
                quantity=item.quantity,
                unit_price=round(
                    calculate_average_unit_price(item.sizes_quantities, item.size_prices, item.unit_price), 2
                ),
                gst_rate=item.gst_rate if item.gst_rate is not None else order.gst_rate,
            )
        )
    return lines


def _build_lines(items: List[InvoiceItemIn]) -> List[InvoiceItem]:
    lines = []
    for item in items:
        amounts = calculate_line_amounts(item.quantity, item.unit_price, item.gst_rate)
        lines.append(
            InvoiceItem(
                description=item.description,
                hsn_code=item.hsn_code,
                quantity=item.quantity,
                unit_price=item.unit_price,
                gst_rate=item.gst_rate,
                total_price=amounts.total_price,
                gst_amount=amounts.gst_amount,
            )
        )
    return lines


def _totals(invoice: Invoice):
    return calculate_document_totals(
        ((calculate_line_amounts(i.quantity, i.unit_price, i.gst_rate), i.gst_rate) for i in invoice.items),
        invoice.paid_amount or 0,
    )


def _apply_totals(invoice: Invoice) -> None:
    totals = _totals(invoice)
    if totals.balance_amount < 0:
        raise BusinessRuleError(
            "Invoice total cannot be lower than the amount already paid",
            {"total_amount": totals.total_amount, "paid_amount": totals.paid_amount},
        )
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.total_amount = totals.total_amount
    invoice.balance_amount = totals.balance_amount


class InvoiceService(BaseService):
    """GST invoices: numbering, line totals, payments and the per-rate tax breakdown."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = InvoiceRepository(session)

    async def get(self, invoice_id: UUID) -> Invoice:
        invoice = await self.repo.get(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    async def _after_write(self, event: str, invoice: Invoice) -> None:
        self.invalidate("invoices", "customers", "dashboard_metrics")
        await self.publish_change(INVOICES_TABLE, event, invoice)

    # PUBLIC_INTERFACE
    async def create_invoice(self, payload: InvoiceCreate, today: Optional[date] = None) -> Invoice:
        """Create an invoice, copying the lines from the order when none are given."""
        order = None
        if payload.order_id:
            order = await OrderRepository(self.session).get(payload.order_id)
            if not order:
                raise NotFoundError("Order not found")
        customer_id = payload.customer_id or (order.customer_id if order else None)
        if customer_id is None:
            raise BusinessRuleError("Select a customer or an order to invoice")
        if not await CustomerRepository(self.session).get(customer_id):
            raise BusinessRuleError("Customer does not exist", {"customer_id": str(customer_id)})

        items = payload.items if payload.items else (_lines_from_order(order) if order else [])
        if not items:
            raise BusinessRuleError("An invoice needs at least one line")

        invoice = Invoice(
            invoice_number=next_invoice_number(await self.repo.last_invoice_number()),
            customer_id=customer_id,
            order_id=order.id if order else None,
            invoice_date=payload.invoice_date or today or date.today(),
            due_date=payload.due_date,
            status=payload.status,
            paid_amount=0,
            notes=payload.notes,
        )
        invoice.items = _build_lines(items)
        _apply_totals(invoice)
        await self.repo.add(invoice)
        await self.repo.commit()
        logger.info("Created invoice %s for %.2f", invoice.invoice_number, invoice.total_amount)
        await self._after_write("INSERT", invoice)
        return invoice

    # PUBLIC_INTERFACE
    async def update_invoice(self, invoice_id: UUID, payload: InvoiceUpdate) -> Invoice:
        invoice = await self.get(invoice_id)
        data = payload.model_dump(exclude_unset=True)
        items = data.pop("items", None)
        for key, value in data.items():
            if value is not None:
                setattr(invoice, key, value)
        if items is not None:
            if not payload.items:
                raise BusinessRuleError("An invoice needs at least one line")
            invoice.items = _build_lines(payload.items)
        _apply_totals(invoice)
        await self.repo.commit()
        await self._after_write("UPDATE", invoice)
        return invoice

    # PUBLIC_INTERFACE
    async def delete_invoice(self, invoice_id: UUID) -> None:
        invoice = await self.get(invoice_id)
        if (invoice.paid_amount or 0) > 0:
            raise BusinessRuleError("Invoices with payments cannot be deleted; cancel them instead")
        await self.repo.delete(invoice)
        await self._after_write("DELETE", invoice)

    # PUBLIC_INTERFACE
    async def record_payment(self, invoice_id: UUID, amount: float) -> Invoice:
        """Apply a payment; overpaying the balance is rejected."""
        invoice = await self.get(invoice_id)
        if invoice.status == "cancelled":
            raise BusinessRuleError("Cannot record a payment on a cancelled invoice")
        balance = round(float(invoice.balance_amount or 0), 2)
        if round(amount, 2) > balance:
            raise BusinessRuleError(
                f"Payment of {amount:.2f} exceeds the balance of {balance:.2f}",
                {"balance_amount": balance, "amount": amount},
            )
        invoice.paid_amount = round(float(invoice.paid_amount or 0) + amount, 2)
        _apply_totals(invoice)
        invoice.status = "paid" if invoice.balance_amount <= 0 else "partially_paid"
        await self.repo.commit()
        logger.info("Payment of %.2f recorded on %s", amount, invoice.invoice_number)
        await self._after_write("UPDATE", invoice)
        return invoice

    # PUBLIC_INTERFACE
    async def gst_breakdown(self, invoice_id: UUID) -> GstBreakdown:
        invoice = await self.get(invoice_id)
        totals = _totals(invoice)
        return GstBreakdown(
            invoice_id=invoice.id,
            rows=[
                GstBreakdownRow(gst_rate=rate, taxable_value=v["taxable_value"], gst_amount=v["gst_amount"])
                for rate, v in totals.gst_breakdown.items()
            ],
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
        )

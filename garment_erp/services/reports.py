from __future__ import annotations

from datetime import date
from typing import Optional

import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.cache import QueryCache, get_query_cache
from garment_erp.repositories.accounts import InvoiceRepository
from garment_erp.repositories.dispatch import COMPLETED_STATUSES, PENDING_STATUSES, DispatchRepository
from garment_erp.repositories.inventory import InventoryItemRepository
from garment_erp.repositories.people import EmployeeRepository
from garment_erp.repositories.reports import ReportRepository
from garment_erp.repositories.sales import CustomerRepository, OrderRepository
from garment_erp.schemas.reports import DashboardSummary
from garment_erp.services.base import BaseService

ORDER_COLUMNS = [
    "order_number",
    "customer",
    "order_date",
    "expected_delivery_date",
    "status",
    "sales_manager",
    "total_quantity",
    "total_amount",
    "tax_amount",
    "final_amount",
    "advance_amount",
    "balance_amount",
]
PRODUCTION_COLUMNS = [
    "order_number",
    "customer",
    "status",
    "expected_delivery_date",
    "ordered",
    "cut",
    "distributed",
    "picked",
    "approved",
    "rejected",
    "cut_percent",
    "qc_pass_rate",
]
INVENTORY_COLUMNS = [
    "sku",
    "item_name",
    "category",
    "color",
    "size",
    "brand",
    "uom",
    "current_stock",
    "unit_price",
    "stock_value",
]
INVOICE_COLUMNS = [
    "invoice_number",
    "customer",
    "invoice_date",
    "due_date",
    "status",
    "subtotal",
    "tax_amount",
    "total_amount",
    "paid_amount",
    "balance_amount",
]


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


class ReportService(BaseService):
    """Tabular reports for export and the cached dashboard summary."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ReportRepository(session)

    # PUBLIC_INTERFACE
    async def orders_report(
        self,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> pd.DataFrame:
        rows = await self.repo.order_rows(status=status, date_from=date_from, date_to=date_to)
        data = []
        for (
            order_number,
            customer,
            order_date,
            expected_delivery_date,
            status_,
            sales_manager,
            total_quantity,
            total_amount,
            tax_amount,
            final_amount,
            advance_amount,
            balance_amount,
        ) in rows:
            data.append(
                {
                    "order_number": order_number,
                    "customer": customer,
                    "order_date": order_date,
                    "expected_delivery_date": expected_delivery_date,
                    "status": status_,
                    "sales_manager": sales_manager,
                    "total_quantity": int(total_quantity or 0),
                    "total_amount": float(total_amount or 0),
                    "tax_amount": float(tax_amount or 0),
                    "final_amount": float(final_amount or 0),
                    "advance_amount": float(advance_amount or 0),
                    "balance_amount": float(balance_amount or 0),
                }
            )
        return pd.DataFrame(data, columns=ORDER_COLUMNS)

    # PUBLIC_INTERFACE
    async def production_report(self, status: Optional[str] = None) -> pd.DataFrame:
        """
        Production progress per order.

        cut_percent is cut over ordered; qc_pass_rate is approved over picked.
        """
        rows = await self.repo.production_rows(status=status)
        data = []
        for order_number, customer, status_, due, ordered, cut, distributed, picked, approved, rejected in rows:
            ordered, cut, picked, approved = int(ordered or 0), int(cut or 0), int(picked or 0), int(approved or 0)
            data.append(
                {
                    "order_number": order_number,
                    "customer": customer,
                    "status": status_,
                    "expected_delivery_date": due,
                    "ordered": ordered,
                    "cut": cut,
                    "distributed": int(distributed or 0),
                    "picked": picked,
                    "approved": approved,
                    "rejected": int(rejected or 0),
                    "cut_percent": _percent(cut, ordered),
                    "qc_pass_rate": _percent(approved, picked),
                }
            )
        return pd.DataFrame(data, columns=PRODUCTION_COLUMNS)

    # PUBLIC_INTERFACE
    async def inventory_report(self, category: Optional[str] = None) -> pd.DataFrame:
        data = []
        for item in await self.repo.inventory_rows(category=category):
            stock = float(item.current_stock or 0)
            price = float(item.unit_price) if item.unit_price is not None else None
            data.append(
                {
                    "sku": item.sku,
                    "item_name": item.item_name,
                    "category": item.category,
                    "color": item.color,
                    "size": item.size,
                    "brand": item.brand,
                    "uom": item.uom,
                    "current_stock": stock,
                    "unit_price": price,
                    "stock_value": round(stock * price, 2) if price is not None else None,
                }
            )
        return pd.DataFrame(data, columns=INVENTORY_COLUMNS)

    # PUBLIC_INTERFACE
    async def invoices_report(
        self,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> pd.DataFrame:
        rows = await self.repo.invoice_rows(status=status, date_from=date_from, date_to=date_to)
        data = [
            {
                "invoice_number": number,
                "customer": customer,
                "invoice_date": invoice_date,
                "due_date": due_date,
                "status": status_,
                "subtotal": float(subtotal or 0),
                "tax_amount": float(tax or 0),
                "total_amount": float(total or 0),
                "paid_amount": float(paid or 0),
                "balance_amount": float(balance or 0),
            }
            for number, customer, invoice_date, due_date, status_, subtotal, tax, total, paid, balance in rows
        ]
        return pd.DataFrame(data, columns=INVOICE_COLUMNS)

    # PUBLIC_INTERFACE
    async def dashboard_summary(self) -> DashboardSummary:
        """Headline counts, cached under dashboard_metrics until a write invalidates them."""

        async def _load() -> DashboardSummary:
            by_status = await OrderRepository(self.session).count_by_status()
            items = InventoryItemRepository(self.session)
            dispatches = DispatchRepository(self.session)
            return DashboardSummary(
                total_customers=await CustomerRepository(self.session).count(),
                total_orders=sum(by_status.values()),
                total_employees=await EmployeeRepository(self.session).count(),
                total_inventory_items=await items.count(),
                total_revenue=await InvoiceRepository(self.session).revenue(),
                pending_orders=by_status.get("pending", 0),
                in_production_orders=by_status.get("in_production", 0) + by_status.get("quality_check", 0),
                completed_orders=by_status.get("completed", 0),
                out_of_stock_items=await items.count_out_of_stock(),
                pending_dispatches=await dispatches.count_by_statuses(PENDING_STATUSES),
                completed_dispatches=await dispatches.count_by_statuses(COMPLETED_STATUSES),
            )

        key = QueryCache.build_key("dashboard_metrics", "summary")
        return await get_query_cache().get_or_load(key, _load, data_type="dashboard_metrics")

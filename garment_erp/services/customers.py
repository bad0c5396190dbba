from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.cache import QueryCache, get_query_cache
from garment_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from garment_erp.db.models.sales import Customer
from garment_erp.repositories.sales import CustomerRepository, OrderRepository
from garment_erp.schemas.common import BulkUploadResult, RowError
from garment_erp.schemas.sales import CustomerCreate, CustomerRead, CustomerUpdate
from garment_erp.services.base import BaseService
from garment_erp.services.exports import dataframe_records, parse_number, read_upload
from garment_erp.services.pricing import format_date

logger = logging.getLogger(__name__)

CUSTOMERS_TABLE = "customers"
CUSTOMER_TYPES = ("Retail", "Wholesale", "Corporate", "B2B", "B2C", "Enterprise")
CUSTOMER_TIERS = ("bronze", "silver", "gold", "platinum")


def _choice(value: str, allowed, default: str) -> str:
    """Case-insensitive match against allowed values; blank means default."""
    if not value:
        return default
    for option in allowed:
        if option.lower() == value.lower():
            return option
    raise BusinessRuleError(f"'{value}' is not one of {', '.join(allowed)}")


class CustomerService(BaseService):
    """Customers: CRUD with cached lists, spreadsheet import and export."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = CustomerRepository(session)

    async def get(self, customer_id: UUID) -> Customer:
        customer = await self.repo.get(customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    # PUBLIC_INTERFACE
    async def list_customers(self, search: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[CustomerRead]:
        key = QueryCache.build_key("customers", (search or "").strip().lower() or None, limit, offset)

        async def _load() -> List[CustomerRead]:
            rows = await self.repo.list_entities(search=search, limit=limit, offset=offset)
            return [CustomerRead.model_validate(c) for c in rows]

        return await get_query_cache().get_or_load(key, _load, data_type="customers")

    async def _after_write(self, event: str, customer: Customer) -> None:
        self.invalidate("customers", "dashboard_metrics")
        await self.publish_change(CUSTOMERS_TABLE, event, customer)

    # PUBLIC_INTERFACE
    async def create_customer(self, payload: CustomerCreate) -> Customer:
        customer = await self.repo.create(payload.model_dump())
        await self._after_write("INSERT", customer)
        return customer

    # PUBLIC_INTERFACE
    async def update_customer(self, customer_id: UUID, payload: CustomerUpdate) -> Customer:
        customer = await self.get(customer_id)
        customer = await self.repo.update(customer, payload.model_dump(exclude_unset=True, exclude_none=True))
        await self._after_write("UPDATE", customer)
        return customer

    # PUBLIC_INTERFACE
    async def delete_customer(self, customer_id: UUID) -> None:
        customer = await self.get(customer_id)
        if await OrderRepository(self.session).count(customer_id=customer.id):
            raise ConflictError("Customer has orders and cannot be deleted")
        await self.repo.delete(customer)
        await self._after_write("DELETE", customer)

    # PUBLIC_INTERFACE
    async def bulk_upload(self, content: bytes, filename: Optional[str]) -> BulkUploadResult:
        """
        Import customers from a CSV/XLSX laid out like the template.

        Rows without a company name, or with an unknown type/tier or a bad
        credit limit, are reported and skipped; the rest are inserted together.
        """
        records = dataframe_records(read_upload(content, filename))
        errors: List[RowError] = []
        rows = []
        for index, row in enumerate(records, start=1):
            if not row.get("company_name"):
                errors.append(RowError(row=index, message="Company name is required"))
                continue
            try:
                customer_type = _choice(row.get("customer_type", ""), CUSTOMER_TYPES, "Retail")
                customer_tier = _choice(row.get("customer_tier", ""), CUSTOMER_TIERS, "bronze")
                credit_limit = parse_number(row.get("credit_limit"), 0.0)
            except BusinessRuleError as exc:
                errors.append(RowError(row=index, message=exc.message))
                continue
            rows.append(
                Customer(
                    company_name=row["company_name"],
                    contact_person=row.get("contact_person") or None,
                    phone=row.get("phone") or None,
                    email=row.get("email") or None,
                    address=row.get("address") or None,
                    city=row.get("city") or None,
                    state=row.get("state") or None,
                    pincode=row.get("pincode") or None,
                    gstin=row.get("gstin") or None,
                    pan=row.get("pan") or None,
                    customer_type=customer_type,
                    customer_tier=customer_tier,
                    credit_limit=credit_limit,
                )
            )
        if rows:
            await self.repo.add_all(rows)
            await self.repo.commit()
            self.invalidate("customers", "dashboard_metrics")
        logger.info("Customer upload: %d inserted, %d errors", len(rows), len(errors))
        return BulkUploadResult(inserted=len(rows), errors=errors)

    # PUBLIC_INTERFACE
    async def export_dataframe(self) -> pd.DataFrame:
        """
        Customers with Total Orders, Last Order Date and Lifetime Value.

        Lifetime value is the invoiced total, or the orders' final amounts for
        customers without invoices.
        """
        customers = await self.repo.list_entities(limit=100000)
        stats = await self.repo.order_stats()
        invoiced = await self.repo.invoice_totals()
        rows = []
        for c in customers:
            s = stats.get(c.id, {})
            rows.append(
                {
                    "Company Name": c.company_name,
                    "Contact Person": c.contact_person or "",
                    "Phone": c.phone or "",
                    "Email": c.email or "",
                    "City": c.city or "",
                    "State": c.state or "",
                    "GSTIN": c.gstin or "",
                    "Customer Type": c.customer_type,
                    "Tier": c.customer_tier,
                    "Credit Limit": float(c.credit_limit or 0),
                    "Total Orders": s.get("total_orders", 0),
                    "Last Order Date": format_date(s.get("last_order_date")) if s.get("last_order_date") else "",
                    "Lifetime Value": invoiced.get(c.id) or s.get("order_value", 0.0),
                }
            )
        return pd.DataFrame(rows)

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import get_current_active_user, require_roles
from garment_erp.db.models.security import ROLE_PROCUREMENT, ROLE_PRODUCTION, ROLE_SALES
from garment_erp.db.session import get_async_session
from garment_erp.schemas.reports import DashboardSummary
from garment_erp.services.exports import export_dataframe
from garment_erp.services.reports import ReportService

# PUBLIC_INTERFACE
router = APIRouter(tags=["Reports"])

FORMAT = Query("csv", pattern="^(csv|xlsx|pdf)$", description="Export format: csv | xlsx | pdf")


# PUBLIC_INTERFACE
@router.get(
    "/reports/orders",
    summary="Orders report",
    description="Orders with customer, status, quantities and amounts.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles(ROLE_SALES, ROLE_PRODUCTION))],
)
async def orders_report(
    session: AsyncSession = Depends(get_async_session),
    status: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None, description="Order date from (inclusive)"),
    date_to: Optional[date] = Query(None, description="Order date to (inclusive)"),
    format: str = FORMAT,
) -> StreamingResponse:
    df = await ReportService(session).orders_report(status=status, date_from=date_from, date_to=date_to)
    return export_dataframe(df, "orders_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/reports/production",
    summary="Production report",
    description="Per order: ordered, cut, distributed, picked and QC quantities with cut percentage and pass rate.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles(ROLE_PRODUCTION))],
)
async def production_report(
    session: AsyncSession = Depends(get_async_session),
    status: Optional[str] = Query(None, description="Order status"),
    format: str = FORMAT,
) -> StreamingResponse:
    df = await ReportService(session).production_report(status=status)
    return export_dataframe(df, "production_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/reports/inventory",
    summary="Inventory report",
    description="Stock on hand per SKU with its value at unit price.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles(ROLE_PROCUREMENT, ROLE_PRODUCTION))],
)
async def inventory_report(
    session: AsyncSession = Depends(get_async_session),
    category: Optional[str] = Query(None),
    format: str = FORMAT,
) -> StreamingResponse:
    df = await ReportService(session).inventory_report(category=category)
    return export_dataframe(df, "inventory_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/reports/invoices",
    summary="Invoices report",
    description="Invoices with totals, paid and balance amounts.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_roles(ROLE_SALES))],
)
async def invoices_report(
    session: AsyncSession = Depends(get_async_session),
    status: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None, description="Invoice date from (inclusive)"),
    date_to: Optional[date] = Query(None, description="Invoice date to (inclusive)"),
    format: str = FORMAT,
) -> StreamingResponse:
    df = await ReportService(session).invoices_report(status=status, date_from=date_from, date_to=date_to)
    return export_dataframe(df, "invoices_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/dashboard/summary",
    response_model=DashboardSummary,
    summary="Dashboard summary",
    description="Headline counts for the home dashboard.",
    dependencies=[Depends(get_current_active_user)],
)
async def dashboard_summary(session: AsyncSession = Depends(get_async_session)) -> DashboardSummary:
    return await ReportService(session).dashboard_summary()

from __future__ import annotations

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    """Headline counts for the home dashboard."""
    total_customers: int = 0
    total_orders: int = 0
    total_employees: int = 0
    total_inventory_items: int = 0
    total_revenue: float = Field(0, description="Sum of invoice totals")
    pending_orders: int = 0
    in_production_orders: int = 0
    completed_orders: int = 0
    out_of_stock_items: int = Field(0, description="Items with stock <= 0")
    pending_dispatches: int = 0
    completed_dispatches: int = 0

"""
Database seeding utilities for reference data.

Seeds:
- Business roles (admin, sales manager, ..., customer)
- Sidebar navigation tree
- Default size charts
- Inventory adjustment reasons
- One starter tutorial per help section

Every step looks rows up by their natural key first, so running it again is a no-op.

Usage:
  python -m garment_erp.db.run_migrations upgrade head
  python -m garment_erp.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.db.models.content import Tutorial
from garment_erp.db.models.inventory import AdjustmentReason
from garment_erp.db.models.masters import SizeType
from garment_erp.db.models.navigation import SidebarItem
from garment_erp.db.models.security import BUSINESS_ROLES, Role
from garment_erp.db.session import get_session_maker
from garment_erp.services.sizes import DEFAULT_SIZE_ORDER, KIDS_SIZES, create_size_order

logger = logging.getLogger(__name__)

# (title, url, icon, children[(title, url, icon)])
SidebarSeed = Tuple[str, Optional[str], str, Sequence[Tuple[str, str, str]]]

SIDEBAR_TREE: List[SidebarSeed] = [
    ("Dashboard", "/", "Home", []),
    ("CRM", None, "Users", [("Create/View Customers", "/crm/customers", "Users")]),
    ("Orders", "/orders", "ShoppingCart", [("Custom Orders", "/orders", "ShoppingCart")]),
    ("Accounts", None, "Calculator", [
        ("Create/View Invoices", "/accounts/invoices", "Calculator"),
        ("Payments", "/accounts/payments", "Calculator"),
    ]),
    ("Design & Printing", "/design", "Palette", []),
    ("Procurement", None, "ShoppingBag", [
        ("Purchase Orders", "/procurement/po", "ShoppingBag"),
        ("Goods Receipt Note", "/procurement/grn", "ClipboardList"),
    ]),
    ("Inventory", None, "Package", [
        ("Raw Material", "/warehouse/inventory", "Warehouse"),
        ("Product Inventory", "/inventory/products", "Package"),
        ("Inventory Adjustment", "/inventory/adjustment", "Package"),
    ]),
    ("Production", None, "Factory", [
        ("Production Dashboard", "/production", "Factory"),
        ("Assign Orders", "/production/assign-orders", "Users"),
        ("Cutting Manager", "/production/cutting-manager", "Scissors"),
        ("Tailor Management", "/production/tailor-management", "Users"),
    ]),
    ("Quality Check", "/quality", "CheckCircle", [
        ("Picker", "/production/picker", "Package"),
        ("QC", "/quality/checks", "CheckCircle"),
        ("Dispatch", "/quality/dispatch", "Truck"),
    ]),
    ("People", None, "Users", [
        ("Our People", "/people/employees", "Users"),
        ("Departments", "/people/departments", "Building"),
        ("Designations", "/people/designations", "Award"),
    ]),
    ("Masters", None, "Package", [
        ("Product Categories", "/inventory/product-categories", "Package"),
        ("Fabric Master", "/inventory/fabrics", "Palette"),
        ("Size Master", "/inventory/size-types", "ClipboardList"),
        ("Supplier Master", "/masters/suppliers", "Truck"),
    ]),
    ("User & Roles", None, "UserCog", [("Employee Access", "/admin/employee-access", "Users")]),
    ("Tutorials", "/tutorials", "BookOpen", []),
    ("Reports", "/reports", "FileText", []),
]

SIZE_TYPES: List[Tuple[str, List[str]]] = [
    ("Adult Standard", list(DEFAULT_SIZE_ORDER[:7])),
    ("Kids", list(KIDS_SIZES)),
    ("Numeric Waist", ["28", "30", "32", "34", "36", "38", "40"]),
    ("Free Size", ["Free"]),
]

ADJUSTMENT_REASONS: List[Tuple[str, str]] = [
    ("Damaged", "Stock damaged in storage or handling"),
    ("Stock Count Correction", "Physical count differs from system stock"),
    ("Returned by Customer", "Goods returned to stock"),
    ("Lost / Missing", "Stock that cannot be located"),
    ("Sample Issued", "Pieces issued as samples"),
]

TUTORIAL_SECTIONS: List[str] = [
    "Admin",
    "Sales",
    "Printing & Design",
    "Procurement & Production",
    "Cutting Masters",
    "Picker & Quality",
    "Dispatch",
    "Accounts",
]


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Seed roles, navigation and master reference data in a single transaction."""
    async with get_session_maker()() as session:
        await _seed_roles(session)
        await _seed_sidebar(session)
        await _seed_size_types(session)
        await _seed_adjustment_reasons(session)
        await _seed_tutorials(session)
        await session.commit()


async def _seed_roles(session: AsyncSession) -> None:
    existing = set((await session.execute(select(Role.name))).scalars().all())
    for name in BUSINESS_ROLES:
        if name not in existing:
            session.add(Role(name=name, description=name.title()))
            logger.info("Seeded role %s", name)
    await session.flush()


async def _get_sidebar_item(session: AsyncSession, title: str, parent_id: Optional[UUID]) -> Optional[SidebarItem]:
    stmt = select(SidebarItem).where(SidebarItem.title == title)
    stmt = stmt.where(SidebarItem.parent_id.is_(None) if parent_id is None else SidebarItem.parent_id == parent_id)
    return (await session.execute(stmt)).scalars().first()


async def _seed_sidebar(session: AsyncSession) -> None:
    """Top-level items and their children; titles are unique among siblings."""
    for position, (title, url, icon, children) in enumerate(SIDEBAR_TREE, start=1):
        parent = await _get_sidebar_item(session, title, None)
        if parent is None:
            parent = SidebarItem(title=title, url=url, icon=icon, sort_order=position)
            session.add(parent)
            await session.flush()
        for child_position, (child_title, child_url, child_icon) in enumerate(children, start=1):
            if await _get_sidebar_item(session, child_title, parent.id) is None:
                session.add(
                    SidebarItem(
                        title=child_title,
                        url=child_url,
                        icon=child_icon,
                        parent_id=parent.id,
                        sort_order=child_position,
                    )
                )
    await session.flush()


async def _seed_size_types(session: AsyncSession) -> None:
    existing = set((await session.execute(select(SizeType.size_name))).scalars().all())
    for name, sizes in SIZE_TYPES:
        if name not in existing:
            session.add(SizeType(size_name=name, available_sizes=sizes, size_order=create_size_order(sizes)))
    await session.flush()


async def _seed_adjustment_reasons(session: AsyncSession) -> None:
    existing = set((await session.execute(select(AdjustmentReason.reason_name))).scalars().all())
    for name, description in ADJUSTMENT_REASONS:
        if name not in existing:
            session.add(AdjustmentReason(reason_name=name, description=description))
    await session.flush()


async def _seed_tutorials(session: AsyncSession) -> None:
    """Sections are derived from tutorials, so each one starts with an overview entry."""
    existing = set((await session.execute(select(Tutorial.section).distinct())).scalars().all())
    for section in TUTORIAL_SECTIONS:
        if section not in existing:
            session.add(
                Tutorial(
                    section=section,
                    title=f"{section} overview",
                    description=f"Getting started with the {section} screens.",
                    order_index=1,
                )
            )
    await session.flush()


# PUBLIC_INTERFACE
def main() -> None:
    """Entrypoint to run the asynchronous seeding."""
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from garment_erp.db.models.procurement import GoodsReceiptNote, GrnItem, PurchaseOrder, PurchaseOrderItem
from garment_erp.repositories.masters import SupplierRepository
from garment_erp.repositories.procurement import GrnRepository, PurchaseOrderRepository
from garment_erp.schemas.procurement import (
    GrnCreate,
    GrnInspectionRequest,
    PurchaseOrderCreate,
    PurchaseOrderItemIn,
    PurchaseOrderUpdate,
)
from garment_erp.services.base import BaseService
from garment_erp.services.inventory import InventoryService
from garment_erp.services.pricing import (
    PO_PREFIX,
    calculate_document_totals,
    calculate_line_amounts,
    next_daily_number,
    next_po_number,
)

logger = logging.getLogger(__name__)

QUALITY_PENDING = "pending"
QUALITY_APPROVED = "approved"
QUALITY_REJECTED = "rejected"
QUALITY_DAMAGED = "damaged"


# PUBLIC_INTERFACE
def inspect_quantities(
    quality_status: str,
    received: float,
    approved: Optional[float] = None,
    rejected: Optional[float] = None,
) -> Tuple[float, float]:
    """
    (approved, rejected) for an inspected GRN line.

    An approved line accepts everything received, a rejected or damaged line
    rejects everything; a pending line keeps the explicit numbers given.
    """
    if quality_status == QUALITY_APPROVED:
        return received, 0.0
    if quality_status in (QUALITY_REJECTED, QUALITY_DAMAGED):
        return 0.0, received
    a, r = float(approved or 0), float(rejected or 0)
    if a + r > received:
        raise BusinessRuleError(
            f"Approved + rejected ({a + r}) exceeds the received quantity ({received})",
            {"received": received, "approved": a, "rejected": r},
        )
    return a, r


# PUBLIC_INTERFACE
def grn_status(quality_statuses: Iterable[str]) -> str:
    """Overall GRN status from the quality status of its lines."""
    statuses = list(quality_statuses)
    if not statuses or QUALITY_PENDING in statuses:
        return "under_inspection"
    if all(s == QUALITY_APPROVED for s in statuses):
        return "approved"
    if all(s in (QUALITY_REJECTED, QUALITY_DAMAGED) for s in statuses):
        return "rejected"
    return "partially_approved"


# PUBLIC_INTERFACE
def po_receipt_status(ordered: Mapping[UUID, float], received: Mapping[UUID, float], current: str) -> str:
    """received once every line is fully received, partially_received once anything is."""
    if ordered and all(received.get(line, 0) >= qty for line, qty in ordered.items()):
        return "received"
    if any(received.get(line, 0) > 0 for line in ordered):
        return "partially_received"
    return current


def _po_lines(items: List[PurchaseOrderItemIn]) -> List[PurchaseOrderItem]:
    lines = []
    for item in items:
        amounts = calculate_line_amounts(item.quantity, item.unit_price, item.gst_rate)
        lines.append(
            PurchaseOrderItem(
                item_type=item.item_type,
                item_id=item.item_id,
                item_name=item.item_name,
                quantity=item.quantity,
                unit=item.unit,
                unit_price=item.unit_price,
                gst_rate=item.gst_rate,
                total_price=amounts.total_price,
            )
        )
    return lines


def _apply_po_totals(po: PurchaseOrder) -> None:
    totals = calculate_document_totals(
        (calculate_line_amounts(line.quantity, line.unit_price, line.gst_rate), line.gst_rate) for line in po.items
    )
    po.subtotal = totals.subtotal
    po.tax_amount = totals.tax_amount
    po.total_amount = totals.total_amount


class ProcurementService(BaseService):
    """Purchase orders, goods receipts and their inspection into stock."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.pos = PurchaseOrderRepository(session)
        self.grns = GrnRepository(session)

    async def get_po(self, po_id: UUID) -> PurchaseOrder:
        po = await self.pos.get(po_id)
        if not po:
            raise NotFoundError("Purchase order not found")
        return po

    async def get_grn(self, grn_id: UUID) -> GoodsReceiptNote:
        grn = await self.grns.get(grn_id)
        if not grn:
            raise NotFoundError("GRN not found")
        return grn

    # PUBLIC_INTERFACE
    async def create_po(self, payload: PurchaseOrderCreate, today: Optional[date] = None) -> PurchaseOrder:
        if not await SupplierRepository(self.session).get(payload.supplier_id):
            raise BusinessRuleError("Supplier does not exist", {"supplier_id": str(payload.supplier_id)})
        today = today or date.today()
        number = payload.po_number or next_po_number(await self.pos.last_number_with_prefix(PO_PREFIX))
        if await self.pos.get_by(po_number=number):
            raise ConflictError("PO number already exists", {"po_number": number})

        po = PurchaseOrder(
            po_number=number,
            supplier_id=payload.supplier_id,
            order_date=payload.order_date or today,
            expected_date=payload.expected_date,
            status=payload.status,
            notes=payload.notes,
        )
        po.items = _po_lines(payload.items)
        _apply_po_totals(po)
        await self.pos.add(po)
        await self.pos.commit()
        logger.info("Created purchase order %s", po.po_number)
        self.invalidate("purchase_orders")
        return po

    # PUBLIC_INTERFACE
    async def update_po(self, po_id: UUID, payload: PurchaseOrderUpdate) -> PurchaseOrder:
        po = await self.get_po(po_id)
        data = payload.model_dump(exclude_unset=True)
        items = data.pop("items", None)
        for key, value in data.items():
            if value is not None:
                setattr(po, key, value)
        if items is not None:
            if po.status not in ("draft", "sent"):
                raise BusinessRuleError("Lines can only be changed before goods are received")
            if not payload.items:
                raise BusinessRuleError("A purchase order needs at least one line")
            po.items = _po_lines(payload.items)
        _apply_po_totals(po)
        await self.pos.commit()
        self.invalidate("purchase_orders")
        return po

    # PUBLIC_INTERFACE
    async def delete_po(self, po_id: UUID) -> None:
        po = await self.get_po(po_id)
        if await self.grns.get_by(purchase_order_id=po.id):
            raise ConflictError("Purchase order has goods receipts and cannot be deleted")
        await self.pos.delete(po)
        self.invalidate("purchase_orders")

    async def _refresh_po_status(self, po: PurchaseOrder) -> None:
        ordered = {line.id: float(line.quantity or 0) for line in po.items}
        received = await self.grns.received_by_po_item(ordered.keys())
        po.status = po_receipt_status(ordered, received, po.status)

    # PUBLIC_INTERFACE
    async def create_grn(self, payload: GrnCreate, today: Optional[date] = None) -> GoodsReceiptNote:
        """
        Record goods received. Against a PO line the received quantity may not
        exceed what is ordered minus what earlier GRNs already received.
        """
        po = await self.get_po(payload.purchase_order_id) if payload.purchase_order_id else None
        po_lines = {line.id: line for line in po.items} if po else {}
        prior = await self.grns.received_by_po_item(po_lines.keys())

        requested: Dict[UUID, float] = {}
        lines: List[GrnItem] = []
        for item in payload.items:
            if item.po_item_id:
                line = po_lines.get(item.po_item_id)
                if line is None:
                    raise BusinessRuleError(
                        "GRN line does not belong to the purchase order", {"po_item_id": str(item.po_item_id)}
                    )
                requested[line.id] = requested.get(line.id, 0.0) + item.received_quantity
                left = float(line.quantity) - prior.get(line.id, 0.0)
                if requested[line.id] > left:
                    raise BusinessRuleError(
                        f"Received quantity for {line.item_name} exceeds the {max(0.0, left)} still due",
                        {"po_item_id": str(line.id), "remaining": max(0.0, left)},
                    )
                lines.append(
                    GrnItem(
                        po_item_id=line.id,
                        item_type=line.item_type,
                        item_id=line.item_id,
                        item_name=line.item_name,
                        unit=item.unit or line.unit,
                        ordered_quantity=float(line.quantity),
                        received_quantity=item.received_quantity,
                    )
                )
            else:
                if not item.item_name:
                    raise BusinessRuleError("Item name is required for lines without a PO line")
                lines.append(
                    GrnItem(
                        item_type=item.item_type,
                        item_id=item.item_id,
                        item_name=item.item_name,
                        unit=item.unit,
                        ordered_quantity=item.ordered_quantity if item.ordered_quantity is not None else item.received_quantity,
                        received_quantity=item.received_quantity,
                    )
                )

        today = today or date.today()
        number = next_daily_number(
            "GRN", await self.grns.last_number_with_prefix(f"GRN-{today.strftime('%Y%m%d')}-"), today
        )
        grn = GoodsReceiptNote(
            grn_number=number,
            purchase_order_id=po.id if po else None,
            supplier_id=payload.supplier_id or (po.supplier_id if po else None),
            received_date=payload.received_date or today,
            status="received",
            received_by_name=payload.received_by_name,
            notes=payload.notes,
        )
        grn.items = lines
        await self.grns.add(grn)
        await self.grns.flush()
        if po is not None:
            await self._refresh_po_status(po)
        await self.grns.commit()
        logger.info("Created %s with %d lines", grn.grn_number, len(lines))
        self.invalidate("purchase_orders")
        return grn

    # PUBLIC_INTERFACE
    async def inspect_grn(self, grn_id: UUID, payload: GrnInspectionRequest) -> GoodsReceiptNote:
        """
        Record quality inspection of GRN lines. Approved quantities are posted
        to fabric or item stock once per line.
        """
        grn = await self.get_grn(grn_id)
        by_id = {item.id: item for item in grn.items}
        inventory = InventoryService(self.session)

        for entry in payload.items:
            line = by_id.get(entry.grn_item_id)
            if line is None:
                raise BusinessRuleError("Line does not belong to this GRN", {"grn_item_id": str(entry.grn_item_id)})
            approved, rejected = inspect_quantities(
                entry.quality_status,
                float(line.received_quantity or 0),
                entry.approved_quantity,
                entry.rejected_quantity,
            )
            line.quality_status = entry.quality_status
            line.approved_quantity = approved
            line.rejected_quantity = rejected
            if entry.quality_notes is not None:
                line.quality_notes = entry.quality_notes

            if entry.quality_status == QUALITY_APPROVED and not line.stock_posted and approved > 0:
                if line.item_id is None:
                    logger.warning("GRN %s line %s has no stock item; stock not posted", grn.grn_number, line.item_name)
                    continue
                await inventory.post_stock(
                    line.item_type,
                    line.item_id,
                    approved,
                    "grn_receipt",
                    reference_type="grn",
                    reference_id=grn.id,
                    reference_number=grn.grn_number,
                )
                line.stock_posted = True

        grn.status = grn_status(item.quality_status for item in grn.items)
        await self.grns.commit()
        logger.info("Inspected %s: %s", grn.grn_number, grn.status)
        self.invalidate("purchase_orders", "inventory_items", "fabrics", "dashboard_metrics")
        return grn

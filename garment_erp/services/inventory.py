from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from garment_erp.db.models.inventory import InventoryAdjustment, InventoryAdjustmentItem, InventoryItem
from garment_erp.db.models.masters import Fabric
from garment_erp.repositories.inventory import (
    AdjustmentReasonRepository,
    InventoryAdjustmentRepository,
    InventoryItemRepository,
    InventoryLogRepository,
)
from garment_erp.repositories.masters import FabricRepository
from garment_erp.schemas.common import BulkUploadResult, RowError
from garment_erp.schemas.inventory import AdjustmentCreate, InventoryItemCreate, InventoryItemUpdate
from garment_erp.services.base import BaseService
from garment_erp.services.exports import dataframe_records, parse_number, read_upload

logger = logging.getLogger(__name__)

ADJUST_ADD = "ADD"
ADJUST_REMOVE = "REMOVE"
ADJUST_REPLACE = "REPLACE"

ITEM_TYPE_FABRIC = "fabric"
ITEM_TYPE_ITEM = "item"


# PUBLIC_INTERFACE
def plan_adjustment(adjustment_type: str, before: float, quantity: float) -> Tuple[float, float]:
    """
    Stock after an adjustment line and the signed change it represents.

    ADD adds, REMOVE subtracts (never below zero stock), REPLACE sets the stock.
    Returns (after, after - before).
    """
    if quantity < 0:
        raise BusinessRuleError("Adjustment quantity cannot be negative")
    if adjustment_type == ADJUST_ADD:
        after = before + quantity
    elif adjustment_type == ADJUST_REMOVE:
        if quantity > before:
            raise BusinessRuleError(
                f"Cannot remove {quantity}; only {before} in stock",
                {"current_stock": before, "requested": quantity},
            )
        after = before - quantity
    elif adjustment_type == ADJUST_REPLACE:
        after = quantity
    else:
        raise BusinessRuleError(f"Unknown adjustment type: {adjustment_type}")
    return after, after - before


class InventoryService(BaseService):
    """Product master, stock adjustments and the stock movement log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.items = InventoryItemRepository(session)
        self.adjustments = InventoryAdjustmentRepository(session)
        self.logs = InventoryLogRepository(session)

    # PUBLIC_INTERFACE
    async def create_item(self, payload: InventoryItemCreate) -> InventoryItem:
        if await self.items.get_by_sku(payload.sku):
            raise ConflictError("SKU already exists", {"sku": payload.sku})
        item = await self.items.create(payload.model_dump(), commit=False)
        if item.current_stock:
            await self._log(item, ITEM_TYPE_ITEM, item.current_stock, 0, item.current_stock, "opening_stock")
        await self.items.commit()
        self.invalidate("inventory_items", "dashboard_metrics")
        return item

    # PUBLIC_INTERFACE
    async def update_item(self, item_id: UUID, payload: InventoryItemUpdate) -> InventoryItem:
        item = await self.items.get(item_id)
        if not item:
            raise NotFoundError("Inventory item not found")
        data = payload.model_dump(exclude_unset=True, exclude_none=True)
        sku = data.get("sku")
        if sku and sku.lower() != item.sku.lower():
            other = await self.items.get_by_sku(sku)
            if other and other.id != item.id:
                raise ConflictError("SKU already exists", {"sku": sku})
        item = await self.items.update(item, data)
        self.invalidate("inventory_items")
        return item

    # PUBLIC_INTERFACE
    async def delete_item(self, item_id: UUID) -> None:
        item = await self.items.get(item_id)
        if not item:
            raise NotFoundError("Inventory item not found")
        await self.items.delete(item)
        self.invalidate("inventory_items", "dashboard_metrics")

    # PUBLIC_INTERFACE
    async def get_by_sku(self, sku: str) -> InventoryItem:
        """Barcode scan lookup."""
        item = await self.items.get_by_sku(sku)
        if not item:
            raise NotFoundError(f"No item with SKU {sku}", {"sku": sku})
        return item

    async def _log(
        self,
        entity,
        item_type: str,
        quantity: float,
        old_quantity: float,
        new_quantity: float,
        action: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[UUID] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        if item_type == ITEM_TYPE_FABRIC:
            name, code, unit = entity.fabric_name, entity.fabric_code, entity.uom
        else:
            name, code, unit = entity.item_name, entity.sku, entity.uom
        await self.logs.log(
            item_type=item_type,
            item_id=entity.id,
            item_name=name,
            item_code=code,
            quantity=quantity,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            unit=unit,
            action=action,
            reference_type=reference_type,
            reference_id=reference_id,
            reference_number=reference_number,
            notes=notes,
        )

    # PUBLIC_INTERFACE
    async def post_stock(
        self,
        item_type: str,
        item_id: UUID,
        quantity: float,
        action: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[UUID] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> float:
        """
        Add a signed quantity to a fabric's or item's stock (floored at zero)
        and log the movement. Does not commit.
        """
        if item_type == ITEM_TYPE_FABRIC:
            fabric: Optional[Fabric] = await FabricRepository(self.session).get(item_id)
            if not fabric:
                raise NotFoundError("Fabric not found", {"item_id": str(item_id)})
            old = float(fabric.inventory or 0)
            fabric.inventory = max(0.0, old + quantity)
            entity, new = fabric, fabric.inventory
        else:
            item = await self.items.get(item_id)
            if not item:
                raise NotFoundError("Inventory item not found", {"item_id": str(item_id)})
            old = float(item.current_stock or 0)
            item.current_stock = max(0.0, old + quantity)
            entity, new = item, item.current_stock
        await self._log(
            entity, item_type, quantity, old, new, action, reference_type, reference_id, reference_number, notes
        )
        return new

    # PUBLIC_INTERFACE
    async def create_adjustment(
        self, payload: AdjustmentCreate, adjusted_by_user_id: Optional[UUID] = None
    ) -> InventoryAdjustment:
        """
        Apply a stock adjustment over several items at once.

        Every line is checked before any stock changes; each line writes an
        inventory log row.
        """
        if payload.reason_id and not await AdjustmentReasonRepository(self.session).get(payload.reason_id):
            raise BusinessRuleError("Adjustment reason does not exist")
        if not payload.reason_id and not (payload.custom_reason or "").strip():
            raise BusinessRuleError("Select a reason or enter a custom reason")
        ids = [line.item_id for line in payload.items]
        if len(set(ids)) != len(ids):
            raise BusinessRuleError("Each item can appear only once in an adjustment")
        items = {item.id: item for item in await self.items.get_many(ids)}
        missing = [str(i) for i in ids if i not in items]
        if missing:
            raise NotFoundError("Inventory items not found", {"item_ids": missing})

        planned = []
        for line in payload.items:
            item = items[line.item_id]
            before = float(item.current_stock or 0)
            after, delta = plan_adjustment(payload.adjustment_type, before, line.quantity)
            planned.append((item, line, before, after, delta))

        adjustment = InventoryAdjustment(
            adjustment_type=payload.adjustment_type,
            reason_id=payload.reason_id,
            custom_reason=payload.custom_reason,
            notes=payload.notes,
            adjusted_by_user_id=adjusted_by_user_id,
            status="COMPLETED",
        )
        adjustment.items = [
            InventoryAdjustmentItem(
                item_id=item.id,
                sku=item.sku,
                item_name=item.item_name,
                quantity_before=before,
                adjustment_quantity=delta,
                quantity_after=after,
                replace_quantity=line.quantity if payload.adjustment_type == ADJUST_REPLACE else None,
                unit=item.uom,
            )
            for item, line, before, after, delta in planned
        ]
        await self.adjustments.add(adjustment)
        await self.adjustments.flush()
        for item, line, before, after, delta in planned:
            item.current_stock = after
            await self._log(
                item,
                ITEM_TYPE_ITEM,
                delta,
                before,
                after,
                f"adjustment_{payload.adjustment_type.lower()}",
                reference_type="adjustment",
                reference_id=adjustment.id,
                notes=payload.notes or payload.custom_reason,
            )
        await self.adjustments.commit()
        logger.info("Inventory %s adjustment over %d items", payload.adjustment_type, len(planned))
        self.invalidate("inventory_items", "warehouse_inventory", "dashboard_metrics")
        return adjustment

    # PUBLIC_INTERFACE
    async def bulk_upload_items(self, content: bytes, filename: Optional[str]) -> BulkUploadResult:
        """Import items from CSV/XLSX; rows without SKU or name, or with a known SKU, are reported."""
        records = dataframe_records(read_upload(content, filename))
        errors: List[RowError] = []
        seen: set[str] = set()
        inserted = 0
        for index, row in enumerate(records, start=1):
            sku = row.get("sku", "")
            if not sku or not row.get("item_name"):
                errors.append(RowError(row=index, message="SKU and item name are required"))
                continue
            if sku.lower() in seen or await self.items.get_by_sku(sku):
                errors.append(RowError(row=index, message=f"SKU {sku} already exists"))
                continue
            try:
                unit_price = parse_number(row.get("unit_price"), 0.0)
                stock = parse_number(row.get("current_stock"), 0.0)
            except BusinessRuleError as exc:
                errors.append(RowError(row=index, message=exc.message))
                continue
            seen.add(sku.lower())
            await self.items.create(
                {
                    "sku": sku,
                    "item_name": row["item_name"],
                    "category": row.get("category") or None,
                    "product_class": row.get("product_class") or None,
                    "color": row.get("color") or None,
                    "size": row.get("size") or None,
                    "brand": row.get("brand") or None,
                    "uom": row.get("uom") or "pcs",
                    "unit_price": unit_price,
                    "current_stock": max(0.0, stock),
                },
                commit=False,
            )
            inserted += 1
        await self.items.commit()
        logger.info("Inventory upload: %d inserted, %d errors", inserted, len(errors))
        self.invalidate("inventory_items", "dashboard_metrics")
        return BulkUploadResult(inserted=inserted, errors=errors)

    # PUBLIC_INTERFACE
    async def bulk_upload_fabrics(self, content: bytes, filename: Optional[str]) -> BulkUploadResult:
        """Import fabrics from CSV/XLSX; rows without a fabric name are reported."""
        fabrics = FabricRepository(self.session)
        records = dataframe_records(read_upload(content, filename))
        errors: List[RowError] = []
        inserted = 0
        for index, row in enumerate(records, start=1):
            if not row.get("fabric_name"):
                errors.append(RowError(row=index, message="Fabric name is required"))
                continue
            code = row.get("fabric_code") or None
            if code and await fabrics.get_by(fabric_code=code):
                errors.append(RowError(row=index, message=f"Fabric code {code} already exists"))
                continue
            try:
                gsm = parse_number(row.get("gsm"), 0.0)
                rate = parse_number(row.get("rate"), 0.0)
                stock = parse_number(row.get("inventory"), 0.0)
            except BusinessRuleError as exc:
                errors.append(RowError(row=index, message=exc.message))
                continue
            await fabrics.create(
                {
                    "fabric_code": code,
                    "fabric_name": row["fabric_name"],
                    "color": row.get("color") or None,
                    "gsm": int(gsm) or None,
                    "uom": row.get("uom") or "meters",
                    "rate": rate,
                    "inventory": max(0.0, stock),
                },
                commit=False,
            )
            inserted += 1
        await fabrics.commit()
        logger.info("Fabric upload: %d inserted, %d errors", inserted, len(errors))
        self.invalidate("fabrics")
        return BulkUploadResult(inserted=inserted, errors=errors)

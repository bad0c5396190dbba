from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, ConflictError, NotFoundError
from garment_erp.db.models.production import (
    Batch,
    CuttingProgress,
    FabricUsageRecord,
    OrderBatchAssignment,
    OrderBatchSizeDistribution,
    OrderCuttingAssignment,
)
from garment_erp.repositories.inventory import InventoryLogRepository
from garment_erp.repositories.masters import FabricRepository
from garment_erp.repositories.people import EmployeeRepository
from garment_erp.repositories.production import BatchAssignmentRepository, BatchRepository, CuttingRepository
from garment_erp.repositories.quality import QcReviewRepository
from garment_erp.repositories.sales import OrderRepository
from garment_erp.schemas.production import (
    BatchAssignmentRead,
    BatchCreate,
    BatchDistributionRequest,
    BatchReassignRequest,
    BatchReassignResult,
    BatchUpdate,
    CuttingAssignmentCreate,
    CuttingAssignmentRead,
    CuttingProgressRead,
    CuttingReassignRequest,
    CuttingReassignResult,
    CuttingUpdateRequest,
    PickerRow,
    PickerSizeRow,
    SizeDistributionRead,
)
from garment_erp.schemas.realtime import KpiSnapshot
from garment_erp.services.allocation import (
    BatchShare,
    SizeSlot,
    merge_quantities,
    plan_batch_distribution,
    plan_batch_reassignment,
    plan_cutting_reassignment,
    plan_cutting_update,
    validate_fabric_usage,
)
from garment_erp.services.base import BaseService
from garment_erp.services.documents import BatchSheetData
from garment_erp.services.orders import order_sizes, order_total_quantity
from garment_erp.services.picking import PickLine, apply_picks
from garment_erp.services.qc import pass_rate
from garment_erp.services.realtime import broadcast_manager
from garment_erp.services.sizes import PICKER_SIZE_ORDER, sort_sizes

logger = logging.getLogger(__name__)

BATCHES_TABLE = "batches"
BATCH_ASSIGNMENTS_TABLE = "order_batch_assignments"
CUTTING_ASSIGNMENTS_TABLE = "order_cutting_assignments"


def _append_note(existing: Optional[str], note: str) -> str:
    return f"{existing}\n{note}" if existing else note


def _cutting_status(completed: int, assigned: int) -> str:
    if completed <= 0:
        return "assigned"
    return "completed" if completed >= assigned else "in_progress"


class ProductionService(BaseService):
    """
    Domain service for the production floor.

    Covers batches, order-to-batch distribution and reassignment, cutting
    master assignments, cutting progress with fabric consumption, picking and
    the floor KPIs. Every write validates against the allocation rules first,
    then commits once and pushes a fresh KPI snapshot to dashboard subscribers.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.batches = BatchRepository(session)
        self.assignments = BatchAssignmentRepository(session)
        self.cutting = CuttingRepository(session)
        self.orders = OrderRepository(session)
        self.reviews = QcReviewRepository(session)

    async def _order(self, order_id: UUID):
        order = await self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def _active_batch(self, batch_id: UUID) -> Batch:
        batch = await self.batches.get(batch_id)
        if not batch:
            raise NotFoundError("Batch not found", {"batch_id": str(batch_id)})
        if batch.status != "active":
            raise BusinessRuleError(f"Batch {batch.batch_name} is not active", {"batch_id": str(batch_id)})
        return batch

    async def _after_production_write(self) -> None:
        self.invalidate("batches", "production_orders", "quality_checks", "dashboard_metrics")
        await self.publish_kpis()

    # Batches

    # PUBLIC_INTERFACE
    async def create_batch(self, payload: BatchCreate) -> Batch:
        if await self.batches.get_by(batch_code=payload.batch_code):
            raise ConflictError("Batch code already exists", {"batch_code": payload.batch_code})
        batch = await self.batches.create(payload.model_dump())
        self.invalidate("batches")
        await self.publish_change(BATCHES_TABLE, "INSERT", batch)
        return batch

    # PUBLIC_INTERFACE
    async def update_batch(self, batch_id: UUID, payload: BatchUpdate) -> Batch:
        batch = await self.batches.get(batch_id)
        if not batch:
            raise NotFoundError("Batch not found")
        data = payload.model_dump(exclude_unset=True, exclude_none=True)
        code = data.get("batch_code")
        if code and code != batch.batch_code and await self.batches.get_by(batch_code=code):
            raise ConflictError("Batch code already exists", {"batch_code": code})
        batch = await self.batches.update(batch, data)
        self.invalidate("batches")
        await self.publish_change(BATCHES_TABLE, "UPDATE", batch)
        return batch

    # PUBLIC_INTERFACE
    async def delete_batch(self, batch_id: UUID) -> None:
        batch = await self.batches.get(batch_id)
        if not batch:
            raise NotFoundError("Batch not found")
        if await self.assignments.list_assignments(batch_id=batch_id, limit=1):
            raise ConflictError("Batch has order assignments; reassign them before deleting")
        await self.batches.delete(batch)
        self.invalidate("batches")
        await self.publish_change(BATCHES_TABLE, "DELETE", batch)

    # Batch assignments

    async def assignment_reads(self, assignments: Iterable[OrderBatchAssignment]) -> List[BatchAssignmentRead]:
        """Assignments with order number, batch name and their size rows (picker order)."""
        rows = list(assignments)
        dists = await self.assignments.distributions_by_assignment(a.id for a in rows)
        batches = await self.batches.names(a.batch_id for a in rows)
        orders = await self.orders.get_many(a.order_id for a in rows)
        result: List[BatchAssignmentRead] = []
        for a in rows:
            by_size = {d.size_name: d for d in dists.get(a.id, [])}
            order = orders.get(a.order_id)
            batch = batches.get(a.batch_id)
            result.append(
                BatchAssignmentRead(
                    id=a.id,
                    order_id=a.order_id,
                    order_number=order.order_number if order else None,
                    batch_id=a.batch_id,
                    batch_name=batch.batch_name if batch else None,
                    assignment_date=a.assignment_date,
                    assigned_by_name=a.assigned_by_name,
                    total_quantity=a.total_quantity,
                    notes=a.notes,
                    sizes=[
                        SizeDistributionRead.model_validate(by_size[s])
                        for s in sort_sizes(by_size, reference=PICKER_SIZE_ORDER)
                    ],
                    created_at=a.created_at,
                    updated_at=a.updated_at,
                )
            )
        return result

    # PUBLIC_INTERFACE
    async def get_assignment(self, assignment_id: UUID) -> BatchAssignmentRead:
        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError("Batch assignment not found")
        return (await self.assignment_reads([assignment]))[0]

    # PUBLIC_INTERFACE
    async def list_assignments(
        self, order_id: Optional[UUID] = None, batch_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[BatchAssignmentRead]:
        rows = await self.assignments.list_assignments(order_id=order_id, batch_id=batch_id, limit=limit, offset=offset)
        return await self.assignment_reads(rows)

    # PUBLIC_INTERFACE
    async def distribute_order(
        self,
        order_id: UUID,
        payload: BatchDistributionRequest,
        assigned_by_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[BatchAssignmentRead]:
        """
        Split the whole order across batches, replacing any previous split.

        For every size the batch shares must add up to exactly the ordered
        quantity; batches must be active.
        """
        order = await self._order(order_id)
        shares = [BatchShare(batch_id=b.batch_id, size_quantities=dict(b.size_quantities)) for b in payload.batches]
        planned = plan_batch_distribution(order_sizes(order), shares)
        batches = {share.batch_id: await self._active_batch(share.batch_id) for share in planned}

        today = today or date.today()
        await self.assignments.delete_for_order(order.id)
        created: List[OrderBatchAssignment] = []
        for share in planned:
            batch = batches[share.batch_id]
            note = f"Order {order.order_number} assigned to {batch.batch_name}"
            assignment = OrderBatchAssignment(
                order_id=order.id,
                batch_id=batch.id,
                assignment_date=today,
                assigned_by_name=assigned_by_name,
                total_quantity=share.total,
                notes=_append_note(payload.notes, note),
            )
            await self.assignments.add(assignment)
            await self.assignments.flush()
            await self.assignments.add_all(
                OrderBatchSizeDistribution(
                    order_batch_assignment_id=assignment.id, size_name=size, quantity=qty, picked_quantity=0
                )
                for size, qty in share.size_quantities.items()
            )
            created.append(assignment)
        await self.assignments.commit()
        logger.info("Order %s distributed across %d batches", order.order_number, len(created))

        for assignment in created:
            await self.publish_change(BATCH_ASSIGNMENTS_TABLE, "INSERT", assignment)
        await self._after_production_write()
        return await self.assignment_reads(created)

    # PUBLIC_INTERFACE
    async def reassign_batch(
        self,
        assignment_id: UUID,
        payload: BatchReassignRequest,
        assigned_by_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> BatchReassignResult:
        """Move unpicked pieces of a batch assignment to another active batch."""
        source = await self.assignments.get(assignment_id)
        if not source:
            raise NotFoundError("Batch assignment not found")
        if payload.target_batch_id == source.batch_id:
            raise BusinessRuleError("Select a different batch to reassign to")
        target_batch = await self._active_batch(payload.target_batch_id)
        source_batch = await self.batches.get(source.batch_id)
        source_name = source_batch.batch_name if source_batch else "previous batch"

        dists = (await self.assignments.distributions_by_assignment([source.id])).get(source.id, [])
        slots = [SizeSlot(d.size_name, int(d.quantity or 0), int(d.picked_quantity or 0)) for d in dists]
        plan = plan_batch_reassignment(slots, payload.mode, payload.size_quantities)

        today = today or date.today()
        stamp = today.isoformat()
        for dist in dists:
            dist.quantity = plan.source_quantities[dist.size_name]
        source.total_quantity = plan.source_total
        source.notes = _append_note(
            source.notes, f"Reassigned {plan.total_moved} qty to {target_batch.batch_name} on {stamp}"
        )

        target = await self.assignments.find_for_order_and_batch(source.order_id, target_batch.id)
        if target is not None:
            existing = {
                d.size_name: d
                for d in (await self.assignments.distributions_by_assignment([target.id])).get(target.id, [])
            }
            for size, qty in plan.moved.items():
                if size in existing:
                    existing[size].quantity = int(existing[size].quantity or 0) + qty
                else:
                    await self.assignments.add(
                        OrderBatchSizeDistribution(
                            order_batch_assignment_id=target.id, size_name=size, quantity=qty, picked_quantity=0
                        )
                    )
            target.total_quantity = int(target.total_quantity or 0) + plan.total_moved
            event = "UPDATE"
        else:
            target = OrderBatchAssignment(
                order_id=source.order_id,
                batch_id=target_batch.id,
                assignment_date=today,
                assigned_by_name=assigned_by_name,
                total_quantity=plan.total_moved,
                notes=f"Reassigned {plan.total_moved} qty from {source_name} on {stamp}",
            )
            await self.assignments.add(target)
            await self.assignments.flush()
            await self.assignments.add_all(
                OrderBatchSizeDistribution(
                    order_batch_assignment_id=target.id, size_name=size, quantity=qty, picked_quantity=0
                )
                for size, qty in plan.moved.items()
            )
            event = "INSERT"
        await self.assignments.commit()
        logger.info(
            "Reassigned %d pieces from batch %s to %s", plan.total_moved, source_name, target_batch.batch_name
        )

        await self.publish_change(BATCH_ASSIGNMENTS_TABLE, "UPDATE", source)
        await self.publish_change(BATCH_ASSIGNMENTS_TABLE, event, target)
        await self._after_production_write()
        source_read, target_read = await self.assignment_reads([source, target])
        return BatchReassignResult(
            source=source_read, target=target_read, moved=plan.moved, total_moved=plan.total_moved
        )

    # Cutting

    async def _eligible_master(self, employee_id: UUID):
        masters = {e.id: e for e in await EmployeeRepository(self.session).list_cutting_masters()}
        master = masters.get(employee_id)
        if master is None:
            raise BusinessRuleError(
                "Selected employee is not an active cutting master", {"employee_id": str(employee_id)}
            )
        return master

    # PUBLIC_INTERFACE
    async def list_cutting_assignments(
        self,
        order_id: Optional[UUID] = None,
        cutting_master_id: Optional[UUID] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[OrderCuttingAssignment]:
        return await self.cutting.list_assignments(
            order_id=order_id, cutting_master_id=cutting_master_id, status=status, limit=limit, offset=offset
        )

    # PUBLIC_INTERFACE
    async def assign_cutting(
        self,
        order_id: UUID,
        payload: CuttingAssignmentCreate,
        assigned_by_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> OrderCuttingAssignment:
        """Assign an order (or part of it) to a cutting master."""
        order = await self._order(order_id)
        master = await self._eligible_master(payload.cutting_master_id)
        total = order_total_quantity(order)
        quantity = payload.assigned_quantity if payload.assigned_quantity is not None else total
        if quantity > total:
            raise BusinessRuleError(
                f"Assigned quantity {quantity} exceeds the order quantity {total}",
                {"assigned_quantity": quantity, "order_quantity": total},
            )
        if await self.cutting.find_for_master(order.id, master.id):
            raise ConflictError(f"{master.full_name} is already assigned to this order")

        assignment = OrderCuttingAssignment(
            order_id=order.id,
            cutting_master_id=master.id,
            cutting_master_name=master.full_name,
            assigned_quantity=quantity,
            completed_quantity=0,
            cut_quantities_by_size={},
            status="assigned",
            assigned_date=today or date.today(),
            assigned_by_name=assigned_by_name,
            notes=payload.notes,
        )
        await self.cutting.add(assignment)
        await self.cutting.commit()
        logger.info("Order %s assigned to cutting master %s", order.order_number, master.full_name)
        await self.publish_change(CUTTING_ASSIGNMENTS_TABLE, "INSERT", assignment)
        await self._after_production_write()
        return assignment

    # PUBLIC_INTERFACE
    async def reassign_cutting(
        self,
        assignment_id: UUID,
        payload: CuttingReassignRequest,
        assigned_by_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> CuttingReassignResult:
        """Move uncut quantity from one cutting master to another."""
        old = await self.cutting.get_assignment(assignment_id)
        if not old:
            raise NotFoundError("Cutting assignment not found")
        if payload.new_master_id == old.cutting_master_id:
            raise BusinessRuleError("Select a different cutting master")
        master = await self._eligible_master(payload.new_master_id)
        order = await self._order(old.order_id)

        cut = old.cut_quantities_by_size or {}
        size_left = {size: max(0, qty - int(cut.get(size, 0) or 0)) for size, qty in order_sizes(order).items()}
        plan = plan_cutting_reassignment(
            old.assigned_quantity,
            order_total_quantity(order),
            old.completed_quantity,
            payload.mode,
            payload.quantity,
            size_left,
        )

        today = today or date.today()
        old.assigned_quantity = plan.old_assigned_quantity
        old.notes = _append_note(
            old.notes, f"Reassigned {plan.quantity} qty to {master.full_name} on {today.isoformat()}"
        )
        if plan.old_completed:
            old.status = "completed"

        target = await self.cutting.find_for_master(old.order_id, master.id)
        if target is not None:
            target.assigned_quantity = int(target.assigned_quantity or 0) + plan.quantity
            if target.status == "completed" and target.completed_quantity < target.assigned_quantity:
                target.status = "in_progress"
            event = "UPDATE"
        else:
            target = OrderCuttingAssignment(
                order_id=old.order_id,
                cutting_master_id=master.id,
                cutting_master_name=master.full_name,
                assigned_quantity=plan.quantity,
                completed_quantity=0,
                cut_quantities_by_size={},
                status="assigned",
                assigned_date=today,
                assigned_by_name=assigned_by_name,
                notes=f"Reassigned {plan.quantity} qty from {old.cutting_master_name or 'previous master'}",
            )
            await self.cutting.add(target)
            event = "INSERT"
        await self.cutting.commit()
        logger.info("Reassigned %d cutting pieces of order %s to %s", plan.quantity, order.order_number, master.full_name)

        await self.publish_change(CUTTING_ASSIGNMENTS_TABLE, "UPDATE", old)
        await self.publish_change(CUTTING_ASSIGNMENTS_TABLE, event, target)
        await self._after_production_write()
        return CuttingReassignResult(
            source=CuttingAssignmentRead.model_validate(old),
            target=CuttingAssignmentRead.model_validate(target),
            quantity=plan.quantity,
            size_split=plan.size_split,
        )

    # PUBLIC_INTERFACE
    async def cutting_progress(self, order_id: UUID) -> CuttingProgressRead:
        order = await self._order(order_id)
        progress = await self.cutting.get_progress(order.id)
        if progress is None:
            return CuttingProgressRead(order_id=order.id)
        return CuttingProgressRead.model_validate(progress)

    # PUBLIC_INTERFACE
    async def update_cutting(
        self, order_id: UUID, payload: CuttingUpdateRequest, used_by_name: Optional[str] = None
    ) -> CuttingProgressRead:
        """
        Record newly cut pieces for an order.

        Additional cuts are clamped to what is left per size. Any new cut needs
        a fabric usage entry covered by the fabric stock; the stock is reduced
        and the movement logged in the same transaction.
        """
        order = await self._order(order_id)
        progress = await self.cutting.get_progress(order.id)
        plan = plan_cutting_update(
            order_sizes(order),
            progress.cut_quantities_by_size if progress else {},
            payload.additional_cuts,
        )
        if plan.added_total <= 0:
            raise BusinessRuleError("Nothing to record: every size is already fully cut or no quantity was entered")

        usage = payload.fabric_usage
        fabric = await FabricRepository(self.session).get(usage.fabric_id) if usage else None
        if usage and fabric is None:
            raise NotFoundError("Fabric not found", {"fabric_id": str(usage.fabric_id)})
        validate_fabric_usage(
            plan.added_total,
            usage.used_quantity if usage else None,
            float(fabric.inventory or 0) if fabric else None,
        )

        assignment = None
        if payload.cutting_assignment_id:
            assignment = await self.cutting.get_assignment(payload.cutting_assignment_id)
            if not assignment or assignment.order_id != order.id:
                raise BusinessRuleError("Cutting assignment does not belong to this order")

        if progress is None:
            progress = CuttingProgress(order_id=order.id)
            await self.cutting.add(progress)
        progress.cut_quantities_by_size = dict(plan.cut_by_size)
        progress.cut_quantity = plan.cut_total

        if assignment is not None:
            assignment.completed_quantity = int(assignment.completed_quantity or 0) + plan.added_total
            assignment.cut_quantities_by_size = merge_quantities(
                {k: int(v or 0) for k, v in (assignment.cut_quantities_by_size or {}).items()}, plan.applied
            )
            effective = assignment.assigned_quantity
            if effective is None:
                effective = order_total_quantity(order)
            assignment.status = _cutting_status(assignment.completed_quantity, effective)

        old_stock = float(fabric.inventory or 0)
        new_stock = max(0.0, old_stock - usage.used_quantity)
        unit = usage.unit or fabric.uom
        await self.cutting.add(
            FabricUsageRecord(
                order_id=order.id,
                fabric_id=fabric.id,
                used_quantity=usage.used_quantity,
                unit=unit,
                cutting_quantity=plan.added_total,
                used_by_name=used_by_name,
                notes=usage.notes,
            )
        )
        fabric.inventory = new_stock
        await InventoryLogRepository(self.session).log(
            item_type="fabric",
            item_id=fabric.id,
            item_name=fabric.fabric_name,
            item_code=fabric.fabric_code,
            quantity=-usage.used_quantity,
            old_quantity=old_stock,
            new_quantity=new_stock,
            unit=unit,
            action="cutting_usage",
            reference_type="order",
            reference_id=order.id,
            reference_number=order.order_number,
            notes=f"{plan.added_total} pieces cut",
        )
        await self.cutting.commit()
        logger.info("Recorded %d cut pieces for order %s", plan.added_total, order.order_number)

        if assignment is not None:
            await self.publish_change(CUTTING_ASSIGNMENTS_TABLE, "UPDATE", assignment)
        self.invalidate("fabrics", "inventory_items")
        await self._after_production_write()
        return CuttingProgressRead(
            order_id=order.id,
            cut_quantity=progress.cut_quantity,
            cut_quantities_by_size=progress.cut_quantities_by_size,
            applied=plan.applied,
        )

    # Picking

    async def _pick_lines(self, assignment_ids: Iterable[UUID]) -> Dict[UUID, List[PickLine]]:
        ids = list(assignment_ids)
        dists = await self.assignments.distributions_by_assignment(ids)
        reviews = await self.reviews.by_assignment_and_size(ids)
        lines: Dict[UUID, List[PickLine]] = {}
        for aid in ids:
            for d in dists.get(aid, []):
                review = reviews.get((aid, d.size_name))
                lines.setdefault(aid, []).append(
                    PickLine(
                        size_name=d.size_name,
                        assigned=int(d.quantity or 0),
                        picked=int(d.picked_quantity or 0),
                        rejected=int(review.rejected_quantity or 0) if review else 0,
                    )
                )
        return lines

    # PUBLIC_INTERFACE
    async def pick(self, assignment_id: UUID, size_picks: Dict[str, int]) -> BatchAssignmentRead:
        """Record stitched pieces collected from a batch."""
        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError("Batch assignment not found")
        lines = (await self._pick_lines([assignment.id])).get(assignment.id, [])
        new_picked = apply_picks(lines, size_picks)

        dists = (await self.assignments.distributions_by_assignment([assignment.id])).get(assignment.id, [])
        for dist in dists:
            if dist.size_name in new_picked:
                dist.picked_quantity = new_picked[dist.size_name]
        await self.assignments.commit()
        logger.info("Picked %s from batch assignment %s", size_picks, assignment.id)

        await self.publish_change(BATCH_ASSIGNMENTS_TABLE, "UPDATE", assignment)
        await self._after_production_write()
        return (await self.assignment_reads([assignment]))[0]

    # PUBLIC_INTERFACE
    async def picker_rows(self, limit: int = 1000, offset: int = 0) -> List[PickerRow]:
        """Every batch assignment with per-size assigned, picked, rejected and remaining."""
        assignments = await self.assignments.list_assignments(limit=limit, offset=offset)
        lines = await self._pick_lines(a.id for a in assignments)
        orders = await self.orders.get_many(a.order_id for a in assignments)
        customers = await self.orders.customer_names(o.customer_id for o in orders.values())
        batches = await self.batches.names(a.batch_id for a in assignments)

        rows: List[PickerRow] = []
        for a in assignments:
            by_size = {line.size_name: line for line in lines.get(a.id, [])}
            sizes = [
                PickerSizeRow(
                    size_name=line.size_name,
                    assigned=line.assigned,
                    picked=line.picked,
                    rejected=line.rejected,
                    remaining=line.remaining(),
                )
                for line in (by_size[s] for s in sort_sizes(by_size, reference=PICKER_SIZE_ORDER))
            ]
            order = orders.get(a.order_id)
            batch = batches.get(a.batch_id)
            rows.append(
                PickerRow(
                    assignment_id=a.id,
                    order_id=a.order_id,
                    order_number=order.order_number if order else None,
                    customer_name=customers.get(order.customer_id) if order else None,
                    batch_id=a.batch_id,
                    batch_name=batch.batch_name if batch else None,
                    total_quantity=sum(s.assigned for s in sizes),
                    total_picked=sum(s.picked for s in sizes),
                    total_remaining=sum(s.remaining for s in sizes),
                    sizes=sizes,
                )
            )
        return rows

    # KPIs

    # PUBLIC_INTERFACE
    async def compute_kpis(self) -> KpiSnapshot:
        """
        Production floor KPIs.

        cutting_pending sums the uncut quantity of open cutting assignments
        (a missing assigned quantity means the whole order); the QC pass rate
        is approved over picked, as a whole percentage.
        """
        open_assignments = await self.cutting.open_assignments()
        orders = await self.orders.get_many(
            a.order_id for a in open_assignments if a.assigned_quantity is None
        )
        cutting_pending = 0
        for a in open_assignments:
            effective = a.assigned_quantity
            if effective is None:
                order = orders.get(a.order_id)
                effective = order_total_quantity(order) if order else 0
            cutting_pending += max(0, effective - int(a.completed_quantity or 0))

        picked = await self.assignments.total_picked()
        approved, rejected = await self.reviews.totals()
        return KpiSnapshot(
            cutting_pending=cutting_pending,
            stitching_assigned=await self.assignments.total_distributed(),
            qc_total_picked=picked,
            qc_total_approved=approved,
            qc_total_rejected=rejected,
            qc_pass_rate=pass_rate(approved, picked),
        )

    async def publish_kpis(self) -> None:
        """Publish a KPI snapshot for dashboards."""
        try:
            snapshot = await self.compute_kpis()
            await broadcast_manager.publish_kpi_snapshot(snapshot)
        except Exception:
            logger.exception("Failed to publish KPI snapshot")

    # PUBLIC_INTERFACE
    async def batch_sheet_data(self, assignment_id: UUID) -> BatchSheetData:
        """Everything printed on a batch assignment sheet."""
        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError("Batch assignment not found")
        order = await self._order(assignment.order_id)
        customers = await self.orders.customer_names([order.customer_id])
        batch = await self.batches.get(assignment.batch_id)
        dists = {
            d.size_name: d
            for d in (await self.assignments.distributions_by_assignment([assignment.id])).get(assignment.id, [])
        }
        return BatchSheetData(
            order_number=order.order_number,
            customer_name=customers.get(order.customer_id),
            batch_name=batch.batch_name if batch else "",
            batch_code=batch.batch_code if batch else None,
            batch_leader_name=batch.batch_leader_name if batch else None,
            assignment_date=assignment.assignment_date,
            assigned_by_name=assignment.assigned_by_name,
            sizes=[
                (s, int(dists[s].quantity or 0), int(dists[s].picked_quantity or 0))
                for s in sort_sizes(dists, reference=PICKER_SIZE_ORDER)
            ],
            notes=assignment.notes,
        )

from __future__ import annotations

import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import BusinessRuleError, NotFoundError
from garment_erp.db.models.quality import QcReview
from garment_erp.repositories.production import BatchAssignmentRepository, BatchRepository
from garment_erp.repositories.quality import QcReviewRepository
from garment_erp.repositories.sales import OrderRepository
from garment_erp.schemas.quality import QcOrderRow, QcReviewRead, QcReviewRow, QcReviewSubmit, QcSummary
from garment_erp.services.base import BaseService
from garment_erp.services.production import ProductionService
from garment_erp.services.qc import QcDecision, QcState, apply_qc_decision, pass_rate, summarize_orders
from garment_erp.services.sizes import PICKER_SIZE_ORDER, sort_sizes

logger = logging.getLogger(__name__)

QC_REVIEWS_TABLE = "qc_reviews"


class QualityService(BaseService):
    """QC queue, per-size inspection rounds and pass-rate summary."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.assignments = BatchAssignmentRepository(session)
        self.reviews = QcReviewRepository(session)
        self.orders = OrderRepository(session)

    # PUBLIC_INTERFACE
    async def order_queue(self, search: Optional[str] = None) -> List[QcOrderRow]:
        """Orders with picked pieces, aggregated over their batch assignments."""
        assignments = await self.assignments.list_assignments(limit=10000)
        ids = [a.id for a in assignments]
        dists = await self.assignments.distributions_by_assignment(ids)
        reviews: Dict[UUID, List[QcReview]] = {}
        for review in await self.reviews.for_assignments(ids):
            reviews.setdefault(review.order_batch_assignment_id, []).append(review)
        orders = await self.orders.get_many(a.order_id for a in assignments)
        customers = await self.orders.customer_names(o.customer_id for o in orders.values())

        rows = []
        for a in assignments:
            order = orders.get(a.order_id)
            rows.append(
                {
                    "order_id": a.order_id,
                    "order_number": order.order_number if order else "",
                    "customer_name": customers.get(order.customer_id) if order else None,
                    "assignment_id": a.id,
                    "picked": sum(int(d.picked_quantity or 0) for d in dists.get(a.id, [])),
                    "total": sum(int(d.quantity or 0) for d in dists.get(a.id, [])),
                    "approved": sum(int(r.approved_quantity or 0) for r in reviews.get(a.id, [])),
                    "rejected": sum(int(r.rejected_quantity or 0) for r in reviews.get(a.id, [])),
                }
            )
        return [QcOrderRow.model_validate(s) for s in summarize_orders(rows, search)]

    async def _states(self, assignment_id: UUID):
        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError("Batch assignment not found")
        dists = {
            d.size_name: d
            for d in (await self.assignments.distributions_by_assignment([assignment.id])).get(assignment.id, [])
        }
        reviews = await self.reviews.by_assignment_and_size([assignment.id])
        states: Dict[str, QcState] = {}
        for size, dist in dists.items():
            review = reviews.get((assignment.id, size))
            states[size] = QcState(
                size_name=size,
                picked=int(dist.picked_quantity or 0),
                prev_approved=int(review.approved_quantity or 0) if review else 0,
                prev_rejected=int(review.rejected_quantity or 0) if review else 0,
                has_review=review is not None,
            )
        return assignment, dists, reviews, states

    # PUBLIC_INTERFACE
    async def review(self, assignment_id: UUID) -> QcReviewRead:
        """Per-size review state of a batch assignment, including pieces waiting for QC."""
        assignment, dists, reviews, states = await self._states(assignment_id)
        order = await self.orders.get(assignment.order_id)
        batch = await BatchRepository(self.session).get(assignment.batch_id)
        rows = []
        for size in sort_sizes(dists, reference=PICKER_SIZE_ORDER):
            state = states[size]
            review = reviews.get((assignment.id, size))
            rows.append(
                QcReviewRow(
                    size_name=size,
                    assigned=int(dists[size].quantity or 0),
                    picked=state.picked,
                    approved=state.prev_approved,
                    rejected=state.prev_rejected,
                    needs_qc=state.pending,
                    remarks=review.remarks if review else None,
                )
            )
        return QcReviewRead(
            assignment_id=assignment.id,
            order_id=assignment.order_id,
            order_number=order.order_number if order else None,
            batch_name=batch.batch_name if batch else None,
            sizes=rows,
        )

    # PUBLIC_INTERFACE
    async def submit_review(
        self, assignment_id: UUID, payload: QcReviewSubmit, reviewed_by_name: Optional[str] = None
    ) -> QcReviewRead:
        """
        Save one inspection round. Counts accumulate onto the stored review of
        each size; every size is validated before anything is written.
        """
        assignment, dists, reviews, states = await self._states(assignment_id)
        seen = set()
        for decision in payload.sizes:
            if decision.size_name in seen:
                raise BusinessRuleError(
                    f"Size {decision.size_name} is listed more than once", {"size": decision.size_name}
                )
            seen.add(decision.size_name)
        outcomes = []
        for decision in payload.sizes:
            state = states.get(decision.size_name)
            if state is None:
                raise BusinessRuleError(
                    f"Size {decision.size_name} is not assigned to this batch", {"size": decision.size_name}
                )
            outcomes.append(
                apply_qc_decision(
                    state,
                    QcDecision(decision.size_name, decision.approved, decision.rejected, decision.remarks),
                )
            )
        if not any(d.approved or d.rejected for d in payload.sizes):
            raise BusinessRuleError("Enter approved or rejected quantities for at least one size")

        for outcome in outcomes:
            review = reviews.get((assignment.id, outcome.size_name))
            if review is None:
                review = QcReview(order_batch_assignment_id=assignment.id, size_name=outcome.size_name)
                await self.reviews.add(review)
            review.picked_quantity = outcome.picked
            review.approved_quantity = outcome.approved
            review.rejected_quantity = outcome.rejected
            review.remarks = outcome.remarks or review.remarks
            review.reviewed_by_name = reviewed_by_name
        await self.reviews.commit()
        logger.info("Saved QC review for batch assignment %s (%d sizes)", assignment.id, len(outcomes))

        self.invalidate("quality_checks", "dashboard_metrics")
        for review in (await self.reviews.by_assignment_and_size([assignment.id])).values():
            await self.publish_change(QC_REVIEWS_TABLE, "UPDATE", review)
        await ProductionService(self.session).publish_kpis()
        return await self.review(assignment.id)

    # PUBLIC_INTERFACE
    async def summary(self) -> QcSummary:
        picked = await self.assignments.total_picked()
        approved, rejected = await self.reviews.totals()
        return QcSummary(
            total_picked=picked,
            total_approved=approved,
            total_rejected=rejected,
            pass_rate=pass_rate(approved, picked),
        )

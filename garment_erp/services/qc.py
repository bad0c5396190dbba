"""
QC review arithmetic.

A review row per (batch assignment, size) accumulates approved and rejected
counts over several inspection rounds; these helpers decide how many pieces
are waiting for inspection and how a new round folds into the totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from garment_erp.core.errors import BusinessRuleError


# PUBLIC_INTERFACE
def needs_qc(picked: int, prev_approved: int, prev_rejected: int, has_review: bool) -> int:
    """
    Pieces waiting for inspection.

    Without a prior review every picked piece waits. Otherwise it is the picked
    pieces not yet inspected; when that is zero but earlier rejects exist and
    picked equals approved + rejected, the rejects were replaced by re-picks
    and those replacements wait for inspection.
    """
    if not has_review:
        return max(0, picked)
    pending = max(0, picked - (prev_approved + prev_rejected))
    if pending == 0 and prev_rejected > 0 and picked == prev_approved + prev_rejected:
        pending = prev_rejected
    return pending


# PUBLIC_INTERFACE
def complement_quantities(
    inspected: int, approved: Optional[int] = None, rejected: Optional[int] = None
) -> Tuple[int, int]:
    """
    Fill in the other side of an inspection: setting approved implies
    rejected = inspected - approved and vice versa. Values are clamped to
    [0, inspected].
    """
    if approved is not None:
        a = max(0, min(int(approved), inspected))
        return a, max(0, inspected - a)
    if rejected is not None:
        r = max(0, min(int(rejected), inspected))
        return max(0, inspected - r), r
    return 0, 0


@dataclass(frozen=True)
class QcState:
    size_name: str
    picked: int
    prev_approved: int = 0
    prev_rejected: int = 0
    has_review: bool = False

    @property
    def pending(self) -> int:
        return needs_qc(self.picked, self.prev_approved, self.prev_rejected, self.has_review)


@dataclass(frozen=True)
class QcDecision:
    size_name: str
    approved: int
    rejected: int
    remarks: Optional[str] = None


@dataclass(frozen=True)
class QcOutcome:
    size_name: str
    picked: int
    approved: int
    rejected: int
    remarks: Optional[str]


# PUBLIC_INTERFACE
def apply_qc_decision(state: QcState, decision: QcDecision) -> QcOutcome:
    """
    Fold one inspection round into the cumulative review.

    final_approved = min(prev approved + approved, picked)
    final_rejected = min(prev rejected + rejected, picked - final_approved)
    """
    if decision.approved < 0 or decision.rejected < 0:
        raise BusinessRuleError("Approved and rejected quantities cannot be negative", {"size": state.size_name})
    if decision.approved + decision.rejected > state.pending:
        raise BusinessRuleError(
            f"Size {state.size_name}: approved + rejected exceeds the {state.pending} pieces awaiting QC",
            {"size": state.size_name, "pending": state.pending},
        )
    if decision.rejected > 0 and not (decision.remarks or "").strip():
        raise BusinessRuleError(
            f"Size {state.size_name}: remarks are required when rejecting pieces",
            {"size": state.size_name},
        )

    final_approved = min(state.prev_approved + decision.approved, state.picked)
    final_rejected = min(state.prev_rejected + decision.rejected, state.picked - final_approved)
    return QcOutcome(
        size_name=state.size_name,
        picked=state.picked,
        approved=max(0, final_approved),
        rejected=max(0, final_rejected),
        remarks=(decision.remarks or "").strip() or None,
    )


# PUBLIC_INTERFACE
def pass_rate(approved: int, picked: int) -> int:
    """Approved share of picked pieces as a whole percentage."""
    if picked <= 0:
        return 0
    return int(round(approved / picked * 100))


@dataclass
class QcOrderSummary:
    order_id: UUID
    order_number: str
    customer_name: Optional[str]
    picked: int = 0
    total: int = 0
    approved: int = 0
    rejected: int = 0
    assignment_ids: List[UUID] | None = None


# PUBLIC_INTERFACE
def summarize_orders(rows: Iterable[dict], search: Optional[str] = None) -> List[QcOrderSummary]:
    """
    Group batch-assignment rows by order for the QC queue.

    Each row carries order_id, order_number, customer_name, assignment_id,
    picked, total, approved and rejected. Assignments with nothing picked are
    skipped. `search` matches order number or customer name, case-insensitive.
    """
    needle = (search or "").strip().lower()
    grouped: Dict[UUID, QcOrderSummary] = {}
    for row in rows:
        if int(row.get("picked") or 0) <= 0:
            continue
        summary = grouped.get(row["order_id"])
        if summary is None:
            summary = QcOrderSummary(
                order_id=row["order_id"],
                order_number=row.get("order_number") or "",
                customer_name=row.get("customer_name"),
                assignment_ids=[],
            )
            grouped[row["order_id"]] = summary
        summary.picked += int(row.get("picked") or 0)
        summary.total += int(row.get("total") or 0)
        summary.approved += int(row.get("approved") or 0)
        summary.rejected += int(row.get("rejected") or 0)
        summary.assignment_ids.append(row["assignment_id"])

    result = list(grouped.values())
    if needle:
        result = [
            s for s in result
            if needle in s.order_number.lower() or needle in (s.customer_name or "").lower()
        ]
    return result

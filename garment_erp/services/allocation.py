"""
Quantity allocation rules for the production floor.

Every function here works on small in-memory mappings of size -> quantity and
either returns a plan describing the rows to write or raises
BusinessRuleError. No function touches the database; ProductionService applies
the plans inside a single transaction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
from uuid import UUID

from garment_erp.core.errors import BusinessRuleError

MODE_ALL = "all"
MODE_PARTIAL = "partial"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_int_map(mapping: Optional[Mapping[str, object]]) -> Dict[str, int]:
    return {str(k): int(v or 0) for k, v in (mapping or {}).items()}


@dataclass(frozen=True)
class BatchShare:
    """Requested per-size quantities for one batch."""
    batch_id: UUID
    size_quantities: Dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.size_quantities.values())


# PUBLIC_INTERFACE
def remaining_by_size(order_sizes: Mapping[str, int], shares: Iterable[BatchShare]) -> Dict[str, int]:
    """Ordered quantity minus what the shares already take, per size (may go negative)."""
    remaining = dict(order_sizes)
    for share in shares:
        for size, qty in share.size_quantities.items():
            remaining[size] = remaining.get(size, 0) - qty
    return remaining


# PUBLIC_INTERFACE
def clamp_share_quantity(
    order_sizes: Mapping[str, int],
    shares: Sequence[BatchShare],
    batch_id: UUID,
    size: str,
    requested: int,
) -> int:
    """
    Largest quantity of `size` batch `batch_id` may take without exceeding the order,
    given what the other shares already hold.
    """
    others = [s for s in shares if s.batch_id != batch_id]
    available = remaining_by_size(order_sizes, others).get(size, 0)
    return max(0, min(int(requested), available))


# PUBLIC_INTERFACE
def plan_batch_distribution(order_sizes: Mapping[str, int], shares: Sequence[BatchShare]) -> List[BatchShare]:
    """
    Validate a split of an order across batches and return the shares to persist.

    Rules: quantities are non-negative, only ordered sizes may be used, a batch
    appears once, and for every size the shares add up to exactly the ordered
    quantity. Shares with a zero total are dropped from the result.
    """
    if not order_sizes:
        raise BusinessRuleError("Order has no size quantities to distribute")
    if not shares:
        raise BusinessRuleError("Select at least one batch")

    seen: set[UUID] = set()
    for share in shares:
        if share.batch_id in seen:
            raise BusinessRuleError("A batch can only appear once in a distribution", {"batch_id": str(share.batch_id)})
        seen.add(share.batch_id)
        for size, qty in share.size_quantities.items():
            if qty < 0:
                raise BusinessRuleError("Quantities cannot be negative", {"size": size})
            if size not in order_sizes and qty > 0:
                raise BusinessRuleError(f"Size {size} is not part of this order", {"size": size})

    remaining = remaining_by_size(order_sizes, shares)
    unbalanced = {size: qty for size, qty in remaining.items() if qty != 0 and size in order_sizes}
    if unbalanced:
        raise BusinessRuleError(
            "Distribute the full order quantity: every size must have 0 remaining",
            {"remaining": unbalanced},
        )

    return [
        BatchShare(batch_id=s.batch_id, size_quantities={k: v for k, v in s.size_quantities.items() if v > 0})
        for s in shares
        if s.total > 0
    ]


@dataclass(frozen=True)
class SizeSlot:
    """One size distribution row of a batch assignment."""
    size_name: str
    quantity: int
    picked_quantity: int = 0

    @property
    def left(self) -> int:
        return max(0, self.quantity - self.picked_quantity)


@dataclass(frozen=True)
class BatchReassignmentPlan:
    moved: Dict[str, int]
    total_moved: int
    source_quantities: Dict[str, int]
    source_total: int


# PUBLIC_INTERFACE
def plan_batch_reassignment(
    slots: Sequence[SizeSlot],
    mode: str,
    requested: Optional[Mapping[str, int]] = None,
) -> BatchReassignmentPlan:
    """
    Work out how many unpicked pieces move off a batch assignment.

    mode 'all' moves every unpicked piece. mode 'partial' moves the requested
    per-size quantities, each bounded by what is left unpicked for the size.
    The source keeps at least what has been picked already.
    """
    left = {slot.size_name: slot.left for slot in slots}
    if mode == MODE_ALL:
        moved = {size: qty for size, qty in left.items() if qty > 0}
    elif mode == MODE_PARTIAL:
        req = _as_int_map(requested)
        moved = {}
        for size, qty in req.items():
            if qty < 0:
                raise BusinessRuleError("Reassigned quantity cannot be negative", {"size": size})
            if size not in left:
                raise BusinessRuleError(f"Size {size} is not assigned to this batch", {"size": size})
            if qty > left[size]:
                raise BusinessRuleError(
                    f"Cannot reassign {qty} of size {size}; only {left[size]} left",
                    {"size": size, "left": left[size], "requested": qty},
                )
            if qty > 0:
                moved[size] = qty
    else:
        raise BusinessRuleError(f"Unknown reassignment mode: {mode}")

    total = sum(moved.values())
    if total <= 0:
        raise BusinessRuleError("Nothing to reassign: enter at least one quantity")

    source = {
        slot.size_name: max(slot.picked_quantity, slot.quantity - moved.get(slot.size_name, 0))
        for slot in slots
    }
    return BatchReassignmentPlan(
        moved=moved,
        total_moved=total,
        source_quantities=source,
        source_total=sum(source.values()),
    )


# PUBLIC_INTERFACE
def merge_quantities(existing: Mapping[str, int], added: Mapping[str, int]) -> Dict[str, int]:
    """Add per-size quantities onto an existing breakdown, inserting new sizes."""
    merged = dict(existing)
    for size, qty in added.items():
        merged[size] = merged.get(size, 0) + qty
    return merged


# PUBLIC_INTERFACE
def effective_assigned_quantity(assigned_quantity: Optional[int], fallback_total: int) -> int:
    """The assignment's own quantity, or the order total when none was recorded."""
    if assigned_quantity is None:
        return int(fallback_total)
    return int(assigned_quantity)


# PUBLIC_INTERFACE
def split_proportionally(size_left: Mapping[str, int], quantity: int) -> Dict[str, int]:
    """
    Spread `quantity` across sizes in proportion to what each size has left,
    rounding each share half-up. Sizes with nothing left get nothing.
    """
    total_left = sum(v for v in size_left.values() if v > 0)
    if total_left <= 0 or quantity <= 0:
        return {}
    split: Dict[str, int] = {}
    for size, left in size_left.items():
        if left <= 0:
            continue
        share = _round_half_up(left / total_left * quantity)
        if share > 0:
            split[size] = share
    return split


@dataclass(frozen=True)
class CuttingReassignmentPlan:
    quantity: int
    left_before: int
    old_assigned_quantity: int
    old_completed: bool
    size_split: Dict[str, int] = field(default_factory=dict)


# PUBLIC_INTERFACE
def plan_cutting_reassignment(
    assigned_quantity: Optional[int],
    fallback_total: int,
    completed_quantity: int,
    mode: str,
    quantity: Optional[int] = None,
    size_left: Optional[Mapping[str, int]] = None,
) -> CuttingReassignmentPlan:
    """
    Move uncut quantity from one cutting master to another.

    left = effective assigned - completed (never negative). 'all' moves the
    whole of it, 'partial' moves 0 < quantity <= left. The old assignment keeps
    effective assigned - moved and is complete once nothing uncut remains.
    """
    effective = effective_assigned_quantity(assigned_quantity, fallback_total)
    left = max(0, effective - int(completed_quantity or 0))
    if left <= 0:
        raise BusinessRuleError("Nothing left to reassign on this cutting assignment")

    if mode == MODE_ALL:
        qty = left
    elif mode == MODE_PARTIAL:
        qty = int(quantity or 0)
        if qty <= 0:
            raise BusinessRuleError("Enter a quantity greater than zero")
        if qty > left:
            raise BusinessRuleError(
                f"Cannot reassign {qty}; only {left} left to cut",
                {"left": left, "requested": qty},
            )
    else:
        raise BusinessRuleError(f"Unknown reassignment mode: {mode}")

    remaining_assigned = max(0, effective - qty)
    return CuttingReassignmentPlan(
        quantity=qty,
        left_before=left,
        old_assigned_quantity=remaining_assigned,
        old_completed=remaining_assigned <= int(completed_quantity or 0),
        size_split=split_proportionally(_as_int_map(size_left), qty),
    )


@dataclass(frozen=True)
class CuttingUpdatePlan:
    applied: Dict[str, int]
    added_total: int
    cut_by_size: Dict[str, int]
    cut_total: int


# PUBLIC_INTERFACE
def plan_cutting_update(
    order_sizes: Mapping[str, int],
    existing_cut: Mapping[str, int],
    additional: Mapping[str, int],
) -> CuttingUpdatePlan:
    """
    Apply newly cut pieces to an order's running cut totals.

    Each additional quantity is clamped to [0, ordered - already cut] for its
    size; sizes not in the order are ignored.
    """
    current = _as_int_map(existing_cut)
    applied: Dict[str, int] = {}
    for size, qty in _as_int_map(additional).items():
        if size not in order_sizes:
            continue
        ceiling = max(0, order_sizes[size] - current.get(size, 0))
        clamped = max(0, min(qty, ceiling))
        if clamped > 0:
            applied[size] = clamped

    cut_by_size = merge_quantities(current, applied)
    return CuttingUpdatePlan(
        applied=applied,
        added_total=sum(applied.values()),
        cut_by_size=cut_by_size,
        cut_total=sum(cut_by_size.values()),
    )


# PUBLIC_INTERFACE
def validate_fabric_usage(added_total: int, used_quantity: Optional[float], available: Optional[float]) -> None:
    """
    Newly cut pieces must be backed by a fabric usage entry that the fabric
    stock can cover.
    """
    if added_total <= 0:
        return
    if used_quantity is None or available is None:
        raise BusinessRuleError("Fabric usage is required when recording cut quantities")
    if used_quantity <= 0:
        raise BusinessRuleError("Fabric used must be greater than zero")
    if used_quantity > available:
        raise BusinessRuleError(
            f"Fabric used ({used_quantity}) exceeds available stock ({available})",
            {"used_quantity": used_quantity, "available": available},
        )

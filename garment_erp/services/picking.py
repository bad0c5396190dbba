"""Picker arithmetic: how many stitched pieces can still be collected from a batch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

from garment_erp.core.errors import BusinessRuleError


@dataclass(frozen=True)
class PickLine:
    """State of one size of a batch assignment as the picker sees it."""
    size_name: str
    assigned: int
    picked: int
    rejected: int = 0

    # PUBLIC_INTERFACE
    def effective_rejected(self, new_picks: int = 0) -> int:
        """QC rejects not yet compensated by the picks being entered now."""
        return max(0, self.rejected - new_picks)

    # PUBLIC_INTERFACE
    def remaining(self, new_picks: int = 0) -> int:
        """assigned - picked + effective rejected, never negative."""
        return max(0, self.assigned - self.picked + self.effective_rejected(new_picks))

    # PUBLIC_INTERFACE
    def picked_after(self, new_picks: int) -> int:
        """
        Picked total after new picks. New picks first replace rejected pieces,
        then add on top; the result never exceeds the assigned quantity.
        """
        return min(self.assigned, max(0, self.picked - self.rejected + new_picks))


# PUBLIC_INTERFACE
def apply_picks(lines: Sequence[PickLine], picks: Mapping[str, int]) -> Dict[str, int]:
    """
    Validate newly picked quantities and return the new picked total per size.

    Only sizes with a positive pick are returned. Each pick must be within the
    size's remaining quantity before picking.
    """
    by_size = {line.size_name: line for line in lines}
    result: Dict[str, int] = {}
    for size, raw in picks.items():
        qty = int(raw or 0)
        if qty == 0:
            continue
        line = by_size.get(size)
        if line is None:
            raise BusinessRuleError(f"Size {size} is not assigned to this batch", {"size": size})
        if qty < 0:
            raise BusinessRuleError("Picked quantity cannot be negative", {"size": size})
        available = line.remaining()
        if qty > available:
            raise BusinessRuleError(
                f"Cannot pick {qty} of size {size}; only {available} remaining",
                {"size": size, "remaining": available, "requested": qty},
            )
        result[size] = line.picked_after(qty)
    if not result:
        raise BusinessRuleError("Enter at least one picked quantity")
    return result

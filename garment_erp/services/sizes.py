"""Size ordering helpers shared by order, cutting, picking and QC views."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

DEFAULT_SIZE_ORDER: Tuple[str, ...] = ("XS", "S", "M", "L", "XL", "2XL", "3XL", "4XL", "5XL")

NUMERIC_SIZES: Tuple[str, ...] = tuple(str(n) for n in range(20, 51, 2))

KIDS_SIZES: Tuple[str, ...] = (
    "0-2 Yrs",
    "3-4 Yrs",
    "5-6 Yrs",
    "7-8 Yrs",
    "9-10 Yrs",
    "11-12 Yrs",
    "13-14 Yrs",
    "15-16 Yrs",
)

PICKER_SIZE_ORDER: Tuple[str, ...] = DEFAULT_SIZE_ORDER + NUMERIC_SIZES + KIDS_SIZES

# Position used for sizes missing from an explicit size_order mapping.
UNRANKED = 999


# PUBLIC_INTERFACE
def sort_sizes(
    sizes: Iterable[str],
    size_order: Optional[Mapping[str, int]] = None,
    reference: Sequence[str] = DEFAULT_SIZE_ORDER,
) -> List[str]:
    """
    Sort size names for display.

    With a non-empty size_order mapping (from a size type) sizes sort by their
    mapped position, unmapped ones last. Otherwise sizes follow `reference`
    and unknown sizes come after the known ones in alphabetical order.
    """
    items = list(sizes)
    if size_order:
        return sorted(items, key=lambda s: (size_order.get(s, UNRANKED), s))

    rank = {name: i for i, name in enumerate(reference)}
    return sorted(items, key=lambda s: (0, rank[s], "") if s in rank else (1, 0, s))


# PUBLIC_INTERFACE
def sort_size_quantities(
    sizes_quantities: Mapping[str, int],
    size_order: Optional[Mapping[str, int]] = None,
    reference: Sequence[str] = DEFAULT_SIZE_ORDER,
) -> List[Tuple[str, int]]:
    """Return (size, quantity) pairs ordered like sort_sizes."""
    return [(s, sizes_quantities[s]) for s in sort_sizes(sizes_quantities.keys(), size_order, reference)]


# PUBLIC_INTERFACE
def create_size_order(sizes: Iterable[str]) -> Dict[str, int]:
    """Map each non-blank size to its 1-based position."""
    order: Dict[str, int] = {}
    for index, size in enumerate(sizes):
        if size and size.strip():
            order[size.strip()] = index + 1
    return order


# PUBLIC_INTERFACE
def aggregate_sizes(size_maps: Iterable[Mapping[str, object]]) -> Dict[str, int]:
    """
    Sum several {size: qty} mappings (e.g. all items of an order).

    Quantities are coerced to int; sizes whose total is zero are dropped.
    """
    totals: Dict[str, int] = {}
    for mapping in size_maps:
        for size, qty in (mapping or {}).items():
            totals[size] = totals.get(size, 0) + int(qty or 0)
    return {size: qty for size, qty in totals.items() if qty > 0}

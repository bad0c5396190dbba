"""
Money arithmetic for orders, purchase orders and invoices, plus the
document-number and display formatting helpers used on generated paperwork.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

CURRENCY_SYMBOL = "₹"


def _round2(value: float) -> float:
    return round(float(value), 2)


# PUBLIC_INTERFACE
def calculate_size_based_total(
    sizes_quantities: Mapping[str, int],
    size_prices: Optional[Mapping[str, float]],
    default_price: float,
) -> float:
    """
    Total price of a size breakdown.

    A size uses its own price when one is stored and differs from the default
    price; otherwise the default price applies.
    """
    total = 0.0
    prices = size_prices or {}
    for size, qty in (sizes_quantities or {}).items():
        stored = prices.get(size)
        price = float(stored) if stored is not None and float(stored) != float(default_price) else float(default_price)
        total += int(qty or 0) * price
    return _round2(total)


# PUBLIC_INTERFACE
def calculate_average_unit_price(
    sizes_quantities: Mapping[str, int],
    size_prices: Optional[Mapping[str, float]],
    default_price: float,
) -> float:
    """Average price per piece across sizes; the default price when there are no pieces."""
    total = calculate_size_based_total(sizes_quantities, size_prices, default_price)
    qty = sum(int(q or 0) for q in (sizes_quantities or {}).values())
    return total / qty if qty > 0 else float(default_price)


@dataclass(frozen=True)
class OrderTotals:
    total_amount: float
    tax_amount: float
    final_amount: float
    balance_amount: float


# PUBLIC_INTERFACE
def calculate_order_totals(item_totals: Iterable[float], gst_rate: float, advance_amount: float = 0.0) -> OrderTotals:
    """Order header amounts from its item totals, the order GST rate and the advance paid."""
    total = _round2(sum(float(t or 0) for t in item_totals))
    tax = _round2(total * float(gst_rate or 0) / 100)
    final = _round2(total + tax)
    return OrderTotals(
        total_amount=total,
        tax_amount=tax,
        final_amount=final,
        balance_amount=_round2(final - float(advance_amount or 0)),
    )


@dataclass(frozen=True)
class LineAmounts:
    total_price: float
    gst_amount: float


# PUBLIC_INTERFACE
def calculate_line_amounts(quantity: float, unit_price: float, gst_rate: float) -> LineAmounts:
    """Line total (qty x price) and the GST on it."""
    total = _round2(float(quantity) * float(unit_price))
    return LineAmounts(total_price=total, gst_amount=_round2(total * float(gst_rate or 0) / 100))


@dataclass
class DocumentTotals:
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total_amount: float = 0.0
    paid_amount: float = 0.0
    balance_amount: float = 0.0
    gst_breakdown: Dict[float, Dict[str, float]] = field(default_factory=dict)


# PUBLIC_INTERFACE
def calculate_document_totals(
    lines: Iterable[Tuple[LineAmounts, float]], paid_amount: float = 0.0
) -> DocumentTotals:
    """
    Invoice/PO totals from (line amounts, gst rate) pairs.

    The GST breakdown groups taxable value and tax by rate, in first-seen order.
    """
    result = DocumentTotals(paid_amount=_round2(paid_amount or 0))
    breakdown: "OrderedDict[float, Dict[str, float]]" = OrderedDict()
    for amounts, rate in lines:
        result.subtotal += amounts.total_price
        result.tax_amount += amounts.gst_amount
        key = float(rate or 0)
        bucket = breakdown.setdefault(key, {"taxable_value": 0.0, "gst_amount": 0.0})
        bucket["taxable_value"] = _round2(bucket["taxable_value"] + amounts.total_price)
        bucket["gst_amount"] = _round2(bucket["gst_amount"] + amounts.gst_amount)
    result.subtotal = _round2(result.subtotal)
    result.tax_amount = _round2(result.tax_amount)
    result.total_amount = _round2(result.subtotal + result.tax_amount)
    result.balance_amount = _round2(result.total_amount - result.paid_amount)
    result.gst_breakdown = dict(breakdown)
    return result


# PUBLIC_INTERFACE
def format_currency(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount with Indian digit grouping, e.g. 1234567.5 -> '₹12,34,567.50'."""
    value = round(float(amount or 0), 2)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups: List[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{symbol}{whole}.{frac}"


# PUBLIC_INTERFACE
def format_date(value: Optional[date]) -> str:
    """dd-Mon-yy, e.g. 05-Jul-25; empty string for None."""
    if value is None:
        return ""
    return value.strftime("%d-%b-%y")


_TRAILING_DIGITS = re.compile(r"(\d+)$")


# PUBLIC_INTERFACE
def next_order_number(last_number: Optional[str], today: date) -> str:
    """
    Next order number, e.g. TUC/25-26/JUL/343.

    The sequence continues from the trailing digits of the most recent order
    number regardless of its format.
    """
    seq = 1
    if last_number:
        match = _TRAILING_DIGITS.search(last_number.strip())
        if match:
            seq = int(match.group(1)) + 1
    yy = today.year % 100
    month = today.strftime("%b").upper()
    return f"TUC/{yy:02d}-{(yy + 1) % 100:02d}/{month}/{seq:03d}"


INVOICE_PREFIX = "TUC/IN/"
PO_PREFIX = "TUC/PO/"


def _next_in_series(prefix: str, last_number: Optional[str], width: int) -> str:
    seq = 1
    if last_number:
        match = re.search(re.escape(prefix) + r"(\d+)", last_number)
        if match:
            seq = int(match.group(1)) + 1
    return f"{prefix}{seq:0{width}d}"


# PUBLIC_INTERFACE
def next_invoice_number(last_number: Optional[str]) -> str:
    """Next invoice number in the TUC/IN/001 series."""
    return _next_in_series(INVOICE_PREFIX, last_number, 3)


# PUBLIC_INTERFACE
def next_po_number(last_number: Optional[str]) -> str:
    """
    Next purchase order number in the TUC/PO/0001 series. A last number in
    another format restarts the series.
    """
    return _next_in_series(PO_PREFIX, last_number, 4)


# PUBLIC_INTERFACE
def next_daily_number(prefix: str, last_number: Optional[str], today: date) -> str:
    """
    Next number of a per-day series such as GRN-20250705-001.

    The sequence restarts at 1 when the last number belongs to another day.
    """
    stamp = today.strftime("%Y%m%d")
    seq = 1
    if last_number and last_number.startswith(f"{prefix}-{stamp}-"):
        match = _TRAILING_DIGITS.search(last_number)
        if match:
            seq = int(match.group(1)) + 1
    return f"{prefix}-{stamp}-{seq:03d}"

from __future__ import annotations

import unittest
from datetime import date

from garment_erp.services.pricing import (
    calculate_average_unit_price,
    calculate_document_totals,
    calculate_line_amounts,
    calculate_order_totals,
    calculate_size_based_total,
    format_currency,
    format_date,
    next_daily_number,
    next_invoice_number,
    next_order_number,
    next_po_number,
)
from garment_erp.services.sizes import (
    aggregate_sizes,
    create_size_order,
    sort_size_quantities,
    sort_sizes,
)


class PricingTests(unittest.TestCase):
    def test_size_prices_override_default(self) -> None:
        sizes = {"S": 2, "XL": 3}
        prices = {"S": 100, "XL": 120}
        self.assertEqual(calculate_size_based_total(sizes, prices, 100), 560.0)
        self.assertEqual(calculate_average_unit_price(sizes, prices, 100), 112.0)
        self.assertEqual(calculate_size_based_total(sizes, None, 50), 250.0)
        self.assertEqual(calculate_average_unit_price({}, None, 75), 75.0)

    def test_order_totals(self) -> None:
        totals = calculate_order_totals([560, 440], gst_rate=5, advance_amount=200)
        self.assertEqual(totals.total_amount, 1000.0)
        self.assertEqual(totals.tax_amount, 50.0)
        self.assertEqual(totals.final_amount, 1050.0)
        self.assertEqual(totals.balance_amount, 850.0)

    def test_document_totals_group_gst_by_rate(self) -> None:
        lines = [
            (calculate_line_amounts(10, 100, 5), 5),
            (calculate_line_amounts(2, 250, 12), 12),
            (calculate_line_amounts(1, 100, 5), 5),
        ]
        totals = calculate_document_totals(lines, paid_amount=715)
        self.assertEqual(totals.subtotal, 1600.0)
        self.assertEqual(totals.tax_amount, 115.0)
        self.assertEqual(totals.total_amount, 1715.0)
        self.assertEqual(totals.balance_amount, 1000.0)
        self.assertEqual(list(totals.gst_breakdown), [5.0, 12.0])
        self.assertEqual(totals.gst_breakdown[5.0], {"taxable_value": 1100.0, "gst_amount": 55.0})

    def test_format_currency_uses_indian_grouping(self) -> None:
        self.assertEqual(format_currency(1234567.5), "₹12,34,567.50")
        self.assertEqual(format_currency(999.5), "₹999.50")
        self.assertEqual(format_currency(-1500), "-₹1,500.00")
        self.assertEqual(format_currency(None), "₹0.00")

    def test_format_date(self) -> None:
        self.assertEqual(format_date(date(2025, 7, 5)), "05-Jul-25")
        self.assertEqual(format_date(None), "")

    def test_order_number_continues_sequence(self) -> None:
        today = date(2025, 7, 5)
        self.assertEqual(next_order_number("TUC/25-26/JUN/342", today), "TUC/25-26/JUL/343")
        self.assertEqual(next_order_number(None, today), "TUC/25-26/JUL/001")
        self.assertEqual(next_order_number("legacy", today), "TUC/25-26/JUL/001")

    def test_invoice_and_daily_numbers(self) -> None:
        self.assertEqual(next_invoice_number("TUC/IN/009"), "TUC/IN/010")
        self.assertEqual(next_invoice_number(None), "TUC/IN/001")
        today = date(2025, 7, 5)
        self.assertEqual(next_daily_number("GRN", "GRN-20250705-004", today), "GRN-20250705-005")
        self.assertEqual(next_daily_number("GRN", "GRN-20250704-009", today), "GRN-20250705-001")

    def test_po_number_series(self) -> None:
        self.assertEqual(next_po_number(None), "TUC/PO/0001")
        self.assertEqual(next_po_number("TUC/PO/0041"), "TUC/PO/0042")
        self.assertEqual(next_po_number("PO-20250705-003"), "TUC/PO/0001")


class SizeTests(unittest.TestCase):
    def test_known_sizes_first_then_alphabetical(self) -> None:
        self.assertEqual(sort_sizes(["XL", "M", "Free", "S", "A"]), ["S", "M", "XL", "A", "Free"])

    def test_explicit_size_order(self) -> None:
        self.assertEqual(sort_sizes(["S", "L", "M"], {"M": 1, "S": 2}), ["M", "S", "L"])

    def test_sort_size_quantities(self) -> None:
        self.assertEqual(sort_size_quantities({"L": 1, "S": 2}), [("S", 2), ("L", 1)])

    def test_create_size_order_skips_blanks(self) -> None:
        self.assertEqual(create_size_order(["S", " ", "M "]), {"S": 1, "M": 3})

    def test_aggregate_sizes(self) -> None:
        self.assertEqual(aggregate_sizes([{"S": 2, "M": "3"}, {"S": 1, "L": 0}, None]), {"S": 3, "M": 3})

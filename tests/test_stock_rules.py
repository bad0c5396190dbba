from __future__ import annotations

import io
import unittest
from uuid import uuid4

from garment_erp.core.errors import BusinessRuleError
from garment_erp.services.exports import dataframe_records, parse_number, read_upload, template_dataframe
from garment_erp.services.inventory import plan_adjustment
from garment_erp.services.procurement import grn_status, inspect_quantities, po_receipt_status


class AdjustmentTests(unittest.TestCase):
    def test_add_remove_replace(self) -> None:
        self.assertEqual(plan_adjustment("ADD", 5, 3), (8, 3))
        self.assertEqual(plan_adjustment("REMOVE", 5, 2), (3, -2))
        self.assertEqual(plan_adjustment("REPLACE", 5, 2), (2, -3))

    def test_invalid_adjustments(self) -> None:
        with self.assertRaises(BusinessRuleError) as ctx:
            plan_adjustment("REMOVE", 5, 6)
        self.assertEqual(ctx.exception.details, {"current_stock": 5, "requested": 6})
        with self.assertRaises(BusinessRuleError):
            plan_adjustment("ADD", 5, -1)
        with self.assertRaises(BusinessRuleError):
            plan_adjustment("MOVE", 5, 1)


class GoodsReceiptTests(unittest.TestCase):
    def test_inspect_quantities(self) -> None:
        self.assertEqual(inspect_quantities("approved", 10), (10, 0.0))
        self.assertEqual(inspect_quantities("damaged", 10), (0.0, 10))
        self.assertEqual(inspect_quantities("pending", 10, approved=6, rejected=3), (6.0, 3.0))
        with self.assertRaises(BusinessRuleError):
            inspect_quantities("pending", 10, approved=8, rejected=3)

    def test_grn_status(self) -> None:
        self.assertEqual(grn_status([]), "under_inspection")
        self.assertEqual(grn_status(["approved", "pending"]), "under_inspection")
        self.assertEqual(grn_status(["approved", "approved"]), "approved")
        self.assertEqual(grn_status(["rejected", "damaged"]), "rejected")
        self.assertEqual(grn_status(["approved", "rejected"]), "partially_approved")

    def test_po_receipt_status(self) -> None:
        l1, l2 = uuid4(), uuid4()
        ordered = {l1: 10, l2: 5}
        self.assertEqual(po_receipt_status(ordered, {l1: 10, l2: 5}, "sent"), "received")
        self.assertEqual(po_receipt_status(ordered, {l1: 3}, "sent"), "partially_received")
        self.assertEqual(po_receipt_status(ordered, {}, "sent"), "sent")


class UploadTests(unittest.TestCase):
    def test_csv_columns_are_normalised(self) -> None:
        df = read_upload(b'Item Name,Unit Price\n Polo ,"1,200.50"\n', "items.csv")
        self.assertEqual(list(df.columns), ["item_name", "unit_price"])
        records = dataframe_records(df)
        self.assertEqual(records, [{"item_name": "Polo", "unit_price": "1,200.50"}])
        self.assertEqual(parse_number(records[0]["unit_price"]), 1200.5)

    def test_xlsx_template_reads_back(self) -> None:
        buffer = io.BytesIO()
        template_dataframe(["fabric_code", "fabric_name", "gsm"], {"fabric_code": "FAB-1", "gsm": 180}).to_excel(
            buffer, index=False, engine="openpyxl"
        )
        records = dataframe_records(read_upload(buffer.getvalue(), "fabrics.xlsx"))
        self.assertEqual(records[0]["fabric_code"], "FAB-1")
        self.assertEqual(records[0]["fabric_name"], "")
        self.assertEqual(parse_number(records[0]["gsm"]), 180.0)

    def test_rejected_uploads(self) -> None:
        with self.assertRaises(BusinessRuleError):
            read_upload(b"data", "notes.txt")
        with self.assertRaises(BusinessRuleError):
            read_upload(b"not a workbook", "items.xlsx")

    def test_parse_number(self) -> None:
        self.assertEqual(parse_number("", default=1.0), 1.0)
        self.assertEqual(parse_number(None), 0.0)
        with self.assertRaises(BusinessRuleError):
            parse_number("twelve")

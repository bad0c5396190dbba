from __future__ import annotations

from api_support import API, ApiTestCase


class ProcurementApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.supplier = self.post("/masters/suppliers", supplier_code="SUP-1", supplier_name="Sri Textiles")
        self.fabric = self.post("/masters/fabrics", fabric_code="FAB-1", fabric_name="Cotton Jersey", inventory=50)
        self.thread = self.post("/inventory/items", sku="THR-BLK", item_name="Black thread", current_stock=0)

    def post(self, path, **body) -> dict:
        res = self.client.post(f"{API}{path}", json=body, headers=self.admin)
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def create_po(self) -> dict:
        return self.post(
            "/procurement/purchase-orders",
            supplier_id=self.supplier["id"],
            items=[
                {
                    "item_type": "fabric",
                    "item_id": self.fabric["id"],
                    "item_name": "Cotton Jersey",
                    "quantity": 100,
                    "unit_price": 150,
                    "gst_rate": 5,
                },
                {
                    "item_type": "item",
                    "item_id": self.thread["id"],
                    "item_name": "Black thread",
                    "quantity": 20,
                    "unit_price": 30,
                    "gst_rate": 12,
                },
            ],
        )

    def receive(self, po, quantities):
        lines = {line["item_name"]: line["id"] for line in po["items"]}
        return self.client.post(
            f"{API}/procurement/grns",
            json={
                "purchase_order_id": po["id"],
                "items": [{"po_item_id": lines[name], "received_quantity": q} for name, q in quantities.items()],
            },
            headers=self.admin,
        )

    def inspect(self, grn, statuses):
        lines = {line["item_name"]: line["id"] for line in grn["items"]}
        return self.client.post(
            f"{API}/procurement/grns/{grn['id']}/inspection",
            json={"items": [{"grn_item_id": lines[name], "quality_status": s} for name, s in statuses.items()]},
            headers=self.admin,
        )

    def po_status(self, po) -> str:
        return self.client.get(f"{API}/procurement/purchase-orders/{po['id']}", headers=self.admin).json()["status"]

    def fabric_stock(self) -> float:
        return self.client.get(f"{API}/masters/fabrics/{self.fabric['id']}", headers=self.admin).json()["inventory"]

    def thread_stock(self) -> float:
        res = self.client.get(f"{API}/inventory/items/{self.thread['id']}", headers=self.admin)
        return res.json()["current_stock"]

    def test_purchase_order_numbers_and_totals(self) -> None:
        po = self.create_po()
        self.assertEqual(po["po_number"], "TUC/PO/0001")
        self.assertEqual(po["status"], "draft")
        self.assertEqual((po["subtotal"], po["tax_amount"], po["total_amount"]), (15600.0, 822.0, 16422.0))
        self.assertEqual(self.create_po()["po_number"], "TUC/PO/0002")

    def test_receipts_are_capped_per_po_line(self) -> None:
        po = self.create_po()
        res = self.receive(po, {"Cotton Jersey": 60})
        self.assertEqual(res.status_code, 201, res.text)
        self.assertTrue(res.json()["grn_number"].startswith("GRN-"))
        self.assertEqual(res.json()["status"], "received")
        self.assertEqual(self.po_status(po), "partially_received")

        over = self.receive(po, {"Cotton Jersey": 50})
        self.assertEqual(over.status_code, 400)
        self.assertEqual(over.json()["error"]["details"]["remaining"], 40.0)

        res = self.receive(po, {"Cotton Jersey": 40, "Black thread": 20})
        self.assertEqual(res.status_code, 201, res.text)
        self.assertEqual(self.po_status(po), "received")

    def test_approved_lines_post_stock_once(self) -> None:
        po = self.create_po()
        grn = self.receive(po, {"Cotton Jersey": 60, "Black thread": 20}).json()

        res = self.inspect(grn, {"Cotton Jersey": "approved", "Black thread": "rejected"})
        self.assertEqual(res.status_code, 200, res.text)
        body = res.json()
        self.assertEqual(body["status"], "partially_approved")
        lines = {line["item_name"]: line for line in body["items"]}
        self.assertTrue(lines["Cotton Jersey"]["stock_posted"])
        self.assertEqual(lines["Cotton Jersey"]["approved_quantity"], 60)
        self.assertFalse(lines["Black thread"]["stock_posted"])
        self.assertEqual(lines["Black thread"]["rejected_quantity"], 20)
        self.assertEqual((self.fabric_stock(), self.thread_stock()), (110, 0))

        res = self.inspect(grn, {"Cotton Jersey": "approved"})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(self.fabric_stock(), 110)

    def test_all_approved_receipt(self) -> None:
        po = self.create_po()
        grn = self.receive(po, {"Black thread": 20}).json()
        res = self.inspect(grn, {"Black thread": "approved"})
        self.assertEqual(res.json()["status"], "approved")
        self.assertEqual(self.thread_stock(), 20)

    def test_pending_inspection_cannot_exceed_received(self) -> None:
        po = self.create_po()
        grn = self.receive(po, {"Black thread": 10}).json()
        line_id = grn["items"][0]["id"]
        res = self.client.post(
            f"{API}/procurement/grns/{grn['id']}/inspection",
            json={
                "items": [
                    {
                        "grn_item_id": line_id,
                        "quality_status": "pending",
                        "approved_quantity": 8,
                        "rejected_quantity": 3,
                    }
                ]
            },
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.thread_stock(), 0)

from __future__ import annotations

from api_support import API, ApiTestCase

POLO = {"product_description": "Polo T-shirt", "sizes_quantities": {"S": 4, "M": 6}, "unit_price": 200}


class InvoiceApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.customer = self.create_customer("Acme Apparel")

    def create_invoice(self, **body):
        return self.client.post(f"{API}/invoices", json=body, headers=self.admin)

    def pay(self, invoice_id, amount):
        return self.client.post(f"{API}/invoices/{invoice_id}/payments", json={"amount": amount}, headers=self.admin)

    def test_lines_are_copied_from_the_order(self) -> None:
        order = self.create_order(self.customer["id"], [POLO])
        res = self.create_invoice(order_id=order["id"])
        self.assertEqual(res.status_code, 201, res.text)
        invoice = res.json()
        self.assertEqual(invoice["invoice_number"], "TUC/IN/001")
        self.assertEqual(invoice["customer_id"], self.customer["id"])
        self.assertEqual(invoice["status"], "draft")

        [line] = invoice["items"]
        self.assertEqual((line["quantity"], line["unit_price"], line["gst_rate"]), (10, 200, 18))
        self.assertEqual(
            (invoice["subtotal"], invoice["tax_amount"], invoice["total_amount"], invoice["balance_amount"]),
            (2000.0, 360.0, 2360.0, 2360.0),
        )

        second = self.create_invoice(order_id=order["id"]).json()
        self.assertEqual(second["invoice_number"], "TUC/IN/002")

    def test_gst_breakdown_groups_lines_by_rate(self) -> None:
        res = self.create_invoice(
            customer_id=self.customer["id"],
            items=[
                {"description": "Polo T-shirt", "quantity": 10, "unit_price": 100, "gst_rate": 5},
                {"description": "Screen printing", "quantity": 10, "unit_price": 50, "gst_rate": 18},
                {"description": "Hoodie", "quantity": 2, "unit_price": 500, "gst_rate": 5},
            ],
        )
        self.assertEqual(res.status_code, 201, res.text)
        invoice = res.json()
        self.assertEqual((invoice["subtotal"], invoice["tax_amount"], invoice["total_amount"]), (2500.0, 190.0, 2690.0))

        breakdown = self.client.get(f"{API}/invoices/{invoice['id']}/gst-breakdown", headers=self.admin).json()
        rows = sorted(breakdown["rows"], key=lambda r: r["gst_rate"])
        self.assertEqual(
            rows,
            [
                {"gst_rate": 5.0, "taxable_value": 2000.0, "gst_amount": 100.0},
                {"gst_rate": 18.0, "taxable_value": 500.0, "gst_amount": 90.0},
            ],
        )
        self.assertEqual(breakdown["total_amount"], 2690.0)

    def test_payments_move_status_and_cannot_overpay(self) -> None:
        order = self.create_order(self.customer["id"], [POLO])
        invoice = self.create_invoice(order_id=order["id"]).json()

        res = self.pay(invoice["id"], 1000)
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["status"], "partially_paid")
        self.assertEqual((res.json()["paid_amount"], res.json()["balance_amount"]), (1000.0, 1360.0))

        over = self.pay(invoice["id"], 2000)
        self.assertEqual(over.status_code, 400)
        self.assertEqual(over.json()["error"]["details"]["balance_amount"], 1360.0)

        res = self.pay(invoice["id"], 1360)
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["status"], "paid")
        self.assertEqual(res.json()["balance_amount"], 0)

        res = self.client.delete(f"{API}/invoices/{invoice['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 400)

    def test_invoice_needs_a_customer_or_order(self) -> None:
        res = self.create_invoice(items=[{"description": "Polo", "quantity": 1, "unit_price": 100}])
        self.assertEqual(res.status_code, 400)

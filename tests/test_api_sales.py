from __future__ import annotations

from api_support import API, ApiTestCase

POLO = {
    "product_description": "Polo T-shirt",
    "sizes_quantities": {"M": 10, "S": 5, "XL": 5},
    "size_prices": {"XL": 220},
    "unit_price": 200,
}
HOODIE = {"product_description": "Hoodie", "sizes_quantities": {"L": 4}, "unit_price": 500}


class CustomerApiTests(ApiTestCase):
    def test_crud(self) -> None:
        created = self.create_customer("Acme Apparel", city="Tiruppur", customer_tier="gold")
        self.assertEqual(created["customer_type"], "Retail")
        self.assertEqual(created["customer_tier"], "gold")

        res = self.client.patch(
            f"{API}/customers/{created['id']}", json={"city": "Coimbatore"}, headers=self.admin
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["city"], "Coimbatore")
        self.assertEqual(res.json()["company_name"], "Acme Apparel")

        self.create_customer("Blue Mills")
        found = self.client.get(f"{API}/customers", params={"search": "acme"}, headers=self.admin).json()
        self.assertEqual([c["company_name"] for c in found], ["Acme Apparel"])

        res = self.client.delete(f"{API}/customers/{created['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 204)
        res = self.client.get(f"{API}/customers/{created['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 404)

    def test_customer_with_orders_cannot_be_deleted(self) -> None:
        customer = self.create_customer()
        self.create_order(customer["id"], [HOODIE])
        res = self.client.delete(f"{API}/customers/{customer['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 409)

    def test_bulk_upload_reports_bad_rows(self) -> None:
        content = (
            "Company Name,City,Customer Type,Credit Limit\n"
            "Sun Knits,Erode,wholesale,\"25,000\"\n"
            ",Salem,Retail,0\n"
            "Moon Tex,Karur,Reseller,0\n"
        ).encode()
        res = self.client.post(
            f"{API}/customers/bulk-upload",
            files={"file": ("customers.csv", content, "text/csv")},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        body = res.json()
        self.assertEqual(body["inserted"], 1)
        self.assertEqual([e["row"] for e in body["errors"]], [2, 3])

        customers = self.client.get(f"{API}/customers", headers=self.admin).json()
        self.assertEqual(customers[0]["customer_type"], "Wholesale")
        self.assertEqual(customers[0]["credit_limit"], 25000.0)

    def test_export_csv(self) -> None:
        self.create_customer("Acme Apparel")
        res = self.client.get(f"{API}/customers/export", params={"format": "csv"}, headers=self.admin)
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.headers["content-type"].startswith("text/csv"))
        self.assertIn("Acme Apparel", res.text)


class OrderApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.customer = self.create_customer()

    def test_totals_are_computed_server_side(self) -> None:
        order = self.create_order(self.customer["id"], [POLO, HOODIE], gst_rate=5, advance_amount=1000)
        self.assertTrue(order["order_number"].startswith("TUC/"))
        self.assertTrue(order["order_number"].endswith("/001"))
        self.assertEqual(order["status"], "pending")

        polo = next(i for i in order["items"] if i["product_description"] == "Polo T-shirt")
        self.assertEqual(polo["quantity"], 20)
        self.assertEqual(polo["total_price"], 4100.0)

        self.assertEqual(order["total_amount"], 6100.0)
        self.assertEqual(order["tax_amount"], 305.0)
        self.assertEqual(order["final_amount"], 6405.0)
        self.assertEqual(order["balance_amount"], 5405.0)

    def test_gst_defaults_to_eighteen_percent(self) -> None:
        order = self.create_order(self.customer["id"], [HOODIE])
        self.assertEqual(order["gst_rate"], 18.0)
        self.assertEqual(order["tax_amount"], 360.0)
        self.assertEqual(order["final_amount"], 2360.0)

    def test_numbers_continue_the_sequence(self) -> None:
        self.create_order(self.customer["id"], [HOODIE])
        second = self.create_order(self.customer["id"], [HOODIE])
        self.assertTrue(second["order_number"].endswith("/002"))

    def test_sizes_are_aggregated_and_sorted(self) -> None:
        order = self.create_order(self.customer["id"], [POLO, HOODIE])
        res = self.client.get(f"{API}/orders/{order['id']}/sizes", headers=self.admin)
        body = res.json()
        self.assertEqual(body["total_quantity"], 24)
        self.assertEqual([s["size_name"] for s in body["sizes"]], ["S", "M", "L", "XL"])

    def test_update_items_recomputes_totals(self) -> None:
        order = self.create_order(self.customer["id"], [POLO], gst_rate=5)
        res = self.client.patch(f"{API}/orders/{order['id']}", json={"items": [HOODIE]}, headers=self.admin)
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(len(res.json()["items"]), 1)
        self.assertEqual(res.json()["total_amount"], 2000.0)
        self.assertEqual(res.json()["final_amount"], 2100.0)

    def test_status_change(self) -> None:
        order = self.create_order(self.customer["id"], [HOODIE])
        res = self.client.put(
            f"{API}/orders/{order['id']}/status", json={"status": "confirmed"}, headers=self.admin
        )
        self.assertEqual(res.json()["status"], "confirmed")
        res = self.client.put(f"{API}/orders/{order['id']}/status", json={"status": "shipped"}, headers=self.admin)
        self.assertEqual(res.status_code, 422)

    def test_unknown_customer(self) -> None:
        res = self.client.post(
            f"{API}/orders",
            json={"customer_id": "00000000-0000-0000-0000-000000000000", "items": [HOODIE]},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 400)

    def test_order_needs_items(self) -> None:
        res = self.client.post(f"{API}/orders", json={"customer_id": self.customer["id"], "items": []}, headers=self.admin)
        self.assertEqual(res.status_code, 422)

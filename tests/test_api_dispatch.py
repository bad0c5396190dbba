from __future__ import annotations

from datetime import date

from api_support import API, ApiTestCase

POLO = {"product_description": "Polo T-shirt", "sizes_quantities": {"S": 4, "M": 6}, "unit_price": 200}


class DispatchApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        customer = self.create_customer("Acme Apparel", address="12 Mill Road, Tiruppur")
        self.order = self.create_order(customer["id"], [POLO])
        self.approve_pieces(self.order, self.create_batch("B-01"), {"S": 2, "M": 3})

    def dispatch(self, sizes, headers=None):
        return self.client.post(
            f"{API}/dispatch",
            json={
                "order_id": self.order["id"],
                "items": [{"size_name": s, "quantity": q} for s, q in sizes.items()],
            },
            headers=headers or self.admin,
        )

    def dispatchable(self) -> dict:
        res = self.client.get(f"{API}/dispatch/orders/{self.order['id']}/dispatchable", headers=self.admin)
        self.assertEqual(res.status_code, 200, res.text)
        return res.json()

    def test_only_approved_pieces_not_yet_shipped_can_go(self) -> None:
        self.assertEqual(
            {k: v for k, v in self.dispatchable().items() if k != "order_id"},
            {"approved_quantity": 5, "dispatched_quantity": 0, "available_quantity": 5},
        )

        res = self.dispatch({"S": 2, "M": 1})
        self.assertEqual(res.status_code, 201, res.text)
        body = res.json()
        self.assertEqual(body["total_quantity"], 3)
        self.assertEqual(body["status"], "pending")
        self.assertTrue(body["dispatch_number"].startswith("DSP-"))
        self.assertEqual(body["delivery_address"], "12 Mill Road, Tiruppur")

        over = self.dispatch({"M": 3})
        self.assertEqual(over.status_code, 400)
        details = over.json()["error"]["details"]
        self.assertEqual((details["dispatched_quantity"], details["available_quantity"]), (3, 2))

        self.assertEqual(self.dispatch({"M": 2}).status_code, 201)
        self.assertEqual(self.dispatchable()["available_quantity"], 0)

    def test_empty_dispatch_is_rejected(self) -> None:
        self.assertEqual(self.dispatch({"S": 0}).status_code, 400)

    def test_delivery_stamps_actual_delivery(self) -> None:
        created = self.dispatch({"S": 2}).json()
        self.assertIsNone(created["actual_delivery"])

        res = self.client.put(
            f"{API}/dispatch/{created['id']}/status",
            json={"status": "shipped", "courier_name": "Blue Dart", "tracking_number": "BD123"},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertIsNone(res.json()["actual_delivery"])
        self.assertEqual(res.json()["courier_name"], "Blue Dart")

        res = self.client.put(
            f"{API}/dispatch/{created['id']}/status", json={"status": "delivered"}, headers=self.admin
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["actual_delivery"], date.today().isoformat())

        res = self.client.delete(f"{API}/dispatch/{created['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 400)

    def test_pending_dispatch_can_be_deleted(self) -> None:
        created = self.dispatch({"M": 3}).json()
        res = self.client.delete(f"{API}/dispatch/{created['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 204)
        self.assertEqual(self.dispatchable()["available_quantity"], 5)

    def test_sales_can_view_but_not_dispatch(self) -> None:
        sales = self.create_user("sales@example.com", ["sales manager"])
        res = self.client.get(f"{API}/dispatch/orders/{self.order['id']}/dispatchable", headers=sales)
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(self.dispatch({"S": 1}, headers=sales).status_code, 403)
